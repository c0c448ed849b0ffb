#!/usr/bin/env python3
"""
Simple run script for the ActionFlow API.

Usage:
    python run.py

Or with custom settings:
    HOST=127.0.0.1 PORT=8080 python run.py
"""

import uvicorn
import os

from actionflow.config import settings


def main():
    """Run the FastAPI application."""
    reload = os.getenv("RELOAD", "true").lower() == "true"

    print(f"""
ActionFlow
  Server:    http://{settings.HOST}:{settings.PORT}
  API Docs:  http://{settings.HOST}:{settings.PORT}/docs
  Flows:     http://{settings.HOST}:{settings.PORT}/flows
    """)

    uvicorn.run(
        "actionflow.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
