"""
ActionFlow - FastAPI Application Entry Point.

Exposes the registered demo flows over HTTP.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from actionflow.config import settings
from actionflow.api.routes import flows
from actionflow.workflows.registry import flow_registry

# Import demo workflows to register them
import actionflow.workflows.publishing  # noqa: F401


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION} "
        f"with {len(flow_registry)} registered flow(s)"
    )
    yield
    logger.info("Shutting down...")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
## ActionFlow API

A minimal graph workflow engine: nodes run prepare/execute/post and return
an action; the flow follows the edge labelled with that action.

### Quick Start
1. List registered flows: `GET /flows`
2. Inspect a flow and its diagram: `GET /flows/{name}`
3. Run it: `POST /flows/{name}/run` with `{"shared": {...}}`

### Demo Flows
- `publishing`: write, review, revise, publish
- `counter`: self-loop counting up to `target`
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(flows.router)


# ============================================================
# Root Endpoints
# ============================================================

@app.get("/", tags=["Root"])
async def root():
    """API root - returns basic info and links."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "A minimal graph workflow engine",
        "docs": "/docs",
        "redoc": "/redoc",
        "endpoints": {
            "flows": "/flows",
            "flow_info": "/flows/{name}",
            "run": "/flows/{name}/run",
        },
    }


@app.get("/health", tags=["Root"])
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "flows_count": len(flow_registry),
    }


# ============================================================
# Error Handlers
# ============================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logger.exception(f"Unhandled error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
        },
    )
