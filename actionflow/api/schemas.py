"""
Pydantic Schemas for API Request/Response Models.

These schemas define the structure of data flowing through the API,
providing automatic validation and documentation.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

from actionflow.engine.state import StepRecord


# ============================================================
# Enums
# ============================================================

class RunStatus(str, Enum):
    """Outcome of a flow run."""
    COMPLETED = "completed"
    FAILED = "failed"


# ============================================================
# Flow Schemas
# ============================================================

class FlowInfo(BaseModel):
    """Information about a registered flow."""
    name: str
    description: str = ""
    start_node: str
    nodes: List[str]
    mermaid_diagram: Optional[str] = None


class FlowListResponse(BaseModel):
    """Response listing all registered flows."""
    flows: List[FlowInfo]
    total: int


# ============================================================
# Execution Schemas
# ============================================================

class FlowRunRequest(BaseModel):
    """Request to run a registered flow."""
    shared: Dict[str, Any] = Field(
        default_factory=dict,
        description="Initial shared state handed to the first node",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "shared": {"topic": "graph engines", "min_words": 12}
            }
        }
    )


class FlowRunResponse(BaseModel):
    """Response after running a flow."""
    run_id: str = Field(..., description="Unique identifier for this run")
    flow: str
    status: RunStatus
    action: Optional[str] = Field(None, description="Action returned by the last node")
    shared: Dict[str, Any]
    steps: List[StepRecord]
    duration_ms: float
    error: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "run_id": "3f0c1c5e-8f1e-4d0a-9a53-6c1b2f7d9e10",
                "flow": "counter",
                "status": "completed",
                "action": None,
                "shared": {"count": 3, "finished": True},
                "steps": [
                    {
                        "step": 1,
                        "node": "count",
                        "action": "loop",
                        "started_at": "2024-01-01T12:00:00",
                        "duration_ms": 0.4,
                    }
                ],
                "duration_ms": 2.1,
                "error": None,
            }
        }
    )


# ============================================================
# Error Schemas
# ============================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int
