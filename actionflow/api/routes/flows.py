"""
Flow API Routes.

Endpoints for listing and running the registered flows.
"""

from fastapi import APIRouter, HTTPException, status
import asyncio
import logging
import time

from actionflow.api.schemas import (
    ErrorResponse,
    FlowInfo,
    FlowListResponse,
    FlowRunRequest,
    FlowRunResponse,
    RunStatus,
)
from actionflow.config import settings
from actionflow.engine.state import RunTrace
from actionflow.workflows.registry import FlowTemplate, flow_registry


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flows", tags=["Flows"])


def _get_template(name: str) -> FlowTemplate:
    template = flow_registry.get(name)
    if not template:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Flow '{name}' not found",
        )
    return template


@router.get(
    "/",
    response_model=FlowListResponse,
)
async def list_flows() -> FlowListResponse:
    """List all registered flows."""
    flows = [FlowInfo(**info) for info in flow_registry.list_flows()]
    return FlowListResponse(flows=flows, total=len(flows))


@router.get(
    "/{name}",
    response_model=FlowInfo,
    responses={404: {"model": ErrorResponse}},
)
async def get_flow(name: str) -> FlowInfo:
    """Get a registered flow and its Mermaid diagram."""
    template = _get_template(name)
    return FlowInfo(
        **template.to_dict(),
        mermaid_diagram=template.build().to_mermaid(),
    )


@router.post(
    "/{name}/run",
    response_model=FlowRunResponse,
    responses={
        404: {"model": ErrorResponse},
        504: {"model": ErrorResponse, "description": "Execution timed out"},
    },
)
async def run_flow(name: str, request: FlowRunRequest) -> FlowRunResponse:
    """
    Run a registered flow with the given shared state.

    A node error does not fail the request: the response carries
    status "failed", the error text and the shared state as the nodes
    left it.
    """
    template = _get_template(name)
    trace = RunTrace()
    flow = template.build()
    flow.on_step = trace
    shared = dict(request.shared)

    logger.info(f"Starting run {trace.run_id} of flow '{name}'")
    start_time = time.perf_counter()
    action = None
    error = None

    try:
        action = await asyncio.wait_for(flow.run(shared), settings.EXECUTION_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning(f"Run {trace.run_id} timed out after {settings.EXECUTION_TIMEOUT}s")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=f"Flow '{name}' did not finish within {settings.EXECUTION_TIMEOUT}s",
        )
    except Exception as e:
        logger.exception(f"Run {trace.run_id} failed: {e}")
        error = f"{type(e).__name__}: {e}"

    run_status = RunStatus.FAILED if error else RunStatus.COMPLETED
    logger.info(f"Run {trace.run_id} {run_status.value} after {len(trace)} step(s)")

    return FlowRunResponse(
        run_id=trace.run_id,
        flow=name,
        status=run_status,
        action=action,
        shared=shared,
        steps=trace.steps,
        duration_ms=(time.perf_counter() - start_time) * 1000,
        error=error,
    )
