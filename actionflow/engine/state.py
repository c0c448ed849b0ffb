"""
Shared State and Run Observation for the Workflow Engine.

The shared state is a plain mutable dictionary handed by reference to every
node of a run. The engine never reads or writes any key of its own; all keys
belong to the nodes. Step records are kept outside of it.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
import uuid


# Outcome label returned by a node's post phase
Action = str

# Label of the implicit edge followed when post returns no action
DEFAULT_ACTION: Action = "default"

# The state threaded through a flow run
SharedState = Dict[str, Any]


class StepRecord(BaseModel):
    """A single completed node execution within a flow run."""

    step: int
    node: str
    action: Optional[Action] = None
    started_at: datetime = Field(default_factory=datetime.now)
    duration_ms: float = 0.0


class RunTrace:
    """
    Collects the step records of one flow run.

    Pass an instance as the ``on_step`` callback of a Flow:

        trace = RunTrace()
        flow = Flow(start, on_step=trace)
        await flow.run(shared)
        trace.history()
    """

    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id or str(uuid.uuid4())
        self.steps: List[StepRecord] = []

    def __call__(self, record: StepRecord) -> None:
        self.steps.append(record)

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def visited(self) -> List[str]:
        """Node names in execution order."""
        return [s.node for s in self.steps]

    def history(self) -> List[Dict[str, Any]]:
        """Get the recorded steps as a list of dictionaries."""
        return [
            {
                "step": s.step,
                "node": s.node,
                "action": s.action,
                "started_at": s.started_at.isoformat(),
                "duration_ms": s.duration_ms,
            }
            for s in self.steps
        ]
