"""
Engine package - Core workflow orchestration components.
"""

from actionflow.engine.state import Action, DEFAULT_ACTION, SharedState, StepRecord, RunTrace
from actionflow.engine.node import AnyNode, BaseNode, ConditionalTransition
from actionflow.engine.flow import Flow
from actionflow.engine.batch import BatchNode, ParallelBatchNode

__all__ = [
    "Action",
    "DEFAULT_ACTION",
    "SharedState",
    "StepRecord",
    "RunTrace",
    "AnyNode",
    "BaseNode",
    "ConditionalTransition",
    "Flow",
    "BatchNode",
    "ParallelBatchNode",
]
