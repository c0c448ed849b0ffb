"""
Workflows package - Flow registry and demo workflows.
"""

from actionflow.workflows.registry import FlowRegistry, FlowTemplate, flow_registry, register_flow
from actionflow.workflows.publishing import create_counter_flow, create_publishing_flow

__all__ = [
    "FlowRegistry",
    "FlowTemplate",
    "flow_registry",
    "register_flow",
    "create_counter_flow",
    "create_publishing_flow",
]
