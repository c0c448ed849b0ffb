"""
Flow Registry.

Maps names to flow factories. A factory builds a fresh node graph on every
call, so concurrent runs never share node instances.
"""

from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass
import logging

from actionflow.engine.flow import Flow


logger = logging.getLogger(__name__)


@dataclass
class FlowTemplate:
    """
    A registered flow factory.

    Attributes:
        name: Unique identifier for the flow
        factory: Zero-argument callable returning a new Flow
        description: Human-readable description
    """
    name: str
    factory: Callable[[], Flow]
    description: str = ""

    def build(self) -> Flow:
        """Build a new Flow instance."""
        return self.factory()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize template metadata."""
        flow = self.build()
        return {
            "name": self.name,
            "description": self.description,
            "start_node": flow.start_node.name,
            "nodes": [node.name for node in flow.nodes()],
        }


class FlowRegistry:
    """
    Registry for flow factories.

    Usage:
        registry = FlowRegistry()

        @registry.register("greeting")
        def build_greeting_flow() -> Flow:
            return Flow(GreetNode())

        flow = registry.get("greeting").build()
    """

    def __init__(self):
        self._templates: Dict[str, FlowTemplate] = {}

    def register(self, name: Optional[str] = None, description: str = "") -> Callable:
        """
        Decorator to register a flow factory.

        Args:
            name: Flow name (defaults to function name)
            description: Flow description (defaults to docstring)
        """
        def decorator(factory: Callable[[], Flow]) -> Callable[[], Flow]:
            self.add(factory, name, description)
            return factory

        return decorator

    def add(
        self,
        factory: Callable[[], Flow],
        name: Optional[str] = None,
        description: str = "",
    ) -> FlowTemplate:
        """Directly add a flow factory (non-decorator version)."""
        flow_name = name or factory.__name__
        template = FlowTemplate(
            name=flow_name,
            factory=factory,
            description=(description or factory.__doc__ or "").strip(),
        )
        self._templates[flow_name] = template
        logger.debug(f"Registered flow: {flow_name}")
        return template

    def get(self, name: str) -> Optional[FlowTemplate]:
        """Get a flow template by name."""
        return self._templates.get(name)

    def remove(self, name: str) -> bool:
        """Remove a flow template from the registry."""
        if name in self._templates:
            del self._templates[name]
            return True
        return False

    def list_flows(self) -> List[Dict[str, Any]]:
        """List all registered flows with their metadata."""
        return [template.to_dict() for template in self]

    def __contains__(self, name: str) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self):
        return iter(self._templates.values())


# Global flow registry instance
flow_registry = FlowRegistry()


def register_flow(name: Optional[str] = None, description: str = "") -> Callable:
    """Convenience decorator to register a flow in the global registry."""
    return flow_registry.register(name, description)
