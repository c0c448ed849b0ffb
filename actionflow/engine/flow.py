"""
Flow - the traversal engine.

A Flow walks a graph of nodes starting from its start node. Each node runs
against the shared state and returns an action; the Flow follows the edge
labelled with that action (or "default" when the node returns None) and stops
as soon as no such edge exists.

There is no step limit and no cycle detection. A self-loop without an
escaping edge runs until the surrounding task is cancelled.
"""

from typing import Callable, Dict, List, Optional, Tuple
from datetime import datetime
import time
import logging

from actionflow.engine.node import AnyNode
from actionflow.engine.state import Action, DEFAULT_ACTION, SharedState, StepRecord


logger = logging.getLogger(__name__)


def _mermaid_text(text: str) -> str:
    """Escape characters that end a Mermaid label."""
    return text.replace('"', "#quot;").replace("|", "#124;")


class Flow:
    """
    Runs a node graph from a start node.

    Usage:
        a >> b
        b - "retry" >> a
        flow = Flow(a)
        action = await flow.run({"input": "data"})
    """

    def __init__(
        self,
        start: AnyNode,
        on_step: Optional[Callable[[StepRecord], None]] = None,
    ):
        """
        Args:
            start: The first node to run
            on_step: Optional callback receiving a StepRecord after each node
        """
        self.start_node = start
        self.on_step = on_step

    async def run(self, shared: SharedState) -> Optional[Action]:
        """
        Run the graph against ``shared``.

        Returns the action of the last node executed. Errors raised by a node
        propagate unchanged; mutations already made to ``shared`` are kept.
        """
        current: Optional[AnyNode] = self.start_node
        last_action: Optional[Action] = None
        step = 0

        while current is not None:
            step += 1
            started_at = datetime.now()
            node_start_time = time.perf_counter()

            last_action = await current.run(shared)

            self._notify(StepRecord(
                step=step,
                node=current.name,
                action=last_action,
                started_at=started_at,
                duration_ms=(time.perf_counter() - node_start_time) * 1000,
            ))

            edge = DEFAULT_ACTION if last_action is None else last_action
            next_node = current.successors.get(edge)
            if next_node is not None:
                logger.debug(f"Transition: {current.name} -[{edge}]-> {next_node.name}")
            current = next_node

        logger.info(f"Flow finished after {step} step(s) with action {last_action!r}")
        return last_action

    def _notify(self, record: StepRecord) -> None:
        if not self.on_step:
            return
        try:
            self.on_step(record)
        except Exception as e:
            logger.warning(f"Step callback failed: {e}")

    # ============================================================
    # Graph inspection
    # ============================================================

    def nodes(self) -> List[AnyNode]:
        """All nodes reachable from the start node, breadth-first."""
        seen: Dict[int, AnyNode] = {}
        queue = [self.start_node]

        while queue:
            node = queue.pop(0)
            if id(node) in seen:
                continue
            seen[id(node)] = node
            queue.extend(node.successors.values())

        return list(seen.values())

    def edges(self) -> List[Tuple[AnyNode, Action, AnyNode]]:
        """All (source, action, target) edges reachable from the start node."""
        return [
            (source, action, target)
            for source in self.nodes()
            for action, target in source.successors.items()
        ]

    def to_mermaid(self) -> str:
        """Generate a Mermaid diagram of the graph."""
        nodes = self.nodes()
        ids = {id(node): f"n{i}" for i, node in enumerate(nodes)}
        lines = ["graph TD"]

        for node in nodes:
            label = _mermaid_text(node.name)
            if node is self.start_node:
                label += " (start)"
            lines.append(f'    {ids[id(node)]}["{label}"]')

        for source, action, target in self.edges():
            if action == DEFAULT_ACTION:
                lines.append(f"    {ids[id(source)]} --> {ids[id(target)]}")
            else:
                lines.append(f"    {ids[id(source)]} -->|{_mermaid_text(action)}| {ids[id(target)]}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Flow(start='{self.start_node.name}')"
