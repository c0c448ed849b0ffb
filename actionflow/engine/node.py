"""
Node Definition for Workflow Engine.

Nodes are the building blocks of a workflow. Each node runs a three-phase
lifecycle against the shared state:

    prepare(shared)                         -> prep_result
    execute(prep_result)                    -> exec_result   (retried)
    post(shared, prep_result, exec_result)  -> action

The action returned by post selects the outgoing edge the Flow follows next.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Optional,
    Protocol,
    TypeVar,
    final,
    runtime_checkable,
)
import asyncio
import inspect
import functools
import logging

from actionflow.engine.state import Action, DEFAULT_ACTION, SharedState


logger = logging.getLogger(__name__)

PrepT = TypeVar("PrepT")
ExecT = TypeVar("ExecT")


@runtime_checkable
class AnyNode(Protocol):
    """
    The capability every graph vertex exposes to the Flow.

    Concrete nodes keep their prepare/execute result types to themselves;
    the traversal only needs these members.
    """

    name: str
    params: Dict[str, Any]
    successors: Dict[Action, "AnyNode"]

    async def run(self, shared: SharedState) -> Optional[Action]:
        ...


async def call_phase(func: Callable[..., Any], *args: Any) -> Any:
    """
    Invoke a node phase, sync or async.

    Coroutine functions are awaited directly. Plain functions run in the
    default executor so they do not block the event loop; if one returns an
    awaitable (an async method behind a sync decorator), that is awaited too.
    """
    if inspect.iscoroutinefunction(func):
        return await func(*args)
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, functools.partial(func, *args))
    if inspect.isawaitable(result):
        result = await result
    return result


class BaseNode(ABC, Generic[PrepT, ExecT]):
    """
    A unit of work in the workflow graph.

    Subclasses implement ``prepare``, ``execute`` and ``post`` (as ``async def``
    or plain ``def``) and may override ``execute_fallback``.

    Attributes:
        max_retries: Number of execute attempts (1 means no retry)
        wait_seconds: Delay between execute attempts
        successors: Outgoing edges, action label -> node
        params: Free-form parameters for the node's own logic
        name: Display name used in logs and step records
    """

    def __init__(
        self,
        max_retries: int = 1,
        wait_seconds: float = 0,
        name: Optional[str] = None,
    ):
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        if wait_seconds < 0:
            raise ValueError(f"wait_seconds cannot be negative, got {wait_seconds}")

        self.max_retries = max_retries
        self.wait_seconds = wait_seconds
        self.name = name or type(self).__name__
        self.params: Dict[str, Any] = {}
        self.successors: Dict[Action, AnyNode] = {}

    # ------------------------------------------------------------
    # Lifecycle phases
    # ------------------------------------------------------------

    @abstractmethod
    def prepare(self, shared: SharedState) -> PrepT:
        """Read the shared state and produce the input for execute."""

    @abstractmethod
    def execute(self, prep_result: PrepT) -> ExecT:
        """Compute a result from the prepare result. Failures are retried."""

    @abstractmethod
    def post(
        self, shared: SharedState, prep_result: PrepT, exec_result: ExecT
    ) -> Optional[Action]:
        """Write results to the shared state and return the next action."""

    def execute_fallback(self, prep_result: PrepT, error: Exception) -> ExecT:
        """
        Called once all execute attempts have failed.

        Re-raises the error by default. Override to return a degraded result
        instead.
        """
        raise error

    # ------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------

    @final
    async def run(self, shared: SharedState) -> Optional[Action]:
        """Run prepare, the retrying execute, then post. Returns post's action."""
        logger.debug(f"Running node '{self.name}'")
        prep_result = await call_phase(self.prepare, shared)
        exec_result = await self._execute_with_retry(prep_result)
        return await call_phase(self.post, shared, prep_result, exec_result)

    async def _execute_with_retry(self, prep_result: Any) -> Any:
        for attempt in range(self.max_retries):
            try:
                return await call_phase(self.execute, prep_result)
            except Exception as e:
                if attempt == self.max_retries - 1:
                    return await call_phase(self.execute_fallback, prep_result, e)
                logger.info(
                    f"Node '{self.name}' attempt {attempt + 1}/{self.max_retries} "
                    f"failed ({type(e).__name__}: {e}), retrying"
                )
                if self.wait_seconds > 0:
                    await asyncio.sleep(self.wait_seconds)

        raise RuntimeError(
            f"Node '{self.name}' made no execute attempt (max_retries={self.max_retries})"
        )

    # ------------------------------------------------------------
    # Graph wiring
    # ------------------------------------------------------------

    def set_params(self, params: Dict[str, Any]) -> "BaseNode[PrepT, ExecT]":
        """Replace the node's params. Returns self for chaining."""
        self.params = dict(params)
        return self

    def set_next(self, node: AnyNode, action: Action = DEFAULT_ACTION) -> AnyNode:
        """Register ``node`` as the successor for ``action``, replacing any existing edge."""
        if action in self.successors:
            logger.debug(
                f"Overwriting successor for action '{action}' on node '{self.name}'"
            )
        self.successors[action] = node
        return node

    def get_next(self, action: Optional[Action] = None) -> Optional[AnyNode]:
        """Get the successor for ``action`` (or the default edge)."""
        return self.successors.get(DEFAULT_ACTION if action is None else action)

    def connect_to(self, node: AnyNode) -> AnyNode:
        """Add a default edge to ``node`` and return it, so calls can be chained."""
        return self.set_next(node)

    def connect_on_action(self, action: Action, node: AnyNode) -> AnyNode:
        """Add an edge labelled ``action`` to ``node`` and return it."""
        return self.set_next(node, action)

    def on(self, action: Action) -> "ConditionalTransition":
        """Start a labelled edge: ``node.on("approve").connect_to(publish)``."""
        return ConditionalTransition(self, action)

    def __rshift__(self, other: AnyNode) -> AnyNode:
        return self.connect_to(other)

    def __sub__(self, action: Action) -> "ConditionalTransition":
        if isinstance(action, str):
            return ConditionalTransition(self, action)
        raise TypeError(f"Action must be a string, got {type(action).__name__}")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name='{self.name}', "
            f"successors={list(self.successors.keys())})"
        )


@dataclass(frozen=True)
class ConditionalTransition:
    """A node paired with a pending action label, waiting for its target."""

    node: BaseNode
    action: Action

    def connect_to(self, target: AnyNode) -> AnyNode:
        return self.node.set_next(target, self.action)

    def __rshift__(self, target: AnyNode) -> AnyNode:
        return self.connect_to(target)
