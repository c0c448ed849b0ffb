"""
Tests for the batch node variants.
"""

import pytest
import asyncio
from typing import Any, Dict, List

from actionflow.engine.batch import BatchNode, ParallelBatchNode
from actionflow.engine.flow import Flow


class SquareBatch(BatchNode):
    """Squares shared["numbers"]; fails once on each number in ``flaky``."""

    def __init__(self, flaky=(), **kwargs):
        super().__init__(**kwargs)
        self.flaky = set(flaky)
        self.calls: List[int] = []

    async def prepare(self, shared: Dict[str, Any]) -> List[int]:
        return shared["numbers"]

    async def execute(self, number: int) -> int:
        self.calls.append(number)
        if number in self.flaky:
            self.flaky.discard(number)
            raise ValueError(f"flaky {number}")
        return number * number

    async def post(self, shared: Dict[str, Any], numbers, squares: List[int]):
        shared["squares"] = squares
        return "squared"


class SleepyParallel(ParallelBatchNode):
    """Sleeps per item, tracking how many items run at once."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.active = 0
        self.peak = 0

    async def prepare(self, shared: Dict[str, Any]) -> List[float]:
        return shared["delays"]

    async def execute(self, delay: float) -> float:
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(delay)
        self.active -= 1
        if delay < 0.001:
            raise RuntimeError("too fast")
        return delay

    async def execute_fallback(self, delay: float, error: Exception) -> float:
        return -1.0

    async def post(self, shared: Dict[str, Any], delays, results: List[float]):
        shared["results"] = results


class TestBatchNode:
    """Tests for BatchNode."""

    @pytest.mark.asyncio
    async def test_results_in_item_order(self):
        """Test that each item is executed once, in order."""
        n = SquareBatch()
        shared = {"numbers": [1, 2, 3]}

        action = await n.run(shared)

        assert action == "squared"
        assert shared["squares"] == [1, 4, 9]
        assert n.calls == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_retry_per_item(self):
        """Test that a failing item is retried on its own."""
        n = SquareBatch(flaky=[2], max_retries=2)
        shared = {"numbers": [1, 2, 3]}

        await n.run(shared)

        assert shared["squares"] == [1, 4, 9]
        assert n.calls == [1, 2, 2, 3]

    @pytest.mark.asyncio
    async def test_exhausted_item_propagates(self):
        """Test that an item failing all attempts aborts the node."""
        n = SquareBatch(flaky=[2])
        shared = {"numbers": [1, 2, 3]}

        with pytest.raises(ValueError, match="flaky 2"):
            await n.run(shared)

        assert n.calls == [1, 2]
        assert "squares" not in shared

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        """Test that no items means no execute calls."""
        n = SquareBatch()
        shared: Dict[str, Any] = {"numbers": []}

        await n.run(shared)

        assert shared["squares"] == []
        assert n.calls == []

    @pytest.mark.asyncio
    async def test_batch_node_in_flow(self):
        """Test a batch node wired into a flow like any other node."""
        n = SquareBatch()
        n - "squared" >> SquareBatch()
        shared = {"numbers": [2, 3]}

        await Flow(n).run(shared)

        assert shared["squares"] == [4, 9]


class TestParallelBatchNode:
    """Tests for ParallelBatchNode."""

    @pytest.mark.asyncio
    async def test_runs_concurrently_in_order(self):
        """Test concurrent execution with results kept in item order."""
        n = SleepyParallel()
        shared = {"delays": [0.05, 0.01, 0.03]}

        await n.run(shared)

        assert shared["results"] == [0.05, 0.01, 0.03]
        assert n.peak == 3

    @pytest.mark.asyncio
    async def test_fallback_per_item(self):
        """Test that fallback replaces only the failing item's result."""
        n = SleepyParallel()
        shared = {"delays": [0.01, 0, 0.02]}

        await n.run(shared)

        assert shared["results"] == [0.01, -1.0, 0.02]

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        """Test that no items gives an empty result list."""
        n = SleepyParallel()
        shared: Dict[str, Any] = {"delays": []}

        await n.run(shared)

        assert shared["results"] == []
        assert n.peak == 0

    @pytest.mark.asyncio
    async def test_first_error_cancels_siblings(self):
        """Test that a failing item aborts the node and cancels the others."""
        class LateWriter(ParallelBatchNode):
            def __init__(self, **kwargs):
                super().__init__(**kwargs)
                self.cancelled = []
                self.shared: Dict[str, Any] = {}

            async def prepare(self, shared: Dict[str, Any]) -> List[float]:
                self.shared = shared
                return shared["delays"]

            async def execute(self, delay: float) -> float:
                if delay == 0:
                    raise ValueError("item failed")
                try:
                    await asyncio.sleep(delay)
                except asyncio.CancelledError:
                    self.cancelled.append(delay)
                    raise
                self.shared["late_write"] = True
                return delay

            async def post(self, shared: Dict[str, Any], delays, results: List[float]):
                shared["results"] = results

        n = LateWriter()
        shared: Dict[str, Any] = {"delays": [0, 0.2]}

        with pytest.raises(ValueError, match="item failed"):
            await n.run(shared)

        assert n.cancelled == [0.2]
        await asyncio.sleep(0.3)
        assert shared == {"delays": [0, 0.2]}
