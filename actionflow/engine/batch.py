"""
Batch Nodes.

Batch nodes run the execute phase once per item. ``prepare`` returns an
iterable of items, ``execute`` receives a single item, and ``post`` receives
the list of results in item order. Retry and fallback apply per item.
"""

from typing import Any, Iterable, List
import asyncio

from actionflow.engine.node import BaseNode


class BatchNode(BaseNode):
    """Runs execute for each prepared item, one after another."""

    async def _execute_with_retry(self, items: Iterable[Any]) -> List[Any]:
        results = []
        for item in items or ():
            results.append(await super()._execute_with_retry(item))
        return results


class ParallelBatchNode(BaseNode):
    """
    Runs execute for all prepared items concurrently.

    Results keep the order of the items. The first failing item (after its
    own retries and fallback) propagates; the items still running are
    cancelled and awaited before it does.
    """

    async def _execute_with_retry(self, items: Iterable[Any]) -> List[Any]:
        items = list(items or ())
        if not items:
            return []

        tasks = [
            asyncio.ensure_future(super(ParallelBatchNode, self)._execute_with_retry(item))
            for item in items
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
