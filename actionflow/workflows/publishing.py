"""
Demo Workflows.

publishing: write a draft, review it, revise until it is long enough (or
the revision budget is spent), then publish.

    write >> review
    review - "approve" >> publish
    review - "revise" >> revise >> review

counter: a self-loop that counts up to a target.

    count - "loop" >> count
    count - "done" >> done
"""

from typing import Any, Dict, Tuple
import logging

from actionflow.engine.flow import Flow
from actionflow.engine.node import BaseNode
from actionflow.workflows.registry import register_flow


logger = logging.getLogger(__name__)

DEFAULT_MIN_WORDS = 12
DEFAULT_MAX_REVISIONS = 3
DEFAULT_TARGET = 3


def count_words(text: str) -> int:
    return len(text.split())


# ============================================================
# Publishing nodes
# ============================================================

class WriteNode(BaseNode[str, str]):
    """Writes the first draft for ``shared["topic"]``."""

    async def prepare(self, shared: Dict[str, Any]) -> str:
        return shared.get("topic", "workflows")

    async def execute(self, topic: str) -> str:
        return f"A short note on {topic}."

    async def post(self, shared: Dict[str, Any], topic: str, draft: str):
        shared["draft"] = draft
        shared["revisions"] = 0
        logger.info(f"Wrote first draft ({count_words(draft)} words)")


class ReviewNode(BaseNode[Tuple[str, int, int, int], str]):
    """
    Approves the draft once it has ``min_words`` words or the revision
    budget is spent. Returns "approve" or "revise".
    """

    async def prepare(self, shared: Dict[str, Any]) -> Tuple[str, int, int, int]:
        return (
            shared["draft"],
            shared.get("revisions", 0),
            shared.get("min_words", DEFAULT_MIN_WORDS),
            shared.get("max_revisions", DEFAULT_MAX_REVISIONS),
        )

    async def execute(self, prep_result: Tuple[str, int, int, int]) -> str:
        draft, revisions, min_words, max_revisions = prep_result
        if count_words(draft) >= min_words or revisions >= max_revisions:
            return "approve"
        return "revise"

    async def post(self, shared: Dict[str, Any], prep_result, verdict: str) -> str:
        shared["review"] = {"words": count_words(prep_result[0]), "verdict": verdict}
        logger.info(f"Review verdict: {verdict}")
        return verdict


class ReviseNode(BaseNode[Tuple[str, int], str]):
    """Extends the draft by one sentence."""

    async def prepare(self, shared: Dict[str, Any]) -> Tuple[str, int]:
        return shared["draft"], shared.get("revisions", 0)

    async def execute(self, prep_result: Tuple[str, int]) -> str:
        draft, revisions = prep_result
        return f"{draft} Revision {revisions + 1} adds more detail."

    async def post(self, shared: Dict[str, Any], prep_result, draft: str):
        shared["draft"] = draft
        shared["revisions"] = prep_result[1] + 1


class PublishNode(BaseNode[str, Dict[str, Any]]):
    """Stores the final article in ``shared["published"]``."""

    def prepare(self, shared: Dict[str, Any]) -> str:
        return shared["draft"]

    def execute(self, draft: str) -> Dict[str, Any]:
        return {
            "title": draft.split(".")[0],
            "body": draft,
            "words": count_words(draft),
        }

    def post(self, shared: Dict[str, Any], draft: str, article: Dict[str, Any]):
        shared["published"] = article


@register_flow("publishing")
def create_publishing_flow() -> Flow:
    """Write, review and revise a draft until it is approved, then publish it."""
    write = WriteNode(name="write")
    review = ReviewNode(name="review")
    revise = ReviseNode(name="revise")
    publish = PublishNode(name="publish")

    write >> review
    review - "approve" >> publish
    review - "revise" >> revise >> review

    return Flow(write)


# ============================================================
# Counter nodes
# ============================================================

class CountNode(BaseNode[Tuple[int, int], int]):
    """Increments ``shared["count"]``; loops until it reaches the target."""

    async def prepare(self, shared: Dict[str, Any]) -> Tuple[int, int]:
        return shared.get("count", 0), shared.get("target", DEFAULT_TARGET)

    async def execute(self, prep_result: Tuple[int, int]) -> int:
        return prep_result[0] + 1

    async def post(self, shared: Dict[str, Any], prep_result, count: int) -> str:
        shared["count"] = count
        return "loop" if count < prep_result[1] else "done"


class DoneNode(BaseNode[int, None]):
    """Marks the count as finished."""

    async def prepare(self, shared: Dict[str, Any]) -> int:
        return shared.get("count", 0)

    async def execute(self, count: int) -> None:
        return None

    async def post(self, shared: Dict[str, Any], count: int, exec_result: None):
        shared["finished"] = True


@register_flow("counter")
def create_counter_flow() -> Flow:
    """Count up to shared["target"] with a self-loop."""
    count = CountNode(name="count")
    done = DoneNode(name="done")

    count - "loop" >> count
    count - "done" >> done

    return Flow(count)
