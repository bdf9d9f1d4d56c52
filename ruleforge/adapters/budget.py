"""Character budget enforcement: smart truncation and aggregate shrinking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

TRUNCATION_MARKER = "\n\n*Truncated due to character limit*"

# Preferred cut points, best first. The period stays with the kept text.
_BREAKS = (("\n\n", 0), (".\n", 1), (". ", 1), ("\n", 0))
_SOFT_BOUNDARY_RATIO = 0.7


@dataclass(frozen=True)
class Truncation:
    content: str
    truncated: bool


def find_cut(content: str, target: int) -> int:
    """Index at which to cut ``content`` so the result is at most ``target`` long."""
    window = content[:target]
    for separator, keep in _BREAKS:
        index = window.rfind(separator)
        if index > target * _SOFT_BOUNDARY_RATIO:
            return index + keep
    return target


def smart_truncate(
    content: str, limit: Optional[int], marker: str = TRUNCATION_MARKER
) -> Truncation:
    """Shorten ``content`` to at most ``limit`` characters on a natural boundary.

    A buffer of ``max(50, 5% of limit)`` is reserved for the marker. When even the
    marker does not fit the text is hard cut at ``limit`` without it.
    """
    if limit is None or len(content) <= limit:
        return Truncation(content, False)
    if limit <= 0:
        return Truncation("", True)

    buffer = max(50, int(limit * 0.05))
    target = limit - buffer
    if target <= 0 or target + len(marker) > limit:
        return Truncation(content[:limit], True)

    head = content[: find_cut(content, target)].rstrip()
    result = head + marker
    if len(result) > limit:  # pragma: no cover - guarded by the buffer
        result = content[:limit]
    return Truncation(result, True)


def shrink_to_budget(
    contents: Sequence[str], budget: Optional[int], marker: str = TRUNCATION_MARKER
) -> List[Truncation]:
    """Scale each item to its proportional share when the total exceeds ``budget``.

    Every item gets ``floor(len_i * budget / total)`` characters, so the shrunk
    items never sum past the budget.
    """
    total = sum(len(item) for item in contents)
    if budget is None or total <= budget:
        return [Truncation(item, False) for item in contents]
    results: List[Truncation] = []
    for item in contents:
        share = (len(item) * budget) // total
        results.append(smart_truncate(item, share, marker))
    return results


__all__ = ["TRUNCATION_MARKER", "Truncation", "find_cut", "shrink_to_budget", "smart_truncate"]
