"""Bounded fan-out for fetching blueprint bodies."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from ..logging import get_logger
from ..models import CandidateDocument
from .client import ContentTree

logger = get_logger("fetching.pool")

DEFAULT_FETCH_WORKERS = 8


@dataclass
class FetchFailure:
    candidate: CandidateDocument
    error: str


@dataclass
class FetchOutcome:
    """Fetched documents in their original order plus the candidates that failed."""

    documents: List[CandidateDocument] = field(default_factory=list)
    failures: List[FetchFailure] = field(default_factory=list)


def fetch_bodies(
    tree: ContentTree,
    candidates: Sequence[CandidateDocument],
    *,
    max_workers: int = DEFAULT_FETCH_WORKERS,
) -> FetchOutcome:
    """Fetch every candidate body with at most ``max_workers`` requests in flight.

    A failing fetch is logged and recorded; it never aborts the others.
    """
    outcome = FetchOutcome()
    if not candidates:
        return outcome

    def _fetch(candidate: CandidateDocument) -> Tuple[CandidateDocument, str | None, str | None]:
        if candidate.raw_content is not None:
            return candidate, candidate.raw_content, None
        try:
            return candidate, tree.fetch(candidate.ref or candidate.path), None
        except Exception as exc:  # isolate per-document failures
            return candidate, None, str(exc) or exc.__class__.__name__

    workers = max(1, min(max_workers, len(candidates)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(_fetch, candidates))

    for candidate, body, error in results:
        if error is not None or body is None:
            logger.warning("Could not fetch %s: %s", candidate.path, error)
            outcome.failures.append(FetchFailure(candidate=candidate, error=error or "empty body"))
            continue
        outcome.documents.append(candidate.with_content(body))
    return outcome


__all__ = ["DEFAULT_FETCH_WORKERS", "FetchFailure", "FetchOutcome", "fetch_bodies"]
