"""Relevance scoring of candidate documents against a project signature."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import List, Mapping, Sequence

from ..logging import get_logger
from ..models import CandidateDocument, ContentType, ProjectSignature, ScoredCandidate
from .rules import MatchContext, ProjectFlags, ScoringRule, build_rules

logger = get_logger("scoring")


class RelevanceScorer:
    """Pure, deterministic scorer driven by the declarative rule table."""

    def __init__(
        self,
        weights: Mapping[str, float] | None = None,
        *,
        max_workers: int = 4,
    ) -> None:
        self._rules: Sequence[ScoringRule] = build_rules(weights)
        self._max_workers = max(1, max_workers)

    @property
    def rules(self) -> Sequence[ScoringRule]:
        return self._rules

    def score(
        self,
        candidate: CandidateDocument,
        signature: ProjectSignature,
        flags: ProjectFlags | None = None,
    ) -> ScoredCandidate:
        flags = flags or ProjectFlags.from_signature(signature)
        candidate = _sanitise(candidate)
        context = MatchContext(candidate=candidate, signature=signature, flags=flags)
        try:
            return self._evaluate(context)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.debug("Scoring fell back to baseline for %s: %s", candidate.path, exc)
            baseline = self._baseline(candidate)
            return ScoredCandidate(candidate=candidate, relevance_score=baseline, reasons=("baseline",))

    def score_all(
        self,
        candidates: Sequence[CandidateDocument],
        signature: ProjectSignature,
    ) -> List[ScoredCandidate]:
        """Score every candidate on a bounded pool; results keep discovery order."""
        if not candidates:
            return []
        flags = ProjectFlags.from_signature(signature)
        workers = min(self._max_workers, len(candidates))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            scored = list(executor.map(lambda item: self.score(item, signature, flags), candidates))
        for item in scored:
            if item.excluded:
                logger.debug("Excluded %s (%s)", item.path, ", ".join(item.reasons))
            elif item.relevance_score > 0.05:
                logger.debug("Scored %s: %.2f", item.path, item.relevance_score)
        return scored

    def _evaluate(self, context: MatchContext) -> ScoredCandidate:
        candidate = context.candidate
        for rule in self._rules:
            if rule.excludes and rule.predicate(context):
                return ScoredCandidate(
                    candidate=candidate,
                    relevance_score=0.0,
                    excluded=True,
                    reasons=(rule.name,),
                )

        total = 0.0
        reasons: List[str] = []
        for rule in self._rules:
            if rule.excludes:
                continue
            hits = int(rule.predicate(context) or 0)
            if hits:
                total += rule.effect * hits  # type: ignore[operator]
                reasons.append(rule.name)
        return ScoredCandidate(
            candidate=candidate,
            relevance_score=max(0.0, total),
            reasons=tuple(reasons),
        )

    def _baseline(self, candidate: CandidateDocument) -> float:
        if candidate.content_type is not ContentType.COMMAND:
            return 0.0
        for rule in self._rules:
            if rule.name == "command-baseline":
                return float(rule.effect)  # type: ignore[arg-type]
        return 0.0


def _sanitise(candidate: CandidateDocument) -> CandidateDocument:
    name = candidate.name if isinstance(candidate.name, str) else ""
    path = candidate.path if isinstance(candidate.path, str) else ""
    content_type = candidate.content_type
    if not isinstance(content_type, ContentType):
        try:
            content_type = ContentType.parse(str(content_type))
        except ValueError:
            content_type = ContentType.RULE
    if name == candidate.name and path == candidate.path and content_type is candidate.content_type:
        return candidate
    return replace(candidate, name=name, path=path, content_type=content_type)


__all__ = ["RelevanceScorer"]
