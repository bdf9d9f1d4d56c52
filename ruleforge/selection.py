"""Threshold and top-N selection over scored candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .config import SelectionOverride
from .logging import get_logger
from .models import CandidateDocument, ContentType, ScoredCandidate

logger = get_logger("selection")


@dataclass(frozen=True)
class SelectionPolicy:
    """Selection parameters for one content type.

    ``candidate_floor`` drops near-zero noise before ranking. A candidate is kept
    when its score reaches ``threshold``, or when it ranks within the first
    ``fallback_top_k`` and still scores at least ``fallback_floor``. At most
    ``max_items`` survive.
    """

    threshold: float
    max_items: int
    fallback_top_k: int = 10
    fallback_floor: float = 0.1
    candidate_floor: float = 0.1

    def merged(self, override: Optional[SelectionOverride]) -> "SelectionPolicy":
        if override is None:
            return self
        return SelectionPolicy(
            threshold=self.threshold if override.threshold is None else override.threshold,
            max_items=self.max_items if override.max_items is None else override.max_items,
            fallback_top_k=(
                self.fallback_top_k if override.fallback_top_k is None else override.fallback_top_k
            ),
            fallback_floor=(
                self.fallback_floor if override.fallback_floor is None else override.fallback_floor
            ),
            candidate_floor=self.candidate_floor,
        )


DEFAULT_POLICIES: Mapping[ContentType, SelectionPolicy] = {
    ContentType.COMMAND: SelectionPolicy(threshold=0.2, max_items=30, candidate_floor=0.05),
    ContentType.RULE: SelectionPolicy(threshold=0.3, max_items=25),
    ContentType.DOC: SelectionPolicy(threshold=0.4, max_items=15),
    ContentType.SCHEMA: SelectionPolicy(threshold=0.4, max_items=15),
}


@dataclass(frozen=True)
class SelectedRuleSet:
    """Ordered, deduplicated selection for one content type."""

    content_type: ContentType
    items: Tuple[ScoredCandidate, ...] = ()

    def __iter__(self) -> Iterator[ScoredCandidate]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def candidates(self) -> List[CandidateDocument]:
        return [item.candidate for item in self.items]

    @property
    def paths(self) -> List[str]:
        return [item.path for item in self.items]


class TemplateSelector:
    """Applies quality thresholds, fallback and caps per content type."""

    def __init__(
        self,
        overrides: Mapping[ContentType, SelectionOverride] | None = None,
        *,
        policies: Mapping[ContentType, SelectionPolicy] | None = None,
    ) -> None:
        base = dict(policies or DEFAULT_POLICIES)
        self._policies: Dict[ContentType, SelectionPolicy] = {
            content_type: policy.merged((overrides or {}).get(content_type))
            for content_type, policy in base.items()
        }

    def policy(self, content_type: ContentType) -> SelectionPolicy:
        return self._policies[content_type]

    def select(self, scored: Sequence[ScoredCandidate], content_type: ContentType) -> SelectedRuleSet:
        policy = self.policy(content_type)

        seen = set()
        pool: List[ScoredCandidate] = []
        for item in scored:
            if item.candidate.content_type is not content_type:
                continue
            if item.excluded or item.relevance_score <= 0:
                continue
            if item.path in seen:
                continue
            seen.add(item.path)
            if item.relevance_score > policy.candidate_floor:
                pool.append(item)

        # sorted() is stable, so ties keep discovery order.
        ranked = sorted(pool, key=lambda item: -item.relevance_score)
        chosen = [
            item
            for index, item in enumerate(ranked)
            if item.relevance_score >= policy.threshold
            or (index < policy.fallback_top_k and item.relevance_score >= policy.fallback_floor)
        ][: policy.max_items]

        logger.debug(
            "Selected %d of %d %s candidates", len(chosen), len(pool), content_type.value
        )
        return SelectedRuleSet(content_type=content_type, items=tuple(chosen))


__all__ = ["DEFAULT_POLICIES", "SelectedRuleSet", "SelectionPolicy", "TemplateSelector"]
