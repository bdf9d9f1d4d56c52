"""Choose a single primary platform among the detected ones."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .logging import get_logger
from .models import Confidence, DetectedIntegration
from .platforms import DEFAULT_REGISTRY, PROJECT_INDICATOR_ORDER, PlatformRegistry

logger = get_logger("disambiguation")

STRONG_INDICATORS = (
    "Currently running in",
    "Active workspace",
    "Recent activity",
    "Open project",
    "Current session",
)


@dataclass(frozen=True)
class Disambiguation:
    platform_id: Optional[str]
    ambiguous: bool
    reason: str


def _has_strong_indicator(detection: DetectedIntegration) -> bool:
    return any(text.startswith(STRONG_INDICATORS) for text in detection.indicators)


def _has_project_indicator(detection: DetectedIntegration, registry: PlatformRegistry) -> bool:
    capability = registry.get(detection.platform_id)
    if capability is None:
        return False
    return any(item in capability.project_indicators for item in detection.indicator_files)


def disambiguate(
    detected: Sequence[DetectedIntegration],
    explicit_override: str | None = None,
    registry: PlatformRegistry = DEFAULT_REGISTRY,
    indicator_order: Sequence[str] = PROJECT_INDICATOR_ORDER,
) -> Disambiguation:
    """Pick the primary platform.

    The cascade is: an explicit override naming a detected platform; the first
    platform in ``indicator_order`` whose project files were found; the single
    high-confidence platform that reports itself as active; and finally the
    highest confidence, which is flagged as ambiguous.
    """
    candidates = [item for item in detected if item.confidence is not Confidence.NONE]
    if not candidates:
        return Disambiguation(None, False, "No platforms detected")

    by_id: Dict[str, DetectedIntegration] = {}
    for item in candidates:
        key = registry.resolve(item.platform_id) or item.platform_id.lower()
        by_id.setdefault(key, item)

    if explicit_override:
        override = registry.resolve(explicit_override) or explicit_override.strip().lower()
        if override in by_id:
            return Disambiguation(override, False, "Explicit platform override")
        logger.warning(
            "Configured platform '%s' was not detected; ignoring the override", explicit_override
        )

    if len(by_id) == 1:
        (only,) = by_id
        return Disambiguation(only, False, "Only detected platform")

    for platform_id in indicator_order:
        detection = by_id.get(platform_id)
        if detection is not None and _has_project_indicator(detection, registry):
            return Disambiguation(platform_id, False, "Project configuration present")

    active = [
        key
        for key, item in by_id.items()
        if item.confidence is Confidence.HIGH and _has_strong_indicator(item)
    ]
    if len(active) == 1:
        return Disambiguation(active[0], False, "Currently active platform")

    ranked: List[str] = sorted(
        by_id,
        key=lambda key: (-by_id[key].confidence.rank, registry.order(key)),
    )
    chosen = ranked[0]
    logger.warning(
        "Multiple platforms detected (%s); falling back to %s",
        ", ".join(ranked),
        chosen,
    )
    return Disambiguation(chosen, True, "Highest confidence fallback")


__all__ = ["Disambiguation", "STRONG_INDICATORS", "disambiguate"]
