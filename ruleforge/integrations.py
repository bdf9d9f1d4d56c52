"""Detect which consumer platforms are in use for a project.

Evidence gathering touches the filesystem; deciding what the evidence means
does not, so :func:`detect_integration` can be exercised with plain sets.
"""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Mapping, Optional

from .logging import get_logger
from .models import Confidence, DetectedIntegration, PlatformCapability
from .platforms import DEFAULT_REGISTRY, PlatformRegistry

logger = get_logger("integrations")

ACTIVE_PREFIX = "Currently running in"


@dataclass(frozen=True)
class Evidence:
    """Indicator paths that exist, as written in the capability table."""

    project: FrozenSet[str] = field(default_factory=frozenset)
    global_: FrozenSet[str] = field(default_factory=frozenset)

    def has(self, indicator: str) -> bool:
        return indicator in self.project or indicator in self.global_


def _project_indicator_exists(root: Path, indicator: str) -> bool:
    if any(char in indicator for char in "*?["):
        try:
            return any(fnmatch.fnmatch(entry.name, indicator) for entry in root.iterdir())
        except OSError:
            return False
    return (root / indicator.rstrip("/")).exists()


def _global_indicator_exists(home: Path, indicator: str) -> bool:
    relative = indicator[2:] if indicator.startswith("~/") else indicator
    return (home / relative.rstrip("/")).exists()


def collect_evidence(
    root: Path,
    home: Path | None = None,
    registry: PlatformRegistry = DEFAULT_REGISTRY,
) -> Evidence:
    """Check every indicator in ``registry`` against the project and home directories."""
    home_dir = home if home is not None else Path.home()
    project: set = set()
    global_: set = set()
    for capability in registry:
        for indicator in capability.project_indicators:
            if _project_indicator_exists(root, indicator):
                project.add(indicator)
        for indicator in capability.global_indicators:
            if _global_indicator_exists(home_dir, indicator):
                global_.add(indicator)
    logger.debug("Collected %s project and %s global indicator(s)", len(project), len(global_))
    return Evidence(project=frozenset(project), global_=frozenset(global_))


def _hint_matches(hint: str, environment: Mapping[str, str]) -> bool:
    if "=" in hint:
        name, expected = hint.split("=", 1)
        return environment.get(name, "").lower() == expected.lower()
    return bool(environment.get(hint))


def detect_integration(
    capability: PlatformCapability,
    evidence: Evidence,
    environment: Mapping[str, str] | None = None,
) -> DetectedIntegration:
    """Classify how strongly ``evidence`` points at ``capability``.

    Project-local indicators give high confidence, global configuration alone
    gives medium. A matching environment hint marks the platform as the one
    currently running and raises confidence to high.
    """
    env = environment or {}
    project_hits = tuple(item for item in capability.project_indicators if item in evidence.project)
    global_hits = tuple(item for item in capability.global_indicators if item in evidence.global_)
    indicators: List[str] = []

    if project_hits:
        confidence = Confidence.HIGH
        indicators.append(f"Project configuration: {', '.join(project_hits)}")
    elif global_hits:
        confidence = Confidence.MEDIUM
        indicators.append(f"Installed: {', '.join(global_hits)}")
    else:
        confidence = Confidence.NONE

    if any(_hint_matches(hint, env) for hint in capability.environment_hints):
        indicators.insert(0, f"{ACTIVE_PREFIX} {capability.name}")
        confidence = Confidence.HIGH

    return DetectedIntegration(
        platform_id=capability.id,
        confidence=confidence,
        indicator_files=project_hits + global_hits,
        indicators=tuple(indicators),
    )


def detect_integrations(
    root: Path,
    *,
    home: Path | None = None,
    environment: Mapping[str, str] | None = None,
    registry: PlatformRegistry = DEFAULT_REGISTRY,
    evidence: Optional[Evidence] = None,
) -> List[DetectedIntegration]:
    """Detected platforms in registry order, omitting those with no evidence."""
    found = evidence if evidence is not None else collect_evidence(root, home, registry)
    env = dict(os.environ) if environment is None else environment
    detected: List[DetectedIntegration] = []
    for capability in registry:
        result = detect_integration(capability, found, env)
        if result.confidence is not Confidence.NONE:
            detected.append(result)
    logger.info(
        "Detected platform(s): %s",
        ", ".join(item.platform_id for item in detected) or "none",
    )
    return detected


def evidence_from(paths: Iterable[str]) -> Evidence:
    """Build evidence from indicator strings; ``~/`` entries count as global."""
    items = list(paths)
    return Evidence(
        project=frozenset(item for item in items if not item.startswith("~/")),
        global_=frozenset(item for item in items if item.startswith("~/")),
    )


__all__ = [
    "ACTIVE_PREFIX",
    "Evidence",
    "collect_evidence",
    "detect_integration",
    "detect_integrations",
    "evidence_from",
]
