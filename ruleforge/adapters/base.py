"""Shared behaviour for platform adapters."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import AdaptedArtifact, PlatformCapability, ProjectSignature, Scope, StandardizedRule
from .budget import TRUNCATION_MARKER, smart_truncate

TEMPLATES_DIR = Path(__file__).with_name("templates")
DEFAULT_PRIORITY = 5.0

_ENVIRONMENT = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)

_TITLE_LINE = re.compile(r"^#\s+(.+?)\s*$", re.MULTILINE)


def render_template(name: str, /, **context: Any) -> str:
    """Render one of the bundled Jinja templates, normalising trailing whitespace."""
    rendered = _ENVIRONMENT.get_template(name).render(**context)
    return rendered.rstrip() + "\n"


@dataclass(frozen=True)
class AdaptContext:
    """Project facts an adapter may consult while rendering."""

    project_root: Path
    home_dir: Path
    signature: ProjectSignature = field(default_factory=ProjectSignature)
    project_name: Optional[str] = None

    @property
    def name(self) -> str:
        return self.project_name or self.project_root.name

    @property
    def project_type(self) -> str:
        if self.signature.project_type:
            return self.signature.project_type
        frameworks = sorted(self.signature.frameworks)
        if frameworks:
            return f"{frameworks[0]} Application"
        languages = sorted(self.signature.languages)
        if languages:
            return f"{languages[0]} Application"
        return "Software Project"


@dataclass
class RenderOutput:
    """What an adapter produced: artifacts, how many rules it used, extra details."""

    artifacts: List[AdaptedArtifact] = field(default_factory=list)
    rules_used: int = 0
    details: Dict[str, Any] = field(default_factory=dict)


class PlatformAdapter(ABC):
    """Renders standardized rules into one platform's native layout."""

    platform_id: str = ""

    def __init__(self, capability: PlatformCapability) -> None:
        self.capability = capability

    @abstractmethod
    def render(
        self,
        rules: Sequence[StandardizedRule],
        context: AdaptContext,
        config: Mapping[str, Any],
    ) -> RenderOutput:
        """Produce artifacts for ``rules``; must not mutate them."""

    # helpers shared by the concrete adapters

    @staticmethod
    def effective_priority(rule: StandardizedRule, default: float) -> float:
        priority = rule.priority
        return priority if priority is not None else default

    def prioritize(
        self, rules: Sequence[StandardizedRule], default: float = DEFAULT_PRIORITY
    ) -> List[StandardizedRule]:
        """Order rules by descending priority; ties keep their incoming order."""
        return sorted(rules, key=lambda rule: -self.effective_priority(rule, default))

    def make_artifact(
        self,
        path: Path,
        content: str,
        *,
        type: str,
        scope: Scope,
        limit: Optional[int] = None,
        priority: Optional[float] = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> AdaptedArtifact:
        result = smart_truncate(content, limit, TRUNCATION_MARKER)
        return AdaptedArtifact(
            path=path,
            content=result.content,
            type=type,
            scope=scope,
            truncated=result.truncated,
            priority=priority,
            metadata=dict(metadata or {}),
        )

    def rules_dir(self, context: AdaptContext, config: Mapping[str, Any]) -> Path:
        folder = config.get("rulesPath") or self.capability.rules_folder or ".ai/rules"
        return context.project_root / str(folder)


def config_limit(value: Any, default: Optional[int]) -> Optional[int]:
    """A positive integer override from platform config, never above ``default``."""
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return min(value, default) if default else value
    return default


def config_priority(value: Any, default: float = DEFAULT_PRIORITY) -> float:
    """Default rule priority from platform config; labels such as ``medium`` are ignored."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def display_path(path: Path, root: Path) -> str:
    """``path`` relative to ``root`` when it lives underneath it."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def extract_title(content: str) -> Optional[str]:
    match = _TITLE_LINE.search(content)
    return match.group(1).strip() if match else None


def rule_title(rule: StandardizedRule) -> str:
    title = rule.frontmatter.get("title")
    if isinstance(title, str) and title.strip():
        return title.strip()
    return extract_title(rule.content) or rule.description or Path(rule.name).stem


def slugify(text: str, *, max_length: Optional[int] = None) -> str:
    slug = re.sub(r"[^a-z0-9-]+", "-", text.strip().lower())
    slug = re.sub(r"-+", "-", slug).strip("-")
    if max_length is not None:
        slug = slug[:max_length].rstrip("-")
    return slug


def unique_filename(base: str, extension: str, used: set, fallback: str) -> str:
    """Return ``base + extension`` made unique within ``used``.

    Empty bases use ``fallback``; collisions get a numeric suffix.
    """
    stem = base or fallback
    candidate = f"{stem}{extension}"
    counter = 2
    while candidate in used:
        candidate = f"{stem}-{counter}{extension}"
        counter += 1
    used.add(candidate)
    return candidate


def key_points(content: str, *, min_length: int = 10) -> List[str]:
    """Bullet points of a markdown body."""
    points = []
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith(("-", "*")) and not stripped.startswith("**"):
            point = stripped.lstrip("-* ").strip()
            if len(point) > min_length:
                points.append(point)
    return points


__all__ = [
    "AdaptContext",
    "DEFAULT_PRIORITY",
    "config_limit",
    "config_priority",
    "display_path",
    "PlatformAdapter",
    "RenderOutput",
    "extract_title",
    "key_points",
    "render_template",
    "rule_title",
    "slugify",
    "unique_filename",
]
