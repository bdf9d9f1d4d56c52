"""Core data structures for ruleforge."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple


class ContentType(str, Enum):
    """Kinds of blueprint documents held in the content tree."""

    RULE = "rule"
    COMMAND = "command"
    DOC = "doc"
    SCHEMA = "schema"

    @classmethod
    def parse(cls, value: str) -> "ContentType":
        """Accept both singular and plural spellings (``rules`` / ``rule``)."""
        lowered = value.strip().lower()
        if lowered.endswith("s") and lowered[:-1] in {item.value for item in cls}:
            lowered = lowered[:-1]
        return cls(lowered)


class SizeClass(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"

    @classmethod
    def from_file_count(cls, count: int) -> "SizeClass":
        if count < 50:
            return cls.SMALL
        if count < 200:
            return cls.MEDIUM
        if count < 1000:
            return cls.LARGE
        return cls.ENTERPRISE


class ComplexityClass(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    HIGHLY_COMPLEX = "highly-complex"

    @classmethod
    def from_score(cls, score: float) -> "ComplexityClass":
        if score < 10:
            return cls.SIMPLE
        if score < 25:
            return cls.MODERATE
        if score < 50:
            return cls.COMPLEX
        return cls.HIGHLY_COMPLEX


class Confidence(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {
    Confidence.NONE: 0,
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
}


class ActivationModel(str, Enum):
    """When generated instructions are in effect for the assistant."""

    ALWAYS = "always"
    AUTO_ATTACHED = "auto-attached"
    AGENT_REQUESTED = "agent-requested"
    MANUAL = "manual"
    GLOB = "glob"
    MODEL_DECISION = "model-decision"
    HIERARCHY = "hierarchy"


class Scope(str, Enum):
    GLOBAL = "global"
    USER = "user"
    PROJECT = "project"
    WORKSPACE = "workspace"
    LOCAL = "local"
    REPOSITORY = "repository"


def _normalise_terms(values: Iterable[Any] | None) -> FrozenSet[str]:
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    terms = set()
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            terms.add(text)
    return frozenset(terms)


@dataclass(frozen=True)
class ProjectSignature:
    """Compact description of a project's technology stack."""

    languages: FrozenSet[str] = frozenset()
    frameworks: FrozenSet[str] = frozenset()
    libraries: FrozenSet[str] = frozenset()
    test_frameworks: FrozenSet[str] = frozenset()
    build_tools: FrozenSet[str] = frozenset()
    project_size: SizeClass = SizeClass.SMALL
    complexity: ComplexityClass = ComplexityClass.SIMPLE
    project_type: Optional[str] = None

    @classmethod
    def create(
        cls,
        *,
        languages: Iterable[Any] | None = None,
        frameworks: Iterable[Any] | None = None,
        libraries: Iterable[Any] | None = None,
        test_frameworks: Iterable[Any] | None = None,
        build_tools: Iterable[Any] | None = None,
        project_size: SizeClass | str | None = None,
        complexity: ComplexityClass | str | None = None,
        project_type: str | None = None,
    ) -> "ProjectSignature":
        """Build a signature from loosely typed values; absent fields become empty."""
        return cls(
            languages=_normalise_terms(languages),
            frameworks=_normalise_terms(frameworks),
            libraries=_normalise_terms(libraries),
            test_frameworks=_normalise_terms(test_frameworks),
            build_tools=_normalise_terms(build_tools),
            project_size=_coerce_enum(SizeClass, project_size, SizeClass.SMALL),
            complexity=_coerce_enum(ComplexityClass, complexity, ComplexityClass.SIMPLE),
            project_type=project_type or None,
        )

    def technologies(self) -> FrozenSet[str]:
        """Every detected technology term, regardless of its kind."""
        return (
            self.languages
            | self.frameworks
            | self.libraries
            | self.test_frameworks
            | self.build_tools
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "languages": sorted(self.languages),
            "frameworks": sorted(self.frameworks),
            "libraries": sorted(self.libraries),
            "test_frameworks": sorted(self.test_frameworks),
            "build_tools": sorted(self.build_tools),
            "project_size": self.project_size.value,
            "complexity": self.complexity.value,
            "project_type": self.project_type,
        }


def _coerce_enum(enum_cls: Any, value: Any, default: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return default
    return default


@dataclass(frozen=True)
class CandidateDocument:
    """A blueprint discovered in the content tree; the body is fetched lazily."""

    name: str
    path: str
    content_type: ContentType
    category: Optional[str] = None
    ref: Optional[str] = None
    raw_content: Optional[str] = None

    def with_content(self, content: str) -> "CandidateDocument":
        return replace(self, raw_content=content)


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate document with its relevance score in ``[0, 1]``."""

    candidate: CandidateDocument
    relevance_score: float
    excluded: bool = False
    reasons: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        score = 0.0 if self.excluded else min(1.0, max(0.0, float(self.relevance_score)))
        object.__setattr__(self, "relevance_score", score)

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def path(self) -> str:
        return self.candidate.path


# Directory names in the content tree double as categories.
_CATEGORY_ALIASES = {
    "technologies": "technology",
    "languages": "language",
    "stacks": "stack",
    "tasks": "task",
    "assistants": "assistant",
    "tools": "tool",
}


@dataclass(frozen=True)
class StandardizedRule:
    """A parsed blueprint: frontmatter metadata plus the body without frontmatter."""

    name: str
    path: str
    content: str
    frontmatter: Mapping[str, Any] = field(default_factory=dict)
    relevance_score: float = 0.0

    @property
    def category(self) -> str:
        value = self.frontmatter.get("category")
        if not value:
            return "general"
        category = str(value).strip().lower()
        return _CATEGORY_ALIASES.get(category, category)

    @property
    def description(self) -> str:
        value = self.frontmatter.get("description")
        return str(value).strip() if value else ""

    @property
    def always_apply(self) -> bool:
        return self.frontmatter.get("alwaysApply") is True

    @property
    def globs(self) -> List[str]:
        value = self.frontmatter.get("globs")
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value if str(item).strip()]
        return []

    @property
    def priority(self) -> Optional[float]:
        value = self.frontmatter.get("priority")
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return None

    @property
    def framework(self) -> Optional[str]:
        for key in ("framework", "technology"):
            value = self.frontmatter.get(key)
            if value:
                return str(value)
        return None


@dataclass(frozen=True)
class CharacterLimits:
    """Per-platform character budgets; ``None`` means unlimited."""

    per_file: Optional[int] = None
    total_workspace: Optional[int] = None
    per_guideline: Optional[int] = None
    max_guidelines: Optional[int] = None
    per_command: Optional[int] = None
    global_file: Optional[int] = None


@dataclass(frozen=True)
class PlatformCapability:
    """Static facts about a consumer platform."""

    id: str
    name: str
    limits: CharacterLimits
    activation: ActivationModel
    scopes: Tuple[Scope, ...]
    config_folder: Optional[str] = None
    rules_folder: Optional[str] = None
    file_extension: str = ".md"
    project_indicators: Tuple[str, ...] = ()
    global_indicators: Tuple[str, ...] = ()
    environment_hints: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AdaptedArtifact:
    """A single output file rendered for a platform."""

    path: Path
    content: str
    type: str
    scope: Scope
    truncated: bool = False
    priority: Optional[float] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    character_count: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "character_count", len(self.content))


@dataclass(frozen=True)
class DetectedIntegration:
    """Evidence that a platform is installed or in use for this project."""

    platform_id: str
    confidence: Confidence
    indicator_files: Tuple[str, ...] = ()
    indicators: Tuple[str, ...] = ()


@dataclass
class AdaptationSummary:
    platform_id: str
    generated: int = 0
    skipped: int = 0
    truncated: int = 0
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AdaptationResult:
    """Artifacts rendered for one platform plus the accounting summary."""

    platform_id: str
    artifacts: List[AdaptedArtifact]
    summary: AdaptationSummary


__all__ = [
    "ActivationModel",
    "AdaptationResult",
    "AdaptationSummary",
    "AdaptedArtifact",
    "CandidateDocument",
    "CharacterLimits",
    "ComplexityClass",
    "Confidence",
    "ContentType",
    "DetectedIntegration",
    "PlatformCapability",
    "ProjectSignature",
    "Scope",
    "ScoredCandidate",
    "SizeClass",
    "StandardizedRule",
]
