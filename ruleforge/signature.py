"""Normalises raw stack analysis output into a ProjectSignature."""

from __future__ import annotations

from typing import Any, List, Mapping

from .logging import get_logger
from .models import ComplexityClass, ProjectSignature, SizeClass

logger = get_logger("signature")

MAX_SIGNATURE_LIBRARIES = 10


def extract_signature(analysis: Mapping[str, Any] | None) -> ProjectSignature:
    """Build a signature from an analysis mapping.

    Accepts the ``techStack`` layout produced by :class:`ruleforge.analysis.StackDetector`
    as well as the older ``technologyData`` spelling. Missing or malformed fields fall
    back to empty sets and the lowest size and complexity classes.
    """
    analysis = analysis if isinstance(analysis, Mapping) else {}
    stack = _as_mapping(analysis.get("techStack")) or _as_mapping(analysis.get("technologyData"))

    languages = _as_list(stack.get("primaryLanguages")) or _as_list(stack.get("languages"))
    frameworks = _as_list(stack.get("frameworks"))
    libraries = _as_list(stack.get("libraries"))
    test_frameworks = _as_list(stack.get("testingFrameworks")) or _as_list(
        stack.get("testFrameworks")
    )
    build_tools = _as_list(stack.get("buildTools"))

    structure = _as_mapping(analysis.get("projectStructure"))
    file_count = structure.get("fileCount")
    if isinstance(file_count, bool) or not isinstance(file_count, int):
        files = structure.get("files")
        file_count = len(files) if isinstance(files, list) else 0

    project_size = _explicit_or(analysis.get("projectSize"), SizeClass, SizeClass.from_file_count(file_count))
    complexity = _explicit_or(
        analysis.get("complexity"),
        ComplexityClass,
        ComplexityClass.from_score(complexity_score(languages, frameworks, libraries)),
    )

    project_type = analysis.get("projectType")
    signature = ProjectSignature.create(
        languages=languages,
        frameworks=frameworks,
        libraries=libraries[:MAX_SIGNATURE_LIBRARIES],
        test_frameworks=test_frameworks,
        build_tools=build_tools,
        project_size=project_size,
        complexity=complexity,
        project_type=str(project_type) if isinstance(project_type, str) else None,
    )
    logger.debug("Signature: %s", signature.to_dict())
    return signature


def complexity_score(languages: List[str], frameworks: List[str], libraries: List[str]) -> float:
    return len(languages) * 2 + len(frameworks) * 3 + min(len(libraries) * 0.5, 20)


def _explicit_or(value: Any, enum_cls: Any, default: Any) -> Any:
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            logger.debug("Ignoring unknown %s value %r", enum_cls.__name__, value)
    return default


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (set, frozenset)):
        value = sorted(item for item in value if isinstance(item, str))
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, str) and item.strip()]
    return []


__all__ = ["MAX_SIGNATURE_LIBRARIES", "complexity_score", "extract_signature"]
