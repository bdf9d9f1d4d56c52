"""Frontmatter parsing and light ``${variable}`` templating for blueprint bodies."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Tuple

import yaml

from .logging import get_logger
from .models import CandidateDocument, ProjectSignature, StandardizedRule

logger = get_logger("frontmatter")

_FRONTMATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def split_frontmatter(content: str) -> Tuple[Dict[str, Any], str]:
    """Return ``(metadata, body)``.

    A block that fails to parse, or that is not a mapping, yields empty metadata;
    the body is still returned without the fenced block.
    """
    match = _FRONTMATTER.match(content)
    if not match:
        return {}, content
    body = content[match.end():].lstrip("\r\n")
    try:
        loaded = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        logger.debug("Unparseable frontmatter treated as empty: %s", exc)
        return {}, body
    if not isinstance(loaded, dict):
        return {}, body
    return {str(key): value for key, value in loaded.items()}, body


def strip_frontmatter(content: str) -> str:
    return split_frontmatter(content)[1].strip()


def template_variables(
    signature: ProjectSignature, project_name: str | None = None
) -> Dict[str, str]:
    """Values available to ``${name}`` placeholders in blueprint bodies."""
    languages = sorted(signature.languages)
    return {
        "projectName": project_name or "",
        "primaryLanguage": languages[0] if languages else "",
        "languages": ", ".join(languages),
        "frameworks": ", ".join(sorted(signature.frameworks)),
        "libraries": ", ".join(sorted(signature.libraries)),
        "testFrameworks": ", ".join(sorted(signature.test_frameworks)),
        "buildTools": ", ".join(sorted(signature.build_tools)),
        "projectSize": signature.project_size.value,
        "complexity": signature.complexity.value,
    }


def apply_templating(content: str, variables: Mapping[str, str]) -> str:
    """Substitute known placeholders; unknown ones are left untouched."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        return variables[name] if name in variables else match.group(0)

    return _PLACEHOLDER.sub(_replace, content)


def standardize(
    candidate: CandidateDocument,
    content: str,
    variables: Mapping[str, str] | None = None,
    *,
    relevance_score: float = 0.0,
) -> StandardizedRule:
    """Turn a fetched body into a :class:`StandardizedRule`."""
    if variables:
        content = apply_templating(content, variables)
    metadata, body = split_frontmatter(content)
    if candidate.category and "category" not in metadata:
        metadata["category"] = candidate.category
    return StandardizedRule(
        name=candidate.name,
        path=candidate.path,
        content=body,
        frontmatter=metadata,
        relevance_score=relevance_score,
    )


__all__ = [
    "apply_templating",
    "split_frontmatter",
    "standardize",
    "strip_frontmatter",
    "template_variables",
]
