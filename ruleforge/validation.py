"""Blueprint frontmatter validation."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .logging import get_logger
from .models import StandardizedRule

logger = get_logger("validation")


class BlueprintFrontmatter(BaseModel):
    """Schema for the YAML block at the top of a blueprint document."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    description: str = Field(min_length=1)
    version: str
    last_updated: str = Field(alias="lastUpdated")
    globs: Optional[Union[List[str], str]] = None
    always_apply: Optional[bool] = Field(default=None, alias="alwaysApply")
    priority: Optional[float] = None
    category: Optional[str] = None
    platforms: Optional[Dict[str, Optional[Dict[str, Any]]]] = None

    @field_validator("version", mode="before")
    @classmethod
    def _version_to_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("last_updated", mode="before")
    @classmethod
    def _date_to_text(cls, value: Any) -> Any:
        if isinstance(value, (_dt.date, _dt.datetime)):
            return value.isoformat()
        return value


@dataclass
class ValidationIssue:
    """A single frontmatter problem found in a blueprint."""

    rule: str
    field: str
    detail: str


class ValidationError(RuntimeError):
    """Raised when strict validation fails for one or more blueprints."""

    def __init__(self, message: str, issues: Sequence[ValidationIssue]) -> None:
        super().__init__(message)
        self.issues = list(issues)


@dataclass
class ValidationReport:
    checked: int = 0
    issues: List[ValidationIssue] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def validate_rule(rule: StandardizedRule) -> List[ValidationIssue]:
    """Return the issues found in ``rule``'s frontmatter (empty when valid)."""
    try:
        BlueprintFrontmatter.model_validate(dict(rule.frontmatter))
    except pydantic.ValidationError as exc:
        issues = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ())) or "frontmatter"
            issues.append(ValidationIssue(rule=rule.path, field=location, detail=error.get("msg", "invalid")))
        return issues
    return []


def validate_rules(
    rules: Sequence[StandardizedRule], *, required: bool = False
) -> Tuple[List[StandardizedRule], ValidationReport]:
    """Validate every rule.

    Validation is advisory: all rules pass through unless ``required`` is set, in
    which case rules with issues are withheld and listed in ``report.rejected``.
    """
    report = ValidationReport(checked=len(rules))
    accepted: List[StandardizedRule] = []
    for rule in rules:
        issues = validate_rule(rule)
        if issues:
            report.issues.extend(issues)
            for issue in issues:
                logger.debug("%s: %s %s", issue.rule, issue.field, issue.detail)
            if required:
                report.rejected.append(rule.path)
                continue
        accepted.append(rule)
    if report.issues:
        logger.warning(
            "%d blueprint(s) have frontmatter issues%s",
            len({issue.rule for issue in report.issues}),
            " and were skipped" if required else "",
        )
    return accepted, report


def ensure_valid(rules: Sequence[StandardizedRule]) -> None:
    """Raise :class:`ValidationError` if any rule fails validation."""
    _, report = validate_rules(rules)
    if report.issues:
        raise ValidationError(
            f"{len(report.issues)} validation issue(s) in {len({i.rule for i in report.issues})} blueprint(s)",
            report.issues,
        )


__all__ = [
    "BlueprintFrontmatter",
    "ValidationError",
    "ValidationIssue",
    "ValidationReport",
    "ensure_valid",
    "validate_rule",
    "validate_rules",
]
