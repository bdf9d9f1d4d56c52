"""Cursor adapter: one MDC file per rule, grouped by activation type."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

import yaml

from ..models import ActivationModel, Scope, StandardizedRule
from .base import AdaptContext, PlatformAdapter, RenderOutput, config_priority, slugify, unique_filename

ACTIVATION_ORDER = (
    ActivationModel.ALWAYS,
    ActivationModel.AUTO_ATTACHED,
    ActivationModel.AGENT_REQUESTED,
    ActivationModel.MANUAL,
)
_PREFIXES = {
    ActivationModel.ALWAYS: "always",
    ActivationModel.AUTO_ATTACHED: "auto",
    ActivationModel.AGENT_REQUESTED: "agent",
    ActivationModel.MANUAL: "manual",
}
_PRIORITY_LABELS = {
    ActivationModel.ALWAYS: "high",
    ActivationModel.AUTO_ATTACHED: "medium",
    ActivationModel.AGENT_REQUESTED: "medium",
    ActivationModel.MANUAL: "low",
}
MAX_FILENAME_LENGTH = 40


def activation_type(rule: StandardizedRule) -> ActivationModel:
    if rule.always_apply:
        return ActivationModel.ALWAYS
    if rule.globs:
        return ActivationModel.AUTO_ATTACHED
    if rule.description:
        return ActivationModel.AGENT_REQUESTED
    return ActivationModel.MANUAL


def cursor_basename(rule: StandardizedRule) -> str:
    """Filename stem built from category, framework and id (or a title fragment)."""
    category = rule.category
    identifiers = [category]
    framework = rule.framework
    if framework and framework.lower() != category:
        identifiers.append(framework)
    rule_id = rule.frontmatter.get("id")
    if rule_id and str(rule_id) not in identifiers:
        identifiers.append(str(rule_id))
    elif not rule_id:
        title = str(rule.frontmatter.get("title") or rule.description or "")
        fragment = "-".join(title.split()[:2])
        if fragment:
            identifiers.append(fragment)
        else:
            identifiers.append(Path(rule.name).stem)
    return slugify("-".join(identifiers), max_length=MAX_FILENAME_LENGTH)


def manual_rule_name(rule: StandardizedRule) -> str:
    """Name used to mention a manual rule with ``@name``."""
    if rule.description:
        compact = "".join(ch for ch in rule.description.lower() if ch.isalnum())
        return compact[:20]
    return rule.category


def render_mdc(rule: StandardizedRule, activation: ActivationModel) -> str:
    header: Dict[str, Any] = {}
    if rule.description:
        header["description"] = rule.description
    if rule.globs:
        header["globs"] = ",".join(rule.globs)
    header["alwaysApply"] = activation is ActivationModel.ALWAYS
    frontmatter = yaml.safe_dump(header, sort_keys=False, allow_unicode=True, width=1000).strip()
    return f"---\n{frontmatter}\n---\n\n{rule.content.strip()}\n"


class CursorAdapter(PlatformAdapter):
    platform_id = "cursor"

    def render(
        self,
        rules: Sequence[StandardizedRule],
        context: AdaptContext,
        config: Mapping[str, Any],
    ) -> RenderOutput:
        output = RenderOutput()
        rules_dir = self.rules_dir(context, config)
        extension = str(config.get("extension") or self.capability.file_extension)
        default_priority = config_priority(config.get("priority"))

        groups: Dict[ActivationModel, List[StandardizedRule]] = {name: [] for name in ACTIVATION_ORDER}
        for rule in self.prioritize(rules, default_priority):
            groups[activation_type(rule)].append(rule)

        used_names: set = set()
        for activation in ACTIVATION_ORDER:
            for rule in groups[activation]:
                stem = f"{_PREFIXES[activation]}-{cursor_basename(rule)}"
                filename = unique_filename(stem, extension, used_names, fallback=_PREFIXES[activation])
                metadata: Dict[str, Any] = {
                    "activation": activation,
                    "priority_label": _PRIORITY_LABELS[activation],
                }
                if activation is ActivationModel.AUTO_ATTACHED:
                    metadata["globs"] = rule.globs
                if activation is ActivationModel.MANUAL:
                    metadata["rule_name"] = manual_rule_name(rule)
                output.artifacts.append(
                    self.make_artifact(
                        rules_dir / filename,
                        render_mdc(rule, activation),
                        type="rule",
                        scope=Scope.PROJECT,
                        limit=self.capability.limits.per_file,
                        priority=self.effective_priority(rule, default_priority),
                        metadata=metadata,
                    )
                )
        output.rules_used = len(rules)
        output.details = {
            "always": len(groups[ActivationModel.ALWAYS]),
            "auto_attached": len(groups[ActivationModel.AUTO_ATTACHED]),
            "agent_requested": len(groups[ActivationModel.AGENT_REQUESTED]),
            "manual": len(groups[ActivationModel.MANUAL]),
        }
        return output


__all__ = ["CursorAdapter", "activation_type", "cursor_basename", "render_mdc"]
