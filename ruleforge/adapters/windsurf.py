"""Windsurf adapter: global memory, XML-tagged workspace rules and a consolidated file."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Mapping, Sequence

from ..logging import get_logger
from ..models import ActivationModel, Scope, StandardizedRule
from .base import (
    AdaptContext,
    PlatformAdapter,
    RenderOutput,
    config_limit,
    config_priority,
    key_points,
    render_template,
    slugify,
    unique_filename,
)
from .budget import shrink_to_budget

logger = get_logger("adapters.windsurf")

XML_TAGS = {
    "core": "development-standards",
    "language": "language-standards",
    "technology": "technology-guidelines",
    "framework": "technology-guidelines",
    "testing": "testing-patterns",
    "task": "task-workflow",
    "assistant": "ai-assistance",
}
CONSOLIDATE_MIN_RULES = 3


def xml_tag(category: str) -> str:
    return XML_TAGS.get(category, "rule")


def activation_type(rule: StandardizedRule) -> ActivationModel:
    if rule.category == "task":
        return ActivationModel.MANUAL
    if rule.always_apply:
        return ActivationModel.ALWAYS
    if rule.globs:
        return ActivationModel.GLOB
    return ActivationModel.MODEL_DECISION


def windsurf_basename(rule: StandardizedRule) -> str:
    base = rule.framework or rule.category
    rule_id = rule.frontmatter.get("id")
    if rule_id and str(rule_id) != base:
        base = f"{base}-{rule_id}"
    elif not rule_id:
        base = f"{base}-{Path(rule.name).stem}"
    return slugify(base.replace("_", "-"))


class WindsurfAdapter(PlatformAdapter):
    platform_id = "windsurf"

    def render(
        self,
        rules: Sequence[StandardizedRule],
        context: AdaptContext,
        config: Mapping[str, Any],
    ) -> RenderOutput:
        output = RenderOutput()
        limits = self.capability.limits
        per_file = config_limit(config.get("characterLimit"), limits.per_file)
        default_priority = config_priority(config.get("priority"))
        ordered = self.prioritize(rules, default_priority)

        global_rules = [rule for rule in ordered if rule.category == "core" or rule.always_apply]
        workspace_rules = [rule for rule in ordered if not (rule.category == "core" or rule.always_apply)]

        if global_rules:
            content = render_template(
                "windsurf_global.md.j2",
                sections=[
                    {"tag": xml_tag(rule.category), "body": rule.content.strip()} for rule in global_rules
                ],
            )
            output.artifacts.append(
                self.make_artifact(
                    context.home_dir / ".codeium" / "windsurf" / "memories" / "global_rules.md",
                    content,
                    type="memory",
                    scope=Scope.GLOBAL,
                    limit=limits.global_file,
                    metadata={"activation": ActivationModel.ALWAYS},
                )
            )

        rules_dir = self.rules_dir(context, config)
        used_names: set = set()
        workspace_artifacts = []
        for rule in workspace_rules:
            tag = xml_tag(rule.category)
            filename = unique_filename(windsurf_basename(rule), ".md", used_names, fallback="rule")
            workspace_artifacts.append(
                self.make_artifact(
                    rules_dir / filename,
                    f"<{tag}>\n{rule.content.strip()}\n</{tag}>\n",
                    type="rule",
                    scope=Scope.WORKSPACE,
                    limit=per_file,
                    priority=self.effective_priority(rule, default_priority),
                    metadata={"activation": activation_type(rule)},
                )
            )

        budget = limits.total_workspace
        shrunk = shrink_to_budget([item.content for item in workspace_artifacts], budget)
        if any(result.truncated for result in shrunk):
            logger.warning(
                "Windsurf workspace rules exceed the %s character total; shrinking proportionally",
                budget,
            )
        for artifact, result in zip(workspace_artifacts, shrunk):
            if result.truncated:
                artifact = replace(artifact, content=result.content, truncated=True)
            output.artifacts.append(artifact)

        if len(workspace_rules) > CONSOLIDATE_MIN_RULES:
            consolidated = self._consolidated(workspace_rules, context)
            if per_file is None or len(consolidated) <= per_file:
                output.artifacts.append(
                    self.make_artifact(
                        context.project_root / ".windsurfrules.md",
                        consolidated,
                        type="project-rules",
                        scope=Scope.PROJECT,
                        metadata={"activation": ActivationModel.MODEL_DECISION},
                    )
                )

        output.rules_used = len(rules)
        output.details = {
            "global_rules": len(global_rules),
            "workspace_rules": len(workspace_rules),
            "workspace_characters": sum(
                item.character_count for item in output.artifacts if item.scope is Scope.WORKSPACE
            ),
            "workspace_limit": budget,
        }
        return output

    def _consolidated(self, rules: Sequence[StandardizedRule], context: AdaptContext) -> str:
        groups: "OrderedDict[str, List[str]]" = OrderedDict()
        for rule in rules:
            groups.setdefault(rule.category, []).extend(key_points(rule.content))
        return render_template(
            "windsurf_consolidated.md.j2",
            project_name=context.name,
            groups=[{"tag": xml_tag(category), "points": points} for category, points in groups.items()],
        )


__all__ = ["WindsurfAdapter", "activation_type", "windsurf_basename", "xml_tag"]
