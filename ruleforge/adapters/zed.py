"""Zed adapter: plain markdown rule files, project or global."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

from ..models import Scope, StandardizedRule
from .base import (
    AdaptContext,
    PlatformAdapter,
    RenderOutput,
    config_priority,
    rule_title,
    slugify,
    unique_filename,
)


class ZedAdapter(PlatformAdapter):
    platform_id = "zed"

    def target_dir(self, context: AdaptContext, config: Mapping[str, Any]) -> tuple:
        mode = str(config.get("mode") or "project").lower()
        if mode == "global":
            return context.home_dir / ".config" / "zed" / "ai-rules", Scope.GLOBAL
        return self.rules_dir(context, config), Scope.PROJECT

    def render(
        self,
        rules: Sequence[StandardizedRule],
        context: AdaptContext,
        config: Mapping[str, Any],
    ) -> RenderOutput:
        output = RenderOutput()
        directory, scope = self.target_dir(context, config)
        used_names: set = set()
        default_priority = config_priority(config.get("priority"))
        for index, rule in enumerate(self.prioritize(rules, default_priority), start=1):
            filename = unique_filename(
                slugify(rule_title(rule), max_length=60),
                ".md",
                used_names,
                fallback=slugify(Path(rule.name).stem) or f"rule-{index}",
            )
            output.artifacts.append(
                self.make_artifact(
                    directory / filename,
                    rule.content.strip() + "\n",
                    type="rule",
                    scope=scope,
                    limit=self.capability.limits.per_file,
                    priority=self.effective_priority(rule, default_priority),
                )
            )
        output.rules_used = len(rules)
        output.details = {"mode": scope.value, "rules": len(output.artifacts)}
        return output


__all__ = ["ZedAdapter"]
