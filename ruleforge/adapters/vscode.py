"""Adapters for the VS Code family (VS Code, Insiders, VSCodium)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

from ..models import Scope, StandardizedRule
from .base import (
    AdaptContext,
    PlatformAdapter,
    RenderOutput,
    config_priority,
    display_path,
    rule_title,
    slugify,
    unique_filename,
)


class VSCodeAdapter(PlatformAdapter):
    """One markdown file per rule under ``<config folder>/ai-rules``.

    When ``mcpIntegration`` is set in the platform config an ``mcp.json`` is
    written next to the rules, carrying any ``globalShortcuts`` settings.
    """

    platform_id = "vscode"

    def config_dir(self, context: AdaptContext, config: Mapping[str, Any]) -> Path:
        folder = config.get("configPath") or self.capability.config_folder or ".vscode"
        return context.project_root / str(folder)

    def render(
        self,
        rules: Sequence[StandardizedRule],
        context: AdaptContext,
        config: Mapping[str, Any],
    ) -> RenderOutput:
        output = RenderOutput()
        config_dir = self.config_dir(context, config)
        rules_dir = config_dir / "ai-rules"
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
                    rules_dir / filename,
                    rule.content.strip() + "\n",
                    type="rule",
                    scope=Scope.PROJECT,
                    limit=self.capability.limits.per_file,
                    priority=self.effective_priority(rule, default_priority),
                )
            )

        if config.get("mcpIntegration"):
            settings: Dict[str, Any] = {
                "servers": {},
                "globalShortcuts": dict(config.get("globalShortcuts") or {}),
            }
            output.artifacts.append(
                self.make_artifact(
                    config_dir / "mcp.json",
                    json.dumps(settings, indent=2, sort_keys=True) + "\n",
                    type="config",
                    scope=Scope.PROJECT,
                )
            )

        output.rules_used = len(rules)
        output.details = {"config_path": display_path(config_dir, context.project_root)}
        return output


class VSCodeInsidersAdapter(VSCodeAdapter):
    platform_id = "vscode-insiders"


class VSCodiumAdapter(VSCodeAdapter):
    platform_id = "vscodium"


__all__ = ["VSCodeAdapter", "VSCodeInsidersAdapter", "VSCodiumAdapter"]
