"""Fallback adapter for platforms without a dedicated strategy."""

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


class GenericAdapter(PlatformAdapter):
    """Writes one file per rule plus a small ``config.json`` index."""

    platform_id = "generic"

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
        ordered = self.prioritize(rules, default_priority)

        used_names: set = set()
        for index, rule in enumerate(ordered, start=1):
            filename = unique_filename(
                slugify(Path(rule.name).stem) or slugify(rule_title(rule)),
                extension,
                used_names,
                fallback=f"rule-{index}",
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

        index_doc: Dict[str, Any] = {
            "version": "1.0",
            "platform": config.get("platformId") or self.capability.id,
            "rules": {
                "directory": display_path(rules_dir, context.project_root),
                "priority": "descending",
                "count": len(ordered),
            },
            "project": {
                "name": context.name,
                "technologies": sorted(context.signature.technologies()),
            },
        }
        output.artifacts.append(
            self.make_artifact(
                rules_dir.parent / "config.json",
                json.dumps(index_doc, indent=2) + "\n",
                type="config",
                scope=Scope.PROJECT,
            )
        )
        output.rules_used = len(ordered)
        output.details = {"directory": index_doc["rules"]["directory"]}
        return output


__all__ = ["GenericAdapter"]
