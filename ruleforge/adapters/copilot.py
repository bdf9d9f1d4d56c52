"""GitHub Copilot adapter: a capped set of code review guidelines."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..logging import get_logger
from ..models import Scope, StandardizedRule
from .base import (
    AdaptContext,
    PlatformAdapter,
    RenderOutput,
    config_limit,
    config_priority,
    render_template,
    rule_title,
    slugify,
    unique_filename,
)

logger = get_logger("adapters.copilot")

EXCLUDED_CATEGORIES = {"assistant"}
_CATEGORY_BONUS = {
    "core": 10,
    "language": 8,
    "technology": 8,
    "stack": 6,
    "task": 4,
}


def heuristic_priority(rule: StandardizedRule) -> int:
    """Secondary ordering key rewarding broadly useful review guidance."""
    score = _CATEGORY_BONUS.get(rule.category, 0)
    if rule.globs:
        score += 3
    if rule.always_apply:
        score += 2
    return score


def guideline_text(rule: StandardizedRule) -> str:
    return rule.content.strip() or rule.description or rule_title(rule)


class GitHubCopilotAdapter(PlatformAdapter):
    platform_id = "github-copilot"

    def render(
        self,
        rules: Sequence[StandardizedRule],
        context: AdaptContext,
        config: Mapping[str, Any],
    ) -> RenderOutput:
        output = RenderOutput()
        limits = self.capability.limits
        per_guideline = config_limit(config.get("characterLimit"), limits.per_guideline)
        max_guidelines = config_limit(config.get("maxGuidelines"), limits.max_guidelines)
        default_priority = config_priority(config.get("priority"))

        eligible = [rule for rule in rules if rule.category not in EXCLUDED_CATEGORIES]
        ranked: List[Tuple[int, StandardizedRule]] = list(enumerate(eligible))
        ranked.sort(
            key=lambda item: (
                -self.effective_priority(item[1], default_priority),
                -heuristic_priority(item[1]),
                item[0],
            )
        )
        chosen = [rule for _, rule in ranked]
        if max_guidelines is not None:
            chosen = chosen[:max_guidelines]
        if len(eligible) > len(chosen):
            logger.info(
                "Copilot keeps %s of %s guidelines; the rest exceed the repository cap",
                len(chosen),
                len(eligible),
            )

        directory = context.project_root / str(config.get("rulesPath") or ".github/copilot-guidelines")
        used_names: set = set()
        guidelines: List[Dict[str, Any]] = []
        for rule in chosen:
            name = rule_title(rule)
            patterns = list(rule.globs) or ["**/*"]
            filename = unique_filename(
                slugify(name, max_length=50), ".md", used_names, fallback=slugify(Path(rule.name).stem) or "guideline"
            )
            artifact = self.make_artifact(
                directory / filename,
                guideline_text(rule),
                type="guideline",
                scope=Scope.REPOSITORY,
                limit=per_guideline,
                priority=self.effective_priority(rule, default_priority),
                metadata={"name": name, "patterns": patterns},
            )
            output.artifacts.append(artifact)
            guidelines.append({"name": name, "description": artifact.content, "patterns": patterns})

        if guidelines:
            output.artifacts.append(
                self.make_artifact(
                    context.project_root / "GITHUB_COPILOT_SETUP.md",
                    render_template(
                        "copilot_setup.md.j2",
                        guidelines=guidelines,
                        per_guideline=per_guideline,
                        max_guidelines=max_guidelines,
                    ),
                    type="instructions",
                    scope=Scope.REPOSITORY,
                )
            )

        output.rules_used = len(chosen)
        output.details = {
            "guidelines": len(guidelines),
            "max_guidelines": max_guidelines,
            "dropped": len(eligible) - len(chosen),
            "excluded_categories": len(rules) - len(eligible),
        }
        return output


__all__ = ["GitHubCopilotAdapter", "guideline_text", "heuristic_priority"]
