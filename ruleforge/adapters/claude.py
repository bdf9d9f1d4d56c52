"""Claude Code adapter: hierarchical memory files plus slash commands."""

from __future__ import annotations

import re
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from ..models import Scope, StandardizedRule
from ..scoring.terms import mentions, tokenize
from .base import (
    AdaptContext,
    PlatformAdapter,
    RenderOutput,
    config_priority,
    render_template,
    rule_title,
    slugify,
    unique_filename,
)

TECHNOLOGY_CATEGORIES = {"technology", "framework", "language", "stack"}
LOCAL_CATEGORIES = {"technology", "framework", "language"}
PROJECT_COMMAND_CATEGORIES = {"task"}
USER_COMMAND_CATEGORIES = {"assistant", "workflow"}

_NUMBERED = re.compile(r"^\d+\.\s+")
_ACTIONABLE_WORDS = (
    "use",
    "prefer",
    "avoid",
    "always",
    "never",
    "ensure",
    "keep",
    "write",
    "run",
    "follow",
    "do not",
    "don't",
)
_MAX_GUIDELINE_LINES = 8


def command_name(rule: StandardizedRule) -> str:
    """First three words of the description, punctuation removed."""
    source = rule.description or rule_title(rule)
    words = re.sub(r"[^A-Za-z0-9\s]", "", source).split()
    return " ".join(words[:3]).strip()


def actionable_lines(content: str) -> List[str]:
    lines: List[str] = []
    for raw in content.splitlines():
        stripped = raw.strip()
        if stripped.startswith(("- ", "* ")):
            candidate = f"- {stripped[2:].strip()}"
        elif _NUMBERED.match(stripped):
            candidate = f"- {_NUMBERED.sub('', stripped)}"
        else:
            continue
        lowered = candidate.lower()
        if any(word in lowered for word in _ACTIONABLE_WORDS):
            lines.append(candidate)
        if len(lines) >= _MAX_GUIDELINE_LINES:
            break
    return lines


def _matching_rules(rules: Sequence[StandardizedRule], technology: str) -> List[StandardizedRule]:
    return [rule for rule in rules if mentions(tokenize(f"{rule.path} {rule.name}"), technology)]


class ClaudeCodeAdapter(PlatformAdapter):
    platform_id = "claude-code"

    def render(
        self,
        rules: Sequence[StandardizedRule],
        context: AdaptContext,
        config: Mapping[str, Any],
    ) -> RenderOutput:
        output = RenderOutput()
        if config.get("memory") is False:
            output.details["reason"] = "Memory disabled in platform config"
            return output

        default_priority = config_priority(config.get("priority"))
        ordered = self.prioritize(rules, default_priority)
        commands_enabled = config.get("command") is not False
        used: set = set()

        global_rules = [rule for rule in ordered if rule.category == "core" and rule.always_apply]
        if global_rules:
            content = render_template(
                "claude_global.md.j2",
                rules=[{"title": rule_title(rule), "body": rule.content.strip()} for rule in global_rules],
            )
            output.artifacts.append(
                self.make_artifact(
                    context.home_dir / ".claude" / "CLAUDE.md",
                    content,
                    type="memory",
                    scope=Scope.GLOBAL,
                )
            )
            used.update(id(rule) for rule in global_rules)

        technology_rules = [rule for rule in ordered if rule.category in TECHNOLOGY_CATEGORIES]
        project_rules = [
            rule
            for rule in ordered
            if id(rule) not in used
            and rule.category not in TECHNOLOGY_CATEGORIES
            and rule.category not in PROJECT_COMMAND_CATEGORIES
            and rule.category not in USER_COMMAND_CATEGORIES
        ]
        guidelines = self._technology_guidelines(technology_rules, context)
        signature = context.signature
        content = render_template(
            "claude_project.md.j2",
            project_name=context.name,
            project_type=context.project_type,
            languages=", ".join(sorted(signature.languages)),
            frameworks=", ".join(sorted(signature.frameworks)),
            libraries=", ".join(sorted(signature.libraries)[:3]),
            test_frameworks=", ".join(sorted(signature.test_frameworks)),
            build_tools=", ".join(sorted(signature.build_tools)),
            guidelines=guidelines,
            core_rules=[rule.content.strip() for rule in project_rules],
            technology_rule_count=len(technology_rules),
        )
        output.artifacts.append(
            self.make_artifact(
                context.project_root / "CLAUDE.md",
                content,
                type="memory",
                scope=Scope.PROJECT,
            )
        )
        used.update(id(rule) for rule in project_rules)
        used.update(id(rule) for rule in technology_rules)

        local_rules = [rule for rule in ordered if rule.category in LOCAL_CATEGORIES]
        if local_rules:
            groups: "OrderedDict[str, List[str]]" = OrderedDict()
            for rule in local_rules:
                groups.setdefault(rule.framework or "General", []).append(rule.content.strip())
            content = render_template(
                "claude_local.md.j2",
                project_name=context.name,
                groups=[{"name": name, "bodies": bodies} for name, bodies in groups.items()],
            )
            output.artifacts.append(
                self.make_artifact(
                    context.project_root / "CLAUDE.local.md",
                    content,
                    type="memory",
                    scope=Scope.LOCAL,
                )
            )

        if commands_enabled:
            project_dir = context.project_root / ".claude" / "commands"
            user_dir = context.home_dir / ".claude" / "commands"
            filenames: Dict[Path, set] = {project_dir: set(), user_dir: set()}
            for rule in ordered:
                if rule.category in PROJECT_COMMAND_CATEGORIES:
                    directory, scope = project_dir, Scope.PROJECT
                elif rule.category in USER_COMMAND_CATEGORIES:
                    directory, scope = user_dir, Scope.USER
                else:
                    continue
                name = command_name(rule)
                filename = unique_filename(
                    slugify(name), ".md", filenames[directory], fallback=slugify(Path(rule.name).stem) or "command"
                )
                output.artifacts.append(
                    self.make_artifact(
                        directory / filename,
                        render_template("claude_command.md.j2", name=name or rule_title(rule), body=rule.content.strip()),
                        type="command",
                        scope=scope,
                        limit=self.capability.limits.per_command,
                        priority=self.effective_priority(rule, default_priority),
                        metadata={"command": filename[:-3], "namespace": scope.value},
                    )
                )
                used.add(id(rule))
        else:
            output.details["commands_disabled"] = True

        output.rules_used = len(used)
        output.details["memory_files"] = sum(1 for item in output.artifacts if item.type == "memory")
        output.details["commands"] = sum(1 for item in output.artifacts if item.type == "command")
        return output

    def _technology_guidelines(
        self, technology_rules: Sequence[StandardizedRule], context: AdaptContext
    ) -> List[Dict[str, Any]]:
        sections: List[Dict[str, Any]] = []
        signature = context.signature
        plan = (
            [(framework, 3) for framework in sorted(signature.frameworks)]
            + [(language, 2) for language in sorted(signature.languages)]
            + [(library, 2) for library in sorted(signature.libraries)[:3]]
        )
        for technology, limit in plan:
            lines: List[str] = []
            for rule in _matching_rules(technology_rules, technology)[:limit]:
                lines.extend(actionable_lines(rule.content))
            if lines:
                sections.append({"title": technology, "lines": lines})
        return sections


__all__ = ["ClaudeCodeAdapter", "actionable_lines", "command_name"]
