"""Tests for the Claude Code adapter."""

from __future__ import annotations

from ruleforge.adapters import AdaptContext, RuleAdapter
from ruleforge.adapters.budget import TRUNCATION_MARKER
from ruleforge.adapters.claude import actionable_lines, command_name
from ruleforge.models import Scope
from tests._fixtures.factories import rule


def _rules():
    return [
        rule("000-core.md", "# Core\n\n- Always write tests first", category="core", alwaysApply=True),
        rule("nextjs.md", "- Use server components for data fetching", category="technology", framework="Next.js"),
        rule("review.md", "Review the diff.", category="task", description="Review pull request changes carefully"),
        rule("explain.md", "Explain code.", category="assistant", description="Explain selected code"),
        rule("style.md", "Prefer small functions."),
    ]


def test_claude_memory_hierarchy_and_commands(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "claude-code", adapt_context)

    root = adapt_context.project_root
    home = adapt_context.home_dir
    paths = [artifact.path for artifact in result.artifacts]
    assert paths == [
        home / ".claude" / "CLAUDE.md",
        root / ".claude" / "commands" / "review-pull-request.md",
        root / "CLAUDE.md",
        root / "CLAUDE.local.md",
        home / ".claude" / "commands" / "explain-selected-code.md",
    ]
    assert [artifact.scope for artifact in result.artifacts] == [
        Scope.GLOBAL,
        Scope.PROJECT,
        Scope.PROJECT,
        Scope.LOCAL,
        Scope.USER,
    ]
    assert result.summary.generated == 5
    assert result.summary.skipped == 0


def test_project_memory_includes_stack_guidelines_and_standards(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "claude-code", adapt_context)
    project = next(item for item in result.artifacts if item.path == adapt_context.project_root / "CLAUDE.md")

    assert project.content.startswith("# demo-app - Claude Code Memory")
    assert "### Next.js Guidelines" in project.content
    assert "- Use server components for data fetching" in project.content
    assert "Prefer small functions." in project.content
    assert "*Technology rules integrated: 1*" in project.content


def test_command_file_carries_arguments_placeholder(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "claude-code", adapt_context)
    command = next(item for item in result.artifacts if item.type == "command" and item.scope is Scope.PROJECT)

    assert command.content == "# Review pull request\n\nReview the diff.\n\nArguments: $ARGUMENTS\n"
    assert command.metadata == {"command": "review-pull-request", "namespace": "project"}


def test_memory_disabled_generates_nothing(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "claude-code", adapt_context, {"memory": False})

    assert result.artifacts == []
    assert result.summary.skipped == 5
    assert result.summary.reason == "Memory disabled in platform config"


def test_commands_can_be_disabled(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "claude-code", adapt_context, {"command": False})

    assert all(item.type == "memory" for item in result.artifacts)
    assert result.summary.skipped == 2
    assert result.summary.details["commands_disabled"] is True


def test_long_commands_respect_per_command_limit(adapt_context: AdaptContext) -> None:
    body = "Step one of the workflow.\n\n" * 600
    long_task = rule("long.md", body, category="task", description="Long task")

    result = RuleAdapter().adapt([long_task], "claude-code", adapt_context)
    command = next(item for item in result.artifacts if item.type == "command")

    assert command.truncated is True
    assert command.character_count <= 10000
    assert command.content.endswith(TRUNCATION_MARKER)
    assert result.summary.truncated == 1


def test_command_name_uses_first_three_words() -> None:
    assert command_name(rule("x.md", description="Fix: the failing build now!")) == "Fix the failing"


def test_actionable_lines_keep_imperative_bullets() -> None:
    content = "Intro\n- Use strict mode\n- Background info\n1. Avoid global state\n"

    assert actionable_lines(content) == ["- Use strict mode", "- Avoid global state"]
