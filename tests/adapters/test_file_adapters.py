"""Zed, VS Code family and generic adapters."""

from __future__ import annotations

import json

from ruleforge.adapters import AdaptContext, RuleAdapter
from ruleforge.models import Scope
from tests._fixtures.factories import rule


def _rules():
    return [
        rule("tips.md", "# Editor Tips\n\nKeep diffs small.\n\n", priority=2),
        rule("style.md", "# Style Guide\n\nUse descriptive names.", priority=8),
    ]


def test_zed_project_mode(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "zed", adapt_context)

    rules_dir = adapt_context.project_root / ".zed" / "ai-rules"
    assert [item.path for item in result.artifacts] == [rules_dir / "style-guide.md", rules_dir / "editor-tips.md"]
    assert result.artifacts[1].content == "# Editor Tips\n\nKeep diffs small.\n"
    assert result.summary.details == {"mode": "project", "rules": 2}


def test_zed_global_mode_targets_home_config(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "zed", adapt_context, {"mode": "global"})

    assert {item.path.parent for item in result.artifacts} == {
        adapt_context.home_dir / ".config" / "zed" / "ai-rules"
    }
    assert {item.scope for item in result.artifacts} == {Scope.GLOBAL}


def test_duplicate_titles_get_numbered_filenames(adapt_context: AdaptContext) -> None:
    rules = [rule("a.md", "# Same\n\nOne."), rule("b.md", "# Same\n\nTwo.")]

    result = RuleAdapter().adapt(rules, "zed", adapt_context)

    assert [item.path.name for item in result.artifacts] == ["same.md", "same-2.md"]


def test_vscode_rules_and_mcp_settings(adapt_context: AdaptContext) -> None:
    config = {"mcpIntegration": True, "globalShortcuts": {"ask": "ctrl+k"}}

    result = RuleAdapter().adapt(_rules(), "vscode", adapt_context, config)

    config_dir = adapt_context.project_root / ".vscode"
    paths = [item.path for item in result.artifacts]
    assert paths[:2] == [config_dir / "ai-rules" / "style-guide.md", config_dir / "ai-rules" / "editor-tips.md"]
    mcp = result.artifacts[-1]
    assert mcp.path == config_dir / "mcp.json"
    assert json.loads(mcp.content) == {"globalShortcuts": {"ask": "ctrl+k"}, "servers": {}}
    assert result.summary.details == {"config_path": ".vscode"}


def test_vscode_without_mcp_writes_rules_only(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "vscode", adapt_context)

    assert all(item.type == "rule" for item in result.artifacts)


def test_vscode_variants_use_their_own_folders(adapt_context: AdaptContext) -> None:
    insiders = RuleAdapter().adapt(_rules(), "vscode-insiders", adapt_context)
    codium = RuleAdapter().adapt(_rules(), "vscodium", adapt_context)

    root = adapt_context.project_root
    assert insiders.artifacts[0].path.parent == root / ".vscode-insiders" / "ai-rules"
    assert codium.artifacts[0].path.parent == root / ".vscode-oss" / "ai-rules"


def test_unknown_platform_uses_generic_layout(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "acme-ai", adapt_context)

    root = adapt_context.project_root
    assert result.platform_id == "acme-ai"
    assert [item.path for item in result.artifacts] == [
        root / ".ai" / "rules" / "style.md",
        root / ".ai" / "rules" / "tips.md",
        root / ".ai" / "config.json",
    ]
    index = json.loads(result.artifacts[-1].content)
    assert index["platform"] == "acme-ai"
    assert index["rules"] == {"directory": ".ai/rules", "priority": "descending", "count": 2}
    assert index["project"]["name"] == "demo-app"
    assert index["project"]["technologies"] == sorted(index["project"]["technologies"])


def test_jetbrains_has_no_dedicated_strategy(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "IntelliJ", adapt_context)

    assert result.platform_id == "jetbrains"
    assert result.artifacts[0].path.parent == adapt_context.project_root / ".idea" / "ai-rules"
    assert json.loads(result.artifacts[-1].content)["platform"] == "jetbrains"
