from __future__ import annotations

import yaml

from ruleforge.adapters import AdaptContext, RuleAdapter
from ruleforge.adapters.cursor import activation_type, cursor_basename
from ruleforge.models import ActivationModel, Scope
from tests._fixtures.factories import rule


def _header(content: str) -> dict:
    return yaml.safe_load(content.split("---")[1])


def _rules():
    return [
        rule("notes.md", "Scratch notes."),
        rule("testing.md", "Write focused tests.", category="testing", description="Testing approach"),
        rule(
            "react.md",
            "Use hooks.",
            category="technology",
            framework="React",
            globs=["**/*.tsx", "**/*.jsx"],
            id="components",
        ),
        rule("000-core.md", "Always run tests.", category="core", alwaysApply=True, id="standards"),
    ]


def test_cursor_writes_one_mdc_per_rule_grouped_by_activation(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "cursor", adapt_context)

    rules_dir = adapt_context.project_root / ".cursor" / "rules"
    assert [artifact.path for artifact in result.artifacts] == [
        rules_dir / "always-core-standards.mdc",
        rules_dir / "auto-technology-react-components.mdc",
        rules_dir / "agent-testing-testing-approach.mdc",
        rules_dir / "manual-general-notes.mdc",
    ]
    assert all(artifact.scope is Scope.PROJECT for artifact in result.artifacts)
    assert result.summary.generated == 4
    assert result.summary.skipped == 0
    assert result.summary.details == {"always": 1, "auto_attached": 1, "agent_requested": 1, "manual": 1}


def test_mdc_frontmatter_reflects_activation(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_rules(), "cursor", adapt_context)
    by_activation = {artifact.metadata["activation"]: artifact for artifact in result.artifacts}

    assert _header(by_activation["always"].content) == {"alwaysApply": True}
    assert _header(by_activation["auto-attached"].content) == {
        "globs": "**/*.tsx,**/*.jsx",
        "alwaysApply": False,
    }
    assert _header(by_activation["agent-requested"].content) == {
        "description": "Testing approach",
        "alwaysApply": False,
    }
    assert by_activation["auto-attached"].content.endswith("---\n\nUse hooks.\n")
    assert by_activation["manual"].metadata["rule_name"] == "general"


def test_priority_orders_rules_within_the_project_scope(adapt_context: AdaptContext) -> None:
    rules = [
        rule("low.md", "Low.", description="Low priority", priority=1),
        rule("high.md", "High.", description="High priority", priority=9),
    ]

    result = RuleAdapter().adapt(rules, "cursor", adapt_context)

    assert [artifact.priority for artifact in result.artifacts] == [9.0, 1.0]


def test_activation_precedence() -> None:
    assert activation_type(rule("a.md", alwaysApply=True, globs=["*.py"])) is ActivationModel.ALWAYS
    assert activation_type(rule("a.md", globs=["*.py"], description="x")) is ActivationModel.AUTO_ATTACHED
    assert activation_type(rule("a.md", description="x")) is ActivationModel.AGENT_REQUESTED
    assert activation_type(rule("a.md")) is ActivationModel.MANUAL


def test_basename_is_bounded() -> None:
    long_rule = rule("a.md", category="technology", framework="Framework " * 10, id="x")

    assert len(cursor_basename(long_rule)) <= 40
