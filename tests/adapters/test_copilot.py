from __future__ import annotations

from ruleforge.adapters import AdaptContext, RuleAdapter
from ruleforge.adapters.copilot import heuristic_priority
from tests._fixtures.factories import rule


def _guideline_rules():
    body = "Reviewers should check error handling paths and naming. " * 20
    rules = [
        rule(f"g{index}.md", body, category="technology", priority=index, title=f"Guideline rule {index}")
        for index in range(1, 11)
    ]
    rules.append(rule("explain.md", "Explain.", category="assistant", priority=99, title="Explain"))
    return rules


def test_copilot_caps_guidelines_by_priority(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_guideline_rules(), "github-copilot", adapt_context)

    guidelines = [item for item in result.artifacts if item.type == "guideline"]
    assert len(guidelines) == 6
    assert [item.priority for item in guidelines] == [10.0, 9.0, 8.0, 7.0, 6.0, 5.0]
    assert all(item.character_count <= 600 for item in guidelines)
    assert all(item.truncated for item in guidelines)
    assert guidelines[0].path == adapt_context.project_root / ".github" / "copilot-guidelines" / "guideline-rule-10.md"
    assert guidelines[0].metadata == {"name": "Guideline rule 10", "patterns": ["**/*"]}
    assert result.summary.skipped == 5
    assert result.summary.details["dropped"] == 4
    assert result.summary.details["excluded_categories"] == 1


def test_setup_instructions_list_the_kept_guidelines(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_guideline_rules(), "github-copilot", adapt_context)

    setup = result.artifacts[-1]
    assert setup.path == adapt_context.project_root / "GITHUB_COPILOT_SETUP.md"
    assert setup.type == "instructions"
    assert "### Guideline 1: Guideline rule 10" in setup.content
    assert "Guideline rule 4" not in setup.content
    assert "limited to 600 characters" in setup.content


def test_max_guidelines_override(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt(_guideline_rules(), "github-copilot", adapt_context, {"maxGuidelines": 2})

    assert sum(1 for item in result.artifacts if item.type == "guideline") == 2


def test_no_eligible_rules_means_no_setup_file(adapt_context: AdaptContext) -> None:
    result = RuleAdapter().adapt([rule("a.md", category="assistant")], "github-copilot", adapt_context)

    assert result.artifacts == []
    assert result.summary.skipped == 1


def test_heuristic_breaks_priority_ties(adapt_context: AdaptContext) -> None:
    rules = [
        rule("general.md", "General advice.", title="General"),
        rule("core.md", "Core advice.", category="core", title="Core"),
    ]

    result = RuleAdapter().adapt(rules, "github-copilot", adapt_context)

    names = [item.metadata["name"] for item in result.artifacts if item.type == "guideline"]
    assert names == ["Core", "General"]
    assert heuristic_priority(rule("x.md", category="core", globs=["*.py"], alwaysApply=True)) == 15
