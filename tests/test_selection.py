"""Tests for ruleforge.selection."""

from __future__ import annotations

from ruleforge.config import SelectionOverride
from ruleforge.models import ContentType, ScoredCandidate
from ruleforge.selection import DEFAULT_POLICIES, TemplateSelector
from tests._fixtures.factories import candidate


def _scored(name: str, score: float, *, content_type: ContentType = ContentType.RULE, excluded: bool = False):
    folder = "commands" if content_type is ContentType.COMMAND else "rules"
    return ScoredCandidate(
        candidate=candidate(name, folder=folder, content_type=content_type),
        relevance_score=score,
        excluded=excluded,
    )


def test_default_policies_pin_thresholds_and_caps() -> None:
    assert DEFAULT_POLICIES[ContentType.COMMAND].threshold == 0.2
    assert DEFAULT_POLICIES[ContentType.RULE].threshold == 0.3
    assert DEFAULT_POLICIES[ContentType.DOC].threshold == 0.4
    assert DEFAULT_POLICIES[ContentType.SCHEMA].threshold == 0.4
    assert DEFAULT_POLICIES[ContentType.COMMAND].max_items == 30
    assert DEFAULT_POLICIES[ContentType.RULE].max_items == 25
    assert DEFAULT_POLICIES[ContentType.DOC].max_items == 15
    assert DEFAULT_POLICIES[ContentType.RULE].fallback_top_k == 10


def test_select_orders_by_score_and_keeps_ties_in_discovery_order() -> None:
    scored = [
        _scored("a.md", 0.5),
        _scored("b.md", 0.9),
        _scored("c.md", 0.5),
    ]
    selection = TemplateSelector().select(scored, ContentType.RULE)

    assert [item.name for item in selection] == ["b.md", "a.md", "c.md"]


def test_select_drops_excluded_and_zero_scores() -> None:
    scored = [
        _scored("kept.md", 0.6),
        _scored("excluded.md", 0.9, excluded=True),
        _scored("zero.md", 0.0),
    ]
    selection = TemplateSelector().select(scored, ContentType.RULE)

    assert selection.paths == ["rules/kept.md"]


def test_duplicate_paths_collapse_to_first_occurrence() -> None:
    first = _scored("dup.md", 0.4)
    second = _scored("dup.md", 0.95)
    selection = TemplateSelector().select([first, second], ContentType.RULE)

    assert len(selection) == 1
    assert selection.items[0].relevance_score == 0.4


def test_fallback_keeps_top_candidates_above_floor_when_threshold_unmet() -> None:
    scored = [_scored(f"rule-{index}.md", 0.15) for index in range(12)]
    scored.append(_scored("noise.md", 0.05))
    selection = TemplateSelector().select(scored, ContentType.RULE)

    assert len(selection) == 10
    assert "rules/noise.md" not in selection.paths


def test_cap_limits_selected_commands() -> None:
    scored = [_scored(f"cmd-{index}.md", 0.5, content_type=ContentType.COMMAND) for index in range(40)]
    selection = TemplateSelector().select(scored, ContentType.COMMAND)

    assert len(selection) == 30


def test_select_only_considers_requested_content_type() -> None:
    scored = [
        _scored("rule.md", 0.9),
        _scored("command.md", 0.9, content_type=ContentType.COMMAND),
    ]

    assert TemplateSelector().select(scored, ContentType.COMMAND).paths == ["commands/command.md"]


def test_overrides_replace_individual_policy_fields() -> None:
    selector = TemplateSelector({ContentType.RULE: SelectionOverride(threshold=0.7, max_items=1)})
    scored = [_scored("a.md", 0.8), _scored("b.md", 0.75), _scored("c.md", 0.2)]

    selection = selector.select(scored, ContentType.RULE)

    assert selection.paths == ["rules/a.md"]
    assert selector.policy(ContentType.RULE).fallback_top_k == 10
