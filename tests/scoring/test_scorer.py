"""Tests for ruleforge.scoring.scorer."""

from __future__ import annotations

import pytest

from ruleforge.models import CandidateDocument, ContentType
from ruleforge.scoring import RelevanceScorer
from tests._fixtures.factories import candidate, signature


@pytest.fixture
def scorer() -> RelevanceScorer:
    return RelevanceScorer()


def test_react_native_document_is_excluded_from_react_web_project(scorer: RelevanceScorer) -> None:
    web = signature(languages=["TypeScript"], frameworks=["React"])
    result = scorer.score(candidate("react-native-patterns.md", folder="rules/technologies"), web)

    assert result.excluded is True
    assert result.relevance_score == 0
    assert result.reasons == ("mobile-in-web-project",)


def test_nextjs_patterns_score_high_for_nextjs_typescript_project(scorer: RelevanceScorer) -> None:
    project = signature(languages=["TypeScript"], frameworks=["Next.js"])
    result = scorer.score(candidate("nextjs-patterns.md", folder="rules/technologies"), project)

    assert result.relevance_score >= 0.8
    assert "framework-match" in result.reasons


@pytest.mark.parametrize(
    "name",
    [
        "nextjs-react-tailwind-typescript-supabase.md",
        "react-components.md",
        "fastapi-services.md",
        "000-core-standards.md",
        "unrelated.md",
    ],
)
def test_scores_stay_within_unit_interval(scorer: RelevanceScorer, name: str) -> None:
    project = signature(
        languages=["TypeScript"],
        frameworks=["Next.js", "React"],
        libraries=["Tailwind CSS", "Supabase"],
    )
    result = scorer.score(candidate(name, folder="rules/technologies"), project)

    assert 0.0 <= result.relevance_score <= 1.0


def test_adding_a_matching_term_never_lowers_the_score(scorer: RelevanceScorer) -> None:
    project = signature(languages=["TypeScript"], frameworks=["Next.js"])
    plain = scorer.score(candidate("testing-patterns.md", folder="rules/technologies"), project)
    enriched = scorer.score(candidate("nextjs-testing-patterns.md", folder="rules/technologies"), project)

    assert enriched.relevance_score >= plain.relevance_score


def test_mobile_project_boosts_mobile_documents(scorer: RelevanceScorer) -> None:
    mobile = signature(languages=["TypeScript"], frameworks=["React Native", "Expo"])
    result = scorer.score(candidate("react-native-navigation.md", folder="rules/technologies"), mobile)

    assert result.excluded is False
    assert "mobile-boost" in result.reasons
    assert result.relevance_score > 0.7


def test_frontend_document_is_penalised_without_javascript(scorer: RelevanceScorer) -> None:
    python_project = signature(languages=["Python"], frameworks=["Django"])
    result = scorer.score(candidate("react-components.md", folder="rules/technologies"), python_project)

    assert result.excluded is False
    assert result.relevance_score == 0.0
    assert "frontend-without-javascript" in result.reasons


def test_python_document_is_penalised_without_python(scorer: RelevanceScorer) -> None:
    web = signature(languages=["TypeScript"], frameworks=["React"])
    result = scorer.score(candidate("fastapi-services.md", folder="rules/technologies"), web)

    assert result.relevance_score == 0.0
    assert "python-without-python" in result.reasons


def test_content_site_excludes_unrelated_ecosystems(scorer: RelevanceScorer) -> None:
    docs_site = signature(languages=["TypeScript"], frameworks=["Astro", "Starlight"])

    unrelated = scorer.score(candidate("supabase-auth.md", folder="rules/technologies"), docs_site)
    related = scorer.score(candidate("astro-content-collections.md", folder="rules/technologies"), docs_site)

    assert unrelated.excluded is True
    assert unrelated.reasons == ("outside-content-stack",)
    assert related.excluded is False
    assert related.relevance_score > 0


def test_command_baseline_plus_workflow_bonus(scorer: RelevanceScorer) -> None:
    command = candidate(
        "git-commit.md",
        folder="commands/claude-code/development",
        content_type=ContentType.COMMAND,
    )
    result = scorer.score(command, signature())

    assert result.relevance_score == pytest.approx(0.6)
    assert result.reasons == ("command-baseline", "command-git")


def test_numbered_core_rule_gets_core_weight(scorer: RelevanceScorer) -> None:
    result = scorer.score(candidate("000-core-standards.md", folder="rules/core"), signature())

    assert result.relevance_score == pytest.approx(0.8)


def test_whole_word_matching_does_not_confuse_java_and_javascript(scorer: RelevanceScorer) -> None:
    java = signature(languages=["Java"])
    result = scorer.score(candidate("javascript-basics.md", folder="rules/languages"), java)

    assert "language-match" not in result.reasons


def test_alias_spelling_counts_as_library_match(scorer: RelevanceScorer) -> None:
    project = signature(languages=["TypeScript"], frameworks=["React"], libraries=["Tailwind CSS"])
    result = scorer.score(candidate("tailwindcss-setup.md", folder="rules/technologies"), project)

    assert "library-match" in result.reasons


def test_malformed_metadata_falls_back_to_baseline(scorer: RelevanceScorer) -> None:
    broken = CandidateDocument(name=None, path=None, content_type="commands")  # type: ignore[arg-type]
    result = scorer.score(broken, signature(frameworks=["React"]))

    assert result.relevance_score == pytest.approx(0.1)
    assert result.excluded is False


def test_score_all_keeps_discovery_order_and_is_deterministic() -> None:
    project = signature(languages=["TypeScript"], frameworks=["Next.js", "React"])
    candidates = [
        candidate("react-native-patterns.md", folder="rules/technologies"),
        candidate("nextjs-patterns.md", folder="rules/technologies"),
        candidate("general.md"),
    ]
    scorer = RelevanceScorer(max_workers=3)

    first = scorer.score_all(candidates, project)
    second = scorer.score_all(candidates, project)

    assert [item.name for item in first] == [item.name for item in candidates]
    assert first == second


def test_weight_overrides_apply_by_rule_name() -> None:
    scorer = RelevanceScorer({"core-rule": 0.5})
    result = scorer.score(candidate("000-core-standards.md", folder="rules/core"), signature())

    assert result.relevance_score == pytest.approx(0.5)


def test_unknown_weight_override_is_rejected() -> None:
    with pytest.raises(ValueError):
        RelevanceScorer({"no-such-rule": 1.0})
