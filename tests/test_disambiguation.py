from __future__ import annotations

from ruleforge.disambiguation import disambiguate
from ruleforge.models import Confidence, DetectedIntegration


def _detected(platform_id: str, confidence: Confidence, files=(), indicators=()) -> DetectedIntegration:
    return DetectedIntegration(
        platform_id=platform_id,
        confidence=confidence,
        indicator_files=tuple(files),
        indicators=tuple(indicators),
    )


def test_nothing_detected() -> None:
    choice = disambiguate([_detected("cursor", Confidence.NONE)])

    assert choice.platform_id is None
    assert choice.ambiguous is False
    assert choice.reason == "No platforms detected"


def test_single_detection_wins() -> None:
    choice = disambiguate([_detected("zed", Confidence.MEDIUM, ["~/.config/zed/"])])

    assert (choice.platform_id, choice.ambiguous, choice.reason) == ("zed", False, "Only detected platform")


def test_explicit_override_must_name_a_detected_platform() -> None:
    detected = [
        _detected("cursor", Confidence.HIGH, [".cursor/"]),
        _detected("claude-code", Confidence.MEDIUM, ["~/.claude/"]),
    ]

    chosen = disambiguate(detected, explicit_override="Claude")
    ignored = disambiguate(detected, explicit_override="zed")

    assert (chosen.platform_id, chosen.reason) == ("claude-code", "Explicit platform override")
    assert ignored.platform_id == "cursor"


def test_project_configuration_beats_install_only_confidence() -> None:
    detected = [
        _detected("windsurf", Confidence.HIGH, ["~/.codeium/windsurf/"], ["Currently running in Windsurf"]),
        _detected("zed", Confidence.HIGH, [".zed/"], ["Project configuration: .zed/"]),
    ]

    choice = disambiguate(detected)

    assert choice.platform_id == "zed"
    assert choice.ambiguous is False
    assert choice.reason == "Project configuration present"


def test_indicator_order_decides_between_projects() -> None:
    detected = [
        _detected("claude-code", Confidence.HIGH, ["CLAUDE.md"]),
        _detected("cursor", Confidence.HIGH, [".cursor/"]),
    ]

    assert disambiguate(detected).platform_id == "cursor"


def test_single_active_platform_is_chosen() -> None:
    detected = [
        _detected("cursor", Confidence.MEDIUM, ["~/.cursor/"], ["Installed: ~/.cursor/"]),
        _detected("zed", Confidence.HIGH, ["~/.config/zed/"], ["Currently running in Zed"]),
    ]

    choice = disambiguate(detected)

    assert (choice.platform_id, choice.ambiguous, choice.reason) == ("zed", False, "Currently active platform")


def test_fallback_is_flagged_ambiguous() -> None:
    detected = [
        _detected("zed", Confidence.MEDIUM, ["~/.config/zed/"]),
        _detected("cursor", Confidence.MEDIUM, ["~/.cursor/"]),
        _detected("windsurf", Confidence.LOW),
    ]

    choice = disambiguate(detected)

    assert choice.platform_id == "cursor"
    assert choice.ambiguous is True
    assert choice.reason == "Highest confidence fallback"
