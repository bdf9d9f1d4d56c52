"""CLI parser and command behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ruleforge.cli import _build_parser, main
from tests._fixtures.repo_builder import RepoBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "--verbose"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_generate_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "proj", "--dry-run", "--platform", "cursor", "--source", "bp", "--json"])
    assert args.path == "proj"
    assert args.dry_run is True
    assert args.platform == "cursor"
    assert args.source == "bp"
    assert args.json is True


def test_cli_path_defaults_to_current_directory() -> None:
    args = _build_parser().parse_args(["detect"])
    assert args.path == "."
    assert args.verbose is False


def test_platforms_command_lists_limits(capsys: pytest.CaptureFixture[str]) -> None:
    main(["platforms"])

    output = capsys.readouterr().out
    assert "windsurf" in output
    assert "per_file=6000" in output
    assert "max_guidelines=6" in output
    assert "generic" in output


def test_generate_dry_run_for_a_platform(
    repo_builder: RepoBuilder, blueprint_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_builder.write({"package.json": '{"name": "demo", "dependencies": {"next": "14.0.0"}}'})
    blueprint_builder.write({"rules/000-core.md": "# Core\n\n- Always write tests\n"})

    main(
        [
            "generate",
            str(repo_builder.path()),
            "--dry-run",
            "--platform",
            "cursor",
            "--source",
            str(blueprint_builder.path()),
        ]
    )

    output = capsys.readouterr().out
    assert "Primary platform: cursor" in output
    assert "Files that would be written (dry-run):" in output
    assert ".mdc" in output
    assert not (repo_builder.path() / ".cursor").exists()


def test_generate_with_empty_source_has_nothing_to_adapt(
    repo_builder: RepoBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()

    main(["generate", str(repo_builder.path()), "--platform", "zed", "--source", str(empty)])

    assert capsys.readouterr().out.startswith("Nothing to adapt:")


def test_generate_missing_directory_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(tmp_path / "absent"), "--source", str(tmp_path)])

    assert excinfo.value.code == 1


def test_validate_command_reports_issues(
    blueprint_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    blueprint_builder.write(
        {
            "rules/good.md": "---\ndescription: Good\nversion: 1.0.0\nlastUpdated: 2024-01-01\n---\nBody\n",
            "rules/bad.md": "---\ndescription: Missing version\n---\nBody\n",
        }
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["validate", str(blueprint_builder.path())])

    assert excinfo.value.code == 1
    output = capsys.readouterr().out
    assert "rules/bad.md: version:" in output
    assert "rules/good.md" not in output
    assert "Checked 2 blueprint(s)" in output
