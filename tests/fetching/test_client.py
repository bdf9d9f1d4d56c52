"""Tests for ruleforge.fetching.client."""

from __future__ import annotations

import json
from typing import Dict, List, Mapping, Tuple

import pytest

from ruleforge.fetching import FetchError, GitHubContentTree, LocalContentTree, discover_candidates
from ruleforge.models import ContentType
from tests._fixtures.repo_builder import RepoBuilder


def test_local_tree_lists_sorted_entries(blueprint_builder: RepoBuilder) -> None:
    blueprint_builder.write({"rules/b.md": "b", "rules/a.md": "a", "rules/core/c.md": "c"})
    tree = LocalContentTree(blueprint_builder.path())

    entries = tree.list("rules")

    assert [(entry.name, entry.type) for entry in entries] == [
        ("a.md", "file"),
        ("b.md", "file"),
        ("core", "dir"),
    ]
    assert tree.list("missing") == []


def test_local_tree_refuses_paths_outside_root(blueprint_builder: RepoBuilder) -> None:
    tree = LocalContentTree(blueprint_builder.path())

    with pytest.raises(FetchError):
        tree.fetch("../outside.md")


def test_discover_candidates_assigns_categories_and_filters_extensions(blueprint_builder: RepoBuilder) -> None:
    blueprint_builder.write(
        {
            "rules/000-core.md": "core",
            "rules/technologies/nextjs.mdc": "next",
            "rules/technologies/notes.txt": "skip",
            "commands/generic/git/commit.md": "commit",
            "commands/cursor/review/review.md": "review",
        }
    )
    tree = LocalContentTree(blueprint_builder.path())

    candidates = discover_candidates(tree, [ContentType.RULE, ContentType.COMMAND], platform_id="cursor")

    summary = [(item.path, item.content_type, item.category) for item in candidates]
    assert summary == [
        ("rules/000-core.md", ContentType.RULE, None),
        ("rules/technologies/nextjs.mdc", ContentType.RULE, "technologies"),
        ("commands/cursor/review/review.md", ContentType.COMMAND, "review"),
    ]


def test_discover_candidates_uses_whole_command_tree_without_platform_folder(
    blueprint_builder: RepoBuilder,
) -> None:
    blueprint_builder.write({"commands/git/commit.md": "commit"})
    tree = LocalContentTree(blueprint_builder.path())

    candidates = discover_candidates(tree, [ContentType.COMMAND], platform_id="zed")

    assert [item.path for item in candidates] == ["commands/git/commit.md"]
    assert candidates[0].category == "git"


class _FakeTransport:
    def __init__(self, responses: Dict[str, bytes]) -> None:
        self.responses = responses
        self.calls: List[Tuple[str, Mapping[str, str]]] = []

    def __call__(self, url: str, headers: Mapping[str, str]) -> bytes:
        self.calls.append((url, dict(headers)))
        if url not in self.responses:
            raise FileNotFoundError(url)
        return self.responses[url]


def test_github_tree_lists_contents_relative_to_base_path() -> None:
    listing = [
        {"name": "react.md", "path": ".ai/rules/react.md", "type": "file", "download_url": "https://raw/react.md"},
        {"name": "core", "path": ".ai/rules/core", "type": "dir"},
        {"name": "link", "path": ".ai/rules/link", "type": "symlink"},
    ]
    transport = _FakeTransport(
        {
            "https://api.github.com/repos/acme/blueprints/contents/.ai/rules?ref=main": json.dumps(listing).encode(),
            "https://raw/react.md": b"# React\n",
        }
    )
    tree = GitHubContentTree("acme/blueprints", ref="main", token="secret", transport=transport)

    entries = tree.list("rules")

    assert [(entry.path, entry.type, entry.ref) for entry in entries] == [
        ("rules/react.md", "file", "https://raw/react.md"),
        ("rules/core", "dir", "rules/core"),
    ]
    assert transport.calls[0][1]["Authorization"] == "Bearer secret"
    assert tree.fetch("https://raw/react.md") == "# React\n"


def test_github_tree_treats_missing_directory_as_empty() -> None:
    tree = GitHubContentTree("acme/blueprints", transport=_FakeTransport({}))

    assert tree.list("schemas") == []


def test_github_tree_reports_missing_body_as_fetch_error() -> None:
    tree = GitHubContentTree("acme/blueprints", transport=_FakeTransport({}))

    with pytest.raises(FetchError):
        tree.fetch("https://raw/missing.md")


def test_github_tree_rejects_invalid_listing_payload() -> None:
    transport = _FakeTransport({"https://api.github.com/repos/acme/blueprints/contents/.ai/rules": b"{not json"})
    tree = GitHubContentTree("acme/blueprints", transport=transport)

    with pytest.raises(FetchError):
        tree.list("rules")


def test_from_environment_reads_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RULEFORGE_GITHUB_TOKEN", "abc")

    tree = GitHubContentTree.from_environment("acme/blueprints")

    assert tree.token == "abc"
