"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from ruleforge.service import create_app


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_score_endpoint_scores_and_selects(client: TestClient) -> None:
    response = client.post(
        "/score",
        json={
            "signature": {"languages": ["TypeScript"], "frameworks": ["Next.js"]},
            "candidates": [
                {"name": "nextjs.md", "path": "rules/technologies/nextjs.md"},
                {"name": "django.md", "path": "rules/technologies/django.md"},
                {"name": "review.md", "path": "commands/review.md", "content_type": "command"},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert [item["path"] for item in data["scored"]] == [
        "rules/technologies/nextjs.md",
        "rules/technologies/django.md",
        "commands/review.md",
    ]
    assert set(data["selected"]) == {"rule", "command"}
    assert "rules/technologies/nextjs.md" in data["selected"]["rule"]
    assert "rules/technologies/django.md" not in data["selected"]["rule"]
    assert data["selected"]["command"] == ["commands/review.md"]


def test_score_endpoint_rejects_unknown_content_type(client: TestClient) -> None:
    response = client.post(
        "/score",
        json={"candidates": [{"name": "a.md", "path": "a.md", "content_type": "spreadsheet"}]},
    )

    assert response.status_code == 422


def test_adapt_endpoint_renders_cursor_rules(client: TestClient, tmp_path: Path) -> None:
    response = client.post(
        "/adapt",
        json={
            "platform": "cursor",
            "project_root": str(tmp_path),
            "home_dir": str(tmp_path / "home"),
            "rules": [
                {
                    "name": "000-core.md",
                    "path": "rules/000-core.md",
                    "content": "Keep functions small.",
                    "frontmatter": {"alwaysApply": True, "category": "core", "id": "standards"},
                }
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["platform"] == "cursor"
    assert data["generated"] == 1
    (artifact,) = data["artifacts"]
    assert artifact["path"] == (tmp_path / ".cursor" / "rules" / "always-core-standards.mdc").as_posix()
    assert artifact["scope"] == "project"
    assert "alwaysApply: true" in artifact["content"]
    assert not (tmp_path / ".cursor").exists()


def test_adapt_endpoint_reports_incompatible_platform(client: TestClient, tmp_path: Path) -> None:
    response = client.post(
        "/adapt",
        json={
            "platform": "windsurf",
            "project_root": str(tmp_path),
            "rules": [{"name": "a.md", "path": "rules/a.md", "content": "A."}],
            "platform_config": {"compatible": False},
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["artifacts"] == []
    assert data["skipped"] == 1
    assert data["reason"] == "Platform not compatible"


def test_disambiguate_endpoint(client: TestClient) -> None:
    response = client.post(
        "/disambiguate",
        json={
            "detected": [
                {"platform_id": "claude-code", "confidence": "medium", "indicator_files": ["~/.claude/"]},
                {"platform_id": "cursor", "confidence": "high", "indicator_files": [".cursor/"]},
            ]
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "platform_id": "cursor",
        "ambiguous": False,
        "reason": "Project configuration present",
    }


def test_disambiguate_endpoint_rejects_bad_confidence(client: TestClient) -> None:
    response = client.post(
        "/disambiguate",
        json={"detected": [{"platform_id": "cursor", "confidence": "certain"}]},
    )

    assert response.status_code == 400
    assert "certain" in response.json()["detail"]
