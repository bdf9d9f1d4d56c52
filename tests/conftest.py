from __future__ import annotations

from pathlib import Path

import pytest

from ruleforge.adapters import AdaptContext
from ruleforge.platforms import PlatformRegistry
from tests._fixtures.factories import signature
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def blueprint_builder(tmp_path: Path) -> RepoBuilder:
    """A second tree laid out like the blueprint repository (rules/, commands/)."""
    return RepoBuilder(tmp_path, name="blueprints")


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def adapt_context(tmp_path: Path, home_dir: Path) -> AdaptContext:
    project = tmp_path / "project"
    project.mkdir()
    return AdaptContext(
        project_root=project,
        home_dir=home_dir,
        signature=signature(languages=["TypeScript"], frameworks=["Next.js"], libraries=["Tailwind CSS"]),
        project_name="demo-app",
    )


@pytest.fixture
def registry() -> PlatformRegistry:
    return PlatformRegistry()
