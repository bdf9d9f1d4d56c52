"""Dependency manifest readers used by the stack detector."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Set

from ..logging import get_logger

logger = get_logger("analysis.dependencies")

_REQUIREMENT_SPLIT = re.compile(r"[<>=!~;\[ ]")


def load_python_dependencies(root: Path) -> List[str]:
    """Collect Python dependencies from requirements.txt and pyproject.toml."""
    deps: Set[str] = set()

    requirements = root / "requirements.txt"
    if requirements.exists():
        deps.update(_parse_requirements(requirements))

    pyproject = load_pyproject(root)
    if pyproject:
        deps.update(_pyproject_dependencies(pyproject))

    return sorted(deps)


def load_pyproject(root: Path) -> Dict[str, Any]:
    path = root / "pyproject.toml"
    if not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _parse_requirements(path: Path) -> List[str]:
    packages: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-")):
            continue
        name = _REQUIREMENT_SPLIT.split(stripped, 1)[0].strip()
        if name:
            packages.append(name.lower())
    return packages


def _pyproject_dependencies(data: Dict[str, Any]) -> Set[str]:
    packages: Set[str] = set()
    dependencies: List[Any] = []

    project = data.get("project")
    if isinstance(project, dict):
        dependencies.extend(project.get("dependencies", []) or [])
        optional = project.get("optional-dependencies", {}) or {}
        for values in optional.values():
            dependencies.extend(values or [])

    tool = data.get("tool")
    poetry = tool.get("poetry", {}) if isinstance(tool, dict) else {}
    if isinstance(poetry, dict):
        for key in ("dependencies", "dev-dependencies"):
            section = poetry.get(key, {}) or {}
            if isinstance(section, dict):
                dependencies.extend(section.keys())

    for dep in dependencies:
        if not isinstance(dep, str):
            continue
        name = _REQUIREMENT_SPLIT.split(dep.strip(), 1)[0].strip().lower()
        if name and name != "python":
            packages.add(name)
    return packages


def load_package_json(root: Path) -> Dict[str, Any]:
    """Return the parsed package.json contents or an empty dict."""
    package_json = root / "package.json"
    if not package_json.exists():
        return {}
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.debug("Ignoring unreadable %s: %s", package_json, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_node_dependencies(package: Dict[str, Any]) -> Dict[str, List[str]]:
    """Return Node.js dependencies separated into runtime/dev lists."""

    def _extract(key: str) -> List[str]:
        deps = package.get(key, {})
        if isinstance(deps, dict):
            return sorted(str(name) for name in deps.keys())
        return []

    return {
        "dependencies": _extract("dependencies"),
        "devDependencies": _extract("devDependencies"),
    }


def load_java_dependencies(root: Path) -> List[str]:
    """Collect Java dependencies from pom.xml and build.gradle files."""
    deps: Set[str] = set()
    pom = root / "pom.xml"
    if pom.exists():
        deps.update(_parse_pom_dependencies(pom))
    for name in ("build.gradle", "build.gradle.kts"):
        gradle = root / name
        if gradle.exists():
            deps.update(_parse_gradle_dependencies(gradle.read_text(encoding="utf-8")))
    return sorted(deps)


def _parse_pom_dependencies(path: Path) -> Set[str]:
    deps: Set[str] = set()
    try:
        root = ET.fromstring(path.read_text(encoding="utf-8"))
    except ET.ParseError:
        return deps

    match = re.match(r"\{(.+)}", root.tag)
    prefix = f"{{{match.group(1)}}}" if match else ""
    for dep in root.findall(f".//{prefix}dependency"):
        group = dep.findtext(f"{prefix}groupId", default="")
        artifact = dep.findtext(f"{prefix}artifactId", default="")
        if group and artifact:
            deps.add(f"{group}:{artifact}")
    return deps


def _parse_gradle_dependencies(content: str) -> Set[str]:
    deps: Set[str] = set()
    pattern = re.compile(r"['\"]([\w\-.]+:[\w\-.]+)(?::[\w\-.]+)?['\"]")
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        if any(token in line for token in ("implementation", "api", "compile", "runtimeOnly", "testImplementation")):
            match = pattern.search(line)
            if match:
                deps.add(match.group(1))
    return deps


def load_go_dependencies(root: Path) -> List[str]:
    go_mod = root / "go.mod"
    if not go_mod.exists():
        return []
    deps: Set[str] = set()
    in_block = False
    for line in go_mod.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped.startswith("require ("):
            in_block = True
            continue
        if in_block and stripped == ")":
            in_block = False
            continue
        if stripped.startswith("require "):
            stripped = stripped[len("require "):]
        elif not in_block:
            continue
        module = stripped.split()[0] if stripped.split() else ""
        if module and not module.startswith("//"):
            deps.add(module)
    return sorted(deps)


def load_cargo_dependencies(root: Path) -> List[str]:
    cargo = root / "Cargo.toml"
    if not cargo.exists():
        return []
    try:
        data = tomllib.loads(cargo.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError:
        return []
    deps: Set[str] = set()
    for key in ("dependencies", "dev-dependencies"):
        section = data.get(key)
        if isinstance(section, dict):
            deps.update(str(name) for name in section.keys())
    return sorted(deps)


__all__ = [
    "load_cargo_dependencies",
    "load_go_dependencies",
    "load_java_dependencies",
    "load_node_dependencies",
    "load_package_json",
    "load_pyproject",
    "load_python_dependencies",
]
