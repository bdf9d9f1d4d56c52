"""Technology stack detection producing the raw analysis mapping."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from ..logging import get_logger
from .dependencies import (
    load_cargo_dependencies,
    load_go_dependencies,
    load_java_dependencies,
    load_node_dependencies,
    load_package_json,
    load_pyproject,
    load_python_dependencies,
)
from .scanner import RepoInventory, RepoScanner

logger = get_logger("analysis.stack")

# (dependency name or prefix, label). A trailing "*" matches by prefix.
_NODE_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("next", "Next.js"),
    ("react", "React"),
    ("react-native", "React Native"),
    ("expo", "Expo"),
    ("vue", "Vue.js"),
    ("nuxt", "Nuxt"),
    ("@angular/core", "Angular"),
    ("svelte", "Svelte"),
    ("@sveltejs/kit", "SvelteKit"),
    ("astro", "Astro"),
    ("@astrojs/starlight", "Starlight"),
    ("@docusaurus/core", "Docusaurus"),
    ("@remix-run/*", "Remix"),
    ("gatsby", "Gatsby"),
    ("express", "Express"),
    ("fastify", "Fastify"),
    ("koa", "Koa"),
    ("@nestjs/core", "NestJS"),
    ("electron", "Electron"),
    ("@tauri-apps/*", "Tauri"),
    ("@ionic/*", "Ionic"),
    ("@capacitor/core", "Capacitor"),
    ("commander", "Commander"),
    ("yargs", "Yargs"),
    ("inquirer", "Inquirer"),
)

_NODE_LIBRARIES: Tuple[Tuple[str, str], ...] = (
    ("tailwindcss", "Tailwind CSS"),
    ("@supabase/*", "Supabase"),
    ("@radix-ui/*", "Radix UI"),
    ("@clerk/*", "Clerk"),
    ("@trpc/*", "tRPC"),
    ("@prisma/client", "Prisma"),
    ("prisma", "Prisma"),
    ("drizzle-orm", "Drizzle"),
    ("zod", "Zod"),
    ("@tanstack/react-query", "React Query"),
    ("redux", "Redux"),
    ("@reduxjs/toolkit", "Redux"),
    ("zustand", "Zustand"),
    ("axios", "Axios"),
    ("graphql", "GraphQL"),
    ("mongoose", "Mongoose"),
    ("stripe", "Stripe"),
    ("framer-motion", "Framer Motion"),
    ("chalk", "Chalk"),
)

_NODE_TEST_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("jest", "Jest"),
    ("vitest", "Vitest"),
    ("mocha", "Mocha"),
    ("@playwright/test", "Playwright"),
    ("cypress", "Cypress"),
    ("@testing-library/*", "Testing Library"),
)

_NODE_BUILD_TOOLS: Tuple[Tuple[str, str], ...] = (
    ("vite", "Vite"),
    ("webpack", "Webpack"),
    ("turbo", "Turborepo"),
    ("esbuild", "esbuild"),
    ("rollup", "Rollup"),
    ("typescript", "tsc"),
)

_PYTHON_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("fastapi", "FastAPI"),
    ("django", "Django"),
    ("flask", "Flask"),
    ("starlette", "Starlette"),
    ("click", "Click"),
    ("typer", "Typer"),
)

_PYTHON_LIBRARIES: Tuple[Tuple[str, str], ...] = (
    ("pydantic", "Pydantic"),
    ("sqlalchemy", "SQLAlchemy"),
    ("requests", "Requests"),
    ("httpx", "HTTPX"),
    ("numpy", "NumPy"),
    ("pandas", "pandas"),
    ("celery", "Celery"),
    ("jinja2", "Jinja2"),
    ("pyyaml", "PyYAML"),
)

_PYTHON_TEST_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("pytest", "pytest"),
    ("hypothesis", "Hypothesis"),
)

_GO_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("github.com/gin-gonic/gin", "Gin"),
    ("github.com/labstack/echo*", "Echo"),
    ("github.com/gofiber/fiber*", "Fiber"),
)

_RUST_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("actix-web", "Actix Web"),
    ("axum", "Axum"),
    ("rocket", "Rocket"),
    ("tauri", "Tauri"),
)

_CLI_KEYWORDS = {"cli", "command-line", "terminal", "tool", "utility"}
_CLI_FRAMEWORKS = {"Commander", "Yargs", "Inquirer", "Click", "Typer"}


def _match_labels(dependencies: Iterable[str], table: Sequence[Tuple[str, str]]) -> List[str]:
    lowered = [dep.lower() for dep in dependencies]
    labels: List[str] = []
    for key, label in table:
        if key.endswith("*"):
            prefix = key[:-1]
            hit = any(dep.startswith(prefix) for dep in lowered)
        else:
            hit = key in lowered
        if hit and label not in labels:
            labels.append(label)
    return labels


def _merge(*groups: Iterable[str]) -> List[str]:
    merged: List[str] = []
    for group in groups:
        for item in group:
            if item not in merged:
                merged.append(item)
    return merged


class StackDetector:
    """Detects languages, frameworks and tooling from manifests in a project tree."""

    def __init__(self, scanner: RepoScanner | None = None) -> None:
        self._scanner = scanner or RepoScanner()

    def analyze(self, root: str | Path) -> Dict[str, Any]:
        """Return the raw analysis mapping consumed by the signature extractor."""
        inventory = self._scanner.scan(root)
        root_path = inventory.root

        languages = inventory.primary_languages()
        frameworks: List[str] = []
        libraries: List[str] = []
        test_frameworks: List[str] = []
        build_tools: List[str] = []
        package_info: Dict[str, Any] = {}

        package = load_package_json(root_path)
        if package:
            node_deps = load_node_dependencies(package)
            all_node = node_deps["dependencies"] + node_deps["devDependencies"]
            frameworks = _merge(frameworks, _match_labels(all_node, _NODE_FRAMEWORKS))
            libraries = _merge(libraries, _match_labels(all_node, _NODE_LIBRARIES))
            test_frameworks = _merge(test_frameworks, _match_labels(all_node, _NODE_TEST_FRAMEWORKS))
            build_tools = _merge(build_tools, _match_labels(all_node, _NODE_BUILD_TOOLS), ["npm"])
            package_info = {
                "name": package.get("name"),
                "bin": package.get("bin"),
                "keywords": [str(item) for item in package.get("keywords", []) or []],
                "dependencies": all_node,
            }
            if "TypeScript" not in languages and (
                "typescript" in all_node or inventory.has_file("tsconfig.json")
            ):
                languages.append("TypeScript")
            if "JavaScript" not in languages and "TypeScript" not in languages:
                languages.append("JavaScript")

        if inventory.has_file("components.json") and package:
            libraries = _merge(libraries, ["shadcn/ui"])

        python_deps = load_python_dependencies(root_path)
        if python_deps:
            frameworks = _merge(frameworks, _match_labels(python_deps, _PYTHON_FRAMEWORKS))
            libraries = _merge(libraries, _match_labels(python_deps, _PYTHON_LIBRARIES))
            test_frameworks = _merge(test_frameworks, _match_labels(python_deps, _PYTHON_TEST_FRAMEWORKS))
            if "Python" not in languages:
                languages.append("Python")
        pyproject = load_pyproject(root_path)
        if pyproject:
            tool = pyproject.get("tool")
            if isinstance(tool, dict) and "poetry" in tool:
                build_tools = _merge(build_tools, ["Poetry"])
            else:
                build_tools = _merge(build_tools, ["pip"])
            if "Python" not in languages:
                languages.append("Python")

        java_deps = load_java_dependencies(root_path)
        if any("spring-boot" in dep or "springframework" in dep for dep in java_deps):
            frameworks = _merge(frameworks, ["Spring Boot"])
        if any("junit" in dep for dep in java_deps):
            test_frameworks = _merge(test_frameworks, ["JUnit"])
        if inventory.has_file("pom.xml"):
            build_tools = _merge(build_tools, ["Maven"])
        if inventory.has_file("build.gradle") or inventory.has_file("build.gradle.kts"):
            build_tools = _merge(build_tools, ["Gradle"])

        go_deps = load_go_dependencies(root_path)
        frameworks = _merge(frameworks, _match_labels(go_deps, _GO_FRAMEWORKS))
        if inventory.has_file("go.mod"):
            build_tools = _merge(build_tools, ["Go Modules"])

        cargo_deps = load_cargo_dependencies(root_path)
        frameworks = _merge(frameworks, _match_labels(cargo_deps, _RUST_FRAMEWORKS))
        if inventory.has_file("Cargo.toml"):
            build_tools = _merge(build_tools, ["Cargo"])

        if inventory.has_file("pubspec.yaml"):
            frameworks = _merge(frameworks, ["Flutter"])
            if "Dart" not in languages:
                languages.append("Dart")

        project_type = _project_type(frameworks, languages, package_info, inventory)
        logger.debug(
            "Detected stack for %s: languages=%s frameworks=%s",
            root_path.name,
            languages,
            frameworks,
        )

        return {
            "projectName": root_path.name,
            "projectType": project_type,
            "techStack": {
                "primaryLanguages": languages,
                "frameworks": frameworks,
                "libraries": libraries,
                "testingFrameworks": test_frameworks,
                "buildTools": build_tools,
            },
            "packageInfo": package_info,
            "projectStructure": {
                "fileCount": inventory.file_count,
                "files": inventory.files,
            },
        }


def _project_type(
    frameworks: Sequence[str],
    languages: Sequence[str],
    package_info: Mapping[str, Any],
    inventory: RepoInventory,
) -> str:
    if _is_cli_project(frameworks, package_info, inventory):
        return "CLI Application"
    if "Starlight" in frameworks:
        return "Astro Starlight Documentation Site"
    if "Astro" in frameworks:
        return "Astro Application"
    if "Next.js" in frameworks:
        return "Next.js Application"
    if "React Native" in frameworks or "Expo" in frameworks:
        return "Mobile Application"
    if "React" in frameworks:
        return "React Application"
    if "Vue.js" in frameworks:
        return "Vue.js Application"
    if languages:
        return f"{languages[0]} Application"
    return "Software Project"


def _is_cli_project(
    frameworks: Sequence[str],
    package_info: Mapping[str, Any],
    inventory: RepoInventory,
) -> bool:
    if package_info.get("bin"):
        return True
    keywords = {str(item).lower() for item in package_info.get("keywords", [])}
    if keywords & _CLI_KEYWORDS:
        return True
    if any(framework in _CLI_FRAMEWORKS for framework in frameworks):
        return True
    return any(
        name in ("cli.js", "cli.ts", "cli.py") or name.startswith("bin/")
        for name in inventory.files
    )


__all__ = ["StackDetector"]
