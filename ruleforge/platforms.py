"""Static capability registry for supported consumer platforms."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .models import ActivationModel, CharacterLimits, PlatformCapability, Scope

CLAUDE_CODE = PlatformCapability(
    id="claude-code",
    name="Claude Code",
    limits=CharacterLimits(per_command=10000),
    activation=ActivationModel.HIERARCHY,
    scopes=(Scope.GLOBAL, Scope.PROJECT, Scope.LOCAL, Scope.USER),
    config_folder=".claude",
    rules_folder=".claude/commands",
    project_indicators=("CLAUDE.md", ".claude/"),
    global_indicators=("~/.claude/",),
    environment_hints=("CLAUDECODE", "CLAUDE_CODE_ENTRYPOINT"),
    aliases=("claude", "claude code", "claude-code-cli"),
)

CURSOR = PlatformCapability(
    id="cursor",
    name="Cursor",
    limits=CharacterLimits(),
    activation=ActivationModel.AUTO_ATTACHED,
    scopes=(Scope.PROJECT,),
    config_folder=".cursor",
    rules_folder=".cursor/rules",
    file_extension=".mdc",
    project_indicators=(".cursorrules", ".cursor/", ".cursorignore"),
    global_indicators=("~/.cursor/",),
    environment_hints=("CURSOR_TRACE_ID",),
)

WINDSURF = PlatformCapability(
    id="windsurf",
    name="Windsurf",
    limits=CharacterLimits(per_file=6000, total_workspace=12000, global_file=6000),
    activation=ActivationModel.MODEL_DECISION,
    scopes=(Scope.GLOBAL, Scope.WORKSPACE, Scope.PROJECT),
    config_folder=".windsurf",
    rules_folder=".windsurf/rules",
    project_indicators=(".windsurf/", ".windsurfrules"),
    global_indicators=("~/.codeium/windsurf/",),
    environment_hints=("WINDSURF_SESSION",),
)

GITHUB_COPILOT = PlatformCapability(
    id="github-copilot",
    name="GitHub Copilot",
    limits=CharacterLimits(per_guideline=600, max_guidelines=6),
    activation=ActivationModel.ALWAYS,
    scopes=(Scope.REPOSITORY,),
    config_folder=".github",
    project_indicators=(".github/copilot-instructions.md",),
    global_indicators=("~/.config/github-copilot/",),
    aliases=("copilot", "github copilot"),
)

ZED = PlatformCapability(
    id="zed",
    name="Zed",
    limits=CharacterLimits(),
    activation=ActivationModel.ALWAYS,
    scopes=(Scope.PROJECT, Scope.GLOBAL),
    config_folder=".zed",
    rules_folder=".zed/ai-rules",
    project_indicators=(".zed/",),
    global_indicators=("~/.config/zed/",),
    environment_hints=("TERM_PROGRAM=zed", "ZED_TERM"),
    aliases=("zed editor",),
)

VSCODE = PlatformCapability(
    id="vscode",
    name="VS Code",
    limits=CharacterLimits(),
    activation=ActivationModel.ALWAYS,
    scopes=(Scope.PROJECT,),
    config_folder=".vscode",
    rules_folder=".vscode/ai-rules",
    project_indicators=(".vscode/settings.json", ".vscode/launch.json"),
    global_indicators=("~/.vscode/",),
    environment_hints=("TERM_PROGRAM=vscode",),
    aliases=("vs code", "visual studio code", "code"),
)

VSCODE_INSIDERS = PlatformCapability(
    id="vscode-insiders",
    name="VS Code Insiders",
    limits=CharacterLimits(),
    activation=ActivationModel.ALWAYS,
    scopes=(Scope.PROJECT,),
    config_folder=".vscode-insiders",
    rules_folder=".vscode-insiders/ai-rules",
    project_indicators=(".vscode-insiders/",),
    global_indicators=("~/.vscode-insiders/",),
    aliases=("vs code insiders",),
)

VSCODIUM = PlatformCapability(
    id="vscodium",
    name="VSCodium",
    limits=CharacterLimits(),
    activation=ActivationModel.ALWAYS,
    scopes=(Scope.PROJECT,),
    config_folder=".vscode-oss",
    rules_folder=".vscode-oss/ai-rules",
    project_indicators=(".vscode-oss/",),
    global_indicators=("~/.vscode-oss/",),
)

JETBRAINS = PlatformCapability(
    id="jetbrains",
    name="JetBrains IDEs",
    limits=CharacterLimits(),
    activation=ActivationModel.ALWAYS,
    scopes=(Scope.PROJECT,),
    config_folder=".idea",
    rules_folder=".idea/ai-rules",
    project_indicators=(".idea/", "*.iml"),
    environment_hints=("TERMINAL_EMULATOR=JetBrains-JediTerm",),
    aliases=("intellij", "webstorm", "pycharm"),
)

GENERIC = PlatformCapability(
    id="generic",
    name="Generic AI Assistant",
    limits=CharacterLimits(),
    activation=ActivationModel.ALWAYS,
    scopes=(Scope.PROJECT,),
    config_folder=".ai",
    rules_folder=".ai/rules",
)

BUILTIN_PLATFORMS: Tuple[PlatformCapability, ...] = (
    CLAUDE_CODE,
    CURSOR,
    WINDSURF,
    GITHUB_COPILOT,
    ZED,
    VSCODE,
    VSCODE_INSIDERS,
    VSCODIUM,
    JETBRAINS,
    GENERIC,
)

# Order in which project-local indicators decide the primary platform.
PROJECT_INDICATOR_ORDER: Tuple[str, ...] = (
    "cursor",
    "vscode",
    "windsurf",
    "jetbrains",
    "zed",
    "claude-code",
)


class PlatformRegistry:
    """Lookup of platform capabilities by id, display name or alias."""

    def __init__(self, capabilities: Iterable[PlatformCapability] = BUILTIN_PLATFORMS) -> None:
        self._capabilities: Dict[str, PlatformCapability] = {}
        self._lookup: Dict[str, str] = {}
        for capability in capabilities:
            self.register(capability)

    def register(self, capability: PlatformCapability) -> None:
        key = capability.id.lower()
        self._capabilities[key] = capability
        for label in (capability.id, capability.name, *capability.aliases):
            self._lookup.setdefault(label.strip().lower(), key)

    def resolve(self, name: str | None) -> Optional[str]:
        """Return the canonical platform id for ``name`` or ``None``."""
        if not name:
            return None
        return self._lookup.get(name.strip().lower())

    def get(self, name: str | None) -> Optional[PlatformCapability]:
        platform_id = self.resolve(name)
        return self._capabilities.get(platform_id) if platform_id else None

    def order(self, platform_id: str) -> int:
        """Registration index, used to break ties deterministically."""
        ids = list(self._capabilities)
        key = platform_id.lower()
        return ids.index(key) if key in ids else len(ids)

    def ids(self) -> List[str]:
        return list(self._capabilities)

    def __iter__(self) -> Iterator[PlatformCapability]:
        return iter(self._capabilities.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None


DEFAULT_REGISTRY = PlatformRegistry()


__all__ = [
    "BUILTIN_PLATFORMS",
    "DEFAULT_REGISTRY",
    "GENERIC",
    "PROJECT_INDICATOR_ORDER",
    "PlatformRegistry",
]
