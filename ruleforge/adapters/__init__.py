"""Platform adapters, adapter discovery and the ``RuleAdapter`` entry point."""

from __future__ import annotations

import math
from importlib import metadata
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..logging import get_logger
from ..models import AdaptationResult, AdaptationSummary, AdaptedArtifact, PlatformCapability, StandardizedRule
from ..platforms import DEFAULT_REGISTRY, GENERIC, PlatformRegistry
from .base import AdaptContext, PlatformAdapter, RenderOutput
from .budget import TRUNCATION_MARKER, shrink_to_budget, smart_truncate
from .claude import ClaudeCodeAdapter
from .copilot import GitHubCopilotAdapter
from .cursor import CursorAdapter
from .generic import GenericAdapter
from .vscode import VSCodeAdapter, VSCodeInsidersAdapter, VSCodiumAdapter
from .windsurf import WindsurfAdapter
from .zed import ZedAdapter

logger = get_logger("adapters")

_ENTRY_POINT_GROUP = "ruleforge.adapters"

AdapterFactory = Callable[[PlatformCapability], PlatformAdapter]

_BUILTIN_ADAPTERS: dict[str, AdapterFactory] = {
    "claude-code": ClaudeCodeAdapter,
    "cursor": CursorAdapter,
    "windsurf": WindsurfAdapter,
    "github-copilot": GitHubCopilotAdapter,
    "zed": ZedAdapter,
    "vscode": VSCodeAdapter,
    "vscode-insiders": VSCodeInsidersAdapter,
    "vscodium": VSCodiumAdapter,
}

INCOMPATIBLE_REASON = "Platform not compatible"


class UnknownPlatformError(KeyError):
    """Raised when a platform id has no capability entry."""

    def __init__(self, platform_id: str) -> None:
        super().__init__(platform_id)
        self.platform_id = platform_id

    def __str__(self) -> str:
        return f"Unknown platform '{self.platform_id}'"


def discover_adapters() -> Dict[str, AdapterFactory]:
    """Return adapter factories keyed by platform id, built-ins first.

    Third-party packages can add strategies through the ``ruleforge.adapters``
    entry point group; they never replace a built-in.
    """
    factories: Dict[str, AdapterFactory] = dict(_BUILTIN_ADAPTERS)
    for entry in _iter_entry_points():
        key = entry.name.lower()
        if key in factories:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - depends on installed plugins
            raise RuntimeError(f"Failed to load adapter entry point '{entry.name}': {exc}") from exc
        factories[key] = _coerce_factory(entry.name, loaded)
    return factories


def _coerce_factory(name: str, obj: object) -> AdapterFactory:
    if isinstance(obj, type) and issubclass(obj, PlatformAdapter):
        return obj
    if callable(obj):
        return obj  # type: ignore[return-value]
    raise TypeError(f"Adapter entry point '{name}' must be a PlatformAdapter subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover - broken installation metadata
        return []
    return entry_points.select(group=_ENTRY_POINT_GROUP)


def get_adapter(
    platform_id: str,
    registry: PlatformRegistry = DEFAULT_REGISTRY,
    *,
    strict: bool = False,
    factories: Mapping[str, AdapterFactory] | None = None,
) -> PlatformAdapter:
    """Instantiate the adapter for ``platform_id``.

    Unknown platforms get the generic strategy unless ``strict`` is set, in
    which case :class:`UnknownPlatformError` is raised.
    """
    capability = registry.get(platform_id)
    if capability is None and strict:
        raise UnknownPlatformError(platform_id)
    table = factories if factories is not None else _BUILTIN_ADAPTERS
    key = capability.id if capability is not None else platform_id.lower()
    factory = table.get(key)
    if factory is None:
        return GenericAdapter(capability or GENERIC)
    instance = factory(capability or GENERIC)
    if not isinstance(instance, PlatformAdapter):
        raise TypeError(f"Adapter factory for '{platform_id}' did not return a PlatformAdapter")
    return instance


class RuleAdapter:
    """Adapts standardized rules into artifacts for one platform at a time."""

    def __init__(
        self,
        registry: PlatformRegistry = DEFAULT_REGISTRY,
        factories: Mapping[str, AdapterFactory] | None = None,
    ) -> None:
        self.registry = registry
        self.factories = dict(factories) if factories is not None else discover_adapters()

    def adapt(
        self,
        rules: Sequence[StandardizedRule],
        platform_id: str,
        context: AdaptContext,
        platform_config: Mapping[str, Any] | None = None,
    ) -> AdaptationResult:
        config: Dict[str, Any] = dict(platform_config or {})
        canonical = self.registry.resolve(platform_id) or platform_id

        if config.get("compatible") is False:
            logger.info("Skipping %s: marked incompatible in platform config", canonical)
            summary = AdaptationSummary(
                platform_id=canonical,
                skipped=len(rules),
                reason=INCOMPATIBLE_REASON,
            )
            return AdaptationResult(platform_id=canonical, artifacts=[], summary=summary)

        adapter = get_adapter(canonical, self.registry, factories=self.factories)
        if isinstance(adapter, GenericAdapter):
            config.setdefault("platformId", canonical)
        output = adapter.render(rules, context, config)
        artifacts = self._order(output.artifacts, adapter.capability)

        truncated = sum(1 for artifact in artifacts if artifact.truncated)
        if truncated:
            logger.warning("%s: %s artifact(s) truncated to fit character limits", canonical, truncated)
        summary = AdaptationSummary(
            platform_id=canonical,
            generated=len(artifacts),
            skipped=max(len(rules) - output.rules_used, 0),
            truncated=truncated,
            reason=output.details.get("reason"),
            details={key: value for key, value in output.details.items() if key != "reason"},
        )
        logger.debug(
            "%s: %s artifact(s), %s rule(s) skipped", canonical, summary.generated, summary.skipped
        )
        return AdaptationResult(platform_id=canonical, artifacts=artifacts, summary=summary)

    @staticmethod
    def _order(artifacts: Sequence[AdaptedArtifact], capability: PlatformCapability) -> List[AdaptedArtifact]:
        scopes = list(capability.scopes)

        def _key(artifact: AdaptedArtifact) -> tuple:
            scope_index = scopes.index(artifact.scope) if artifact.scope in scopes else len(scopes)
            priority = artifact.priority if artifact.priority is not None else -math.inf
            return (scope_index, -priority)

        return sorted(artifacts, key=_key)


__all__ = [
    "AdaptContext",
    "ClaudeCodeAdapter",
    "CursorAdapter",
    "GenericAdapter",
    "GitHubCopilotAdapter",
    "PlatformAdapter",
    "RenderOutput",
    "RuleAdapter",
    "TRUNCATION_MARKER",
    "UnknownPlatformError",
    "VSCodeAdapter",
    "VSCodeInsidersAdapter",
    "VSCodiumAdapter",
    "WindsurfAdapter",
    "ZedAdapter",
    "discover_adapters",
    "get_adapter",
    "shrink_to_budget",
    "smart_truncate",
]
