"""Configuration loading for ruleforge (.ruleforge.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import ContentType

CONFIG_FILENAME = ".ruleforge.yml"
DEFAULT_TOKEN_ENV = "RULEFORGE_GITHUB_TOKEN"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SourceConfig:
    """Where blueprint documents are listed and fetched from."""

    path: Optional[Path] = None
    repository: Optional[str] = None
    ref: Optional[str] = None
    token_env: str = DEFAULT_TOKEN_ENV


@dataclass
class SelectionOverride:
    """Partial override of a content type's selection policy."""

    threshold: Optional[float] = None
    fallback_top_k: Optional[int] = None
    fallback_floor: Optional[float] = None
    max_items: Optional[int] = None


@dataclass
class ConcurrencyConfig:
    fetch_workers: int = 8
    score_workers: int = 4
    adapt_workers: int = 4


@dataclass
class ValidationConfig:
    required: bool = False


@dataclass
class RuleForgeConfig:
    """Represents the settings defined in .ruleforge.yml."""

    root: Path
    platform: Optional[str] = None
    platforms: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    source: SourceConfig = field(default_factory=SourceConfig)
    scoring: Dict[str, float] = field(default_factory=dict)
    selection: Dict[ContentType, SelectionOverride] = field(default_factory=dict)
    concurrency: ConcurrencyConfig = field(default_factory=ConcurrencyConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    content_types: List[ContentType] = field(
        default_factory=lambda: [ContentType.RULE, ContentType.COMMAND]
    )
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> RuleForgeConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RuleForgeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = RuleForgeConfig(root=root)
    config.platform = _as_str(data.get("platform"))

    platforms = _as_dict(data.get("platforms"))
    for platform_id, block in platforms.items():
        if block is None:
            block = {}
        if not isinstance(block, dict):
            raise ConfigError(f"platforms.{platform_id} must be a mapping")
        config.platforms[str(platform_id).lower()] = dict(block)

    source_data = _as_dict(data.get("source"))
    if source_data:
        source_path = _as_str(source_data.get("path"))
        config.source = SourceConfig(
            path=(root / source_path).resolve() if source_path else None,
            repository=_as_str(source_data.get("repository")),
            ref=_as_str(source_data.get("ref")),
            token_env=_as_str(source_data.get("token_env")) or DEFAULT_TOKEN_ENV,
        )

    for key, value in _as_dict(data.get("scoring")).items():
        weight = _as_float(value)
        if weight is None:
            raise ConfigError(f"scoring.{key} must be a number")
        config.scoring[str(key)] = weight

    for key, value in _as_dict(data.get("selection")).items():
        content_type = _as_content_type(key, "selection")
        block = _as_dict(value)
        config.selection[content_type] = SelectionOverride(
            threshold=_as_float(block.get("threshold")),
            fallback_top_k=_as_int(block.get("fallback_top_k")),
            fallback_floor=_as_float(block.get("fallback_floor")),
            max_items=_as_int(block.get("max_items")),
        )

    concurrency_data = _as_dict(data.get("concurrency"))
    if concurrency_data:
        defaults = ConcurrencyConfig()
        config.concurrency = ConcurrencyConfig(
            fetch_workers=_positive(concurrency_data.get("fetch_workers"), defaults.fetch_workers),
            score_workers=_positive(concurrency_data.get("score_workers"), defaults.score_workers),
            adapt_workers=_positive(concurrency_data.get("adapt_workers"), defaults.adapt_workers),
        )

    validation_data = _as_dict(data.get("validation"))
    if validation_data:
        config.validation = ValidationConfig(
            required=_as_bool(validation_data.get("required")) or False
        )

    content_types = _as_str_list(data.get("content_types"))
    if content_types:
        config.content_types = [_as_content_type(item, "content_types") for item in content_types]

    log_file = _as_str(data.get("log_file"))
    if log_file:
        config.log_file = root / log_file

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_content_type(value: Any, context: str) -> ContentType:
    try:
        return ContentType.parse(str(value))
    except ValueError as exc:
        raise ConfigError(f"{context}: unknown content type '{value}'") from exc


def _positive(value: Any, default: int) -> int:
    parsed = _as_int(value)
    if parsed is None:
        return default
    if parsed < 1:
        raise ConfigError("concurrency values must be positive integers")
    return parsed


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConcurrencyConfig",
    "ConfigError",
    "RuleForgeConfig",
    "SelectionOverride",
    "SourceConfig",
    "ValidationConfig",
    "load_config",
]
