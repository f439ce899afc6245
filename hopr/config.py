"""Configuration loading for hopr (.hopr.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".hopr.yml"

TARGET_FRAMEWORKS = ("tanstack-start",)
TARGET_VARIANTS = ("shell", "component")
PAGE_STRATEGIES = ("structural", "regex")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class TargetConfig:
    """Target framework settings."""

    framework: str = "tanstack-start"
    variant: str = "shell"
    routes_dir: str = "src/routes"


@dataclass
class TransformConfig:
    """Route transformation settings."""

    page_strategy: str = "structural"
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class BackupConfig:
    """Pre-run backup settings."""

    enabled: bool = True
    directory: str = ".hopr-backup"


@dataclass
class HoprConfig:
    """Represents the settings defined in .hopr.yml."""

    root: Path
    target: TargetConfig = field(default_factory=TargetConfig)
    transform: TransformConfig = field(default_factory=TransformConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)

    def with_overrides(
        self,
        *,
        variant: Optional[str] = None,
        page_strategy: Optional[str] = None,
        target_framework: Optional[str] = None,
        backup_enabled: Optional[bool] = None,
    ) -> "HoprConfig":
        """Return a copy with CLI overrides applied on top of file values."""
        target = TargetConfig(
            framework=_choice(target_framework or self.target.framework, TARGET_FRAMEWORKS, "target.framework"),
            variant=_choice(variant or self.target.variant, TARGET_VARIANTS, "target.variant"),
            routes_dir=self.target.routes_dir,
        )
        transform = TransformConfig(
            page_strategy=_choice(
                page_strategy or self.transform.page_strategy, PAGE_STRATEGIES, "transform.page_strategy"
            ),
            exclude_paths=list(self.transform.exclude_paths),
        )
        backup = BackupConfig(
            enabled=self.backup.enabled if backup_enabled is None else backup_enabled,
            directory=self.backup.directory,
        )
        return HoprConfig(root=self.root, target=target, transform=transform, backup=backup)


def load_config(config_path: Path) -> HoprConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return HoprConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    target = TargetConfig()
    target_data = _as_dict(data.get("target"))
    if target_data:
        target.framework = _choice(
            _as_str(target_data.get("framework")) or target.framework, TARGET_FRAMEWORKS, "target.framework"
        )
        target.variant = _choice(
            _as_str(target_data.get("variant")) or target.variant, TARGET_VARIANTS, "target.variant"
        )
        routes_dir = _as_str(target_data.get("routes_dir"))
        if routes_dir:
            target.routes_dir = routes_dir.replace("\\", "/").strip("/")

    transform = TransformConfig()
    transform_data = _as_dict(data.get("transform"))
    if transform_data:
        transform.page_strategy = _choice(
            _as_str(transform_data.get("page_strategy")) or transform.page_strategy,
            PAGE_STRATEGIES,
            "transform.page_strategy",
        )
        transform.exclude_paths = _as_str_list(transform_data.get("exclude_paths"))

    backup = BackupConfig()
    backup_data = _as_dict(data.get("backup"))
    if backup_data:
        enabled = _as_bool(backup_data.get("enabled"))
        if enabled is not None:
            backup.enabled = enabled
        directory = _as_str(backup_data.get("directory"))
        if directory:
            backup.directory = directory

    return HoprConfig(root=root, target=target, transform=transform, backup=backup)


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


def _choice(value: str, allowed: Sequence[str], key: str) -> str:
    normalised = value.strip().lower()
    if normalised not in allowed:
        raise ConfigError(f"Unsupported value for {key}: {value!r} (expected one of {', '.join(allowed)})")
    return normalised


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


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
    "BackupConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "HoprConfig",
    "PAGE_STRATEGIES",
    "TARGET_FRAMEWORKS",
    "TARGET_VARIANTS",
    "TargetConfig",
    "TransformConfig",
    "load_config",
]
