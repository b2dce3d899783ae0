"""
Project Settings - Configuration Manager

Architecture (layered config):
- Built-in defaults (DEFAULTS below)
- System: <project-root>/conf/settings.yaml
- User:   $PRJ_CONFIG_HOME/devagents/settings.yaml
- CLI flag `--conf` sets PRJ_CONFIG_HOME for a run.

get_setting() returns merged effective values. User layer overrides system layer,
system layer overrides built-in defaults.

Usage:
    from devagents.config.settings import get_setting
    agents_dir = get_setting("agents.dir")  # Returns: "agents"
"""

from __future__ import annotations

import copy
import os
import threading
from pathlib import Path
from typing import Any

import yaml

from ..errors import SettingsError
from .dirs import PRJ_CONFIG, get_project_root

DEFAULTS: dict[str, Any] = {
    "agents": {
        "dir": "agents",
        "pattern": "*.md",
        "exclude": ["README.md"],
        "recursive": False,
        "required_fields": ["name", "description", "model"],
        "allowed_models": ["sonnet", "opus", "haiku", "inherit"],
    },
    "catalog": {
        "output": "agents/README.md",
    },
    "logging": {
        "level": "INFO",
    },
}


class Settings:
    """
    Unified Settings Manager (thread-safe singleton).

    Logic:
    1. Start from built-in defaults.
    2. Overlay `<project-root>/conf/settings.yaml`.
    3. Overlay `$PRJ_CONFIG_HOME/devagents/settings.yaml`.
    """

    _instance: Settings | None = None
    _instance_lock = threading.Lock()
    _loaded: bool = False

    def __new__(cls) -> Settings:
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        # Python calls __init__ on every Settings(); keep loaded data.
        if not hasattr(self, "_data"):
            self._data: dict[str, Any] = {}
            self._sources: list[Path] = []

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            with self._instance_lock:
                if not self._loaded:
                    self._load()
                    self._loaded = True

    def _load(self) -> None:
        data = copy.deepcopy(DEFAULTS)
        sources: list[Path] = []

        system_settings = get_project_root() / "conf" / "settings.yaml"
        if system_settings.exists():
            data = self._deep_merge(data, self._read_yaml(system_settings))
            sources.append(system_settings)

        user_settings = PRJ_CONFIG("devagents", "settings.yaml")
        if user_settings.exists():
            data = self._deep_merge(data, self._read_yaml(user_settings))
            sources.append(user_settings)

        self._data = data
        self._sources = sources

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise SettingsError(f"Invalid YAML in settings file: {exc}", path=str(path)) from exc
        except OSError as exc:
            raise SettingsError(f"Cannot read settings file: {exc}", path=str(path)) from exc
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise SettingsError("Settings file must contain a mapping", path=str(path))
        return loaded

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        result = dict(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value using dot notation.

        Args:
            key: Dot-separated path (e.g., "agents.dir")
            default: Default value if key not found
        """
        self._ensure_loaded()

        value: Any = self._data
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def get_list(self, key: str) -> list[str]:
        """Get a list setting value, or an empty list."""
        result = self.get(key)
        return [str(item) for item in result] if isinstance(result, list) else []

    def has_setting(self, key: str) -> bool:
        return self.get(key) is not None

    @property
    def sources(self) -> list[Path]:
        """Settings files that contributed to the merged values."""
        self._ensure_loaded()
        return list(self._sources)

    def reload(self) -> None:
        """Force re-read of all settings files."""
        with self._instance_lock:
            self._loaded = False
            self._data = {}
            self._sources = []

    @property
    def data(self) -> dict[str, Any]:
        self._ensure_loaded()
        return self._data


def get_settings() -> Settings:
    """Get the global settings instance."""
    return Settings()


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value by dot-separated key."""
    return get_settings().get(key, default)


def set_configuration_directory(path: str) -> None:
    """Point PRJ_CONFIG_HOME at a user configuration directory and reload."""
    os.environ["PRJ_CONFIG_HOME"] = str(Path(path).resolve())
    get_settings().reload()


__all__ = [
    "DEFAULTS",
    "Settings",
    "get_setting",
    "get_settings",
    "set_configuration_directory",
]
