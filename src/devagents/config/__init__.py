"""Configuration layer: project paths, layered settings, logging."""

from .dirs import AGENTS_DIR, PRJ_CONFIG, clear_project_root_cache, get_project_root
from .logging import configure_logging, get_logger
from .settings import Settings, get_setting, get_settings, set_configuration_directory

__all__ = [
    "AGENTS_DIR",
    "PRJ_CONFIG",
    "Settings",
    "clear_project_root_cache",
    "configure_logging",
    "get_logger",
    "get_project_root",
    "get_setting",
    "get_settings",
    "set_configuration_directory",
]
