"""
dirs.py - Project Path Detection

Provides:
- get_project_root(): Root of the persona library checkout
- PRJ_CONFIG(): Paths under the user config home ($PRJ_CONFIG_HOME)
- AGENTS_DIR(): Persona directory from settings (agents.dir)

Usage:
    from devagents.config.dirs import AGENTS_DIR, get_project_root

    root = get_project_root()
    AGENTS_DIR()                       # -> /project/agents
    AGENTS_DIR("rbac-architect.md")    # -> /project/agents/rbac-architect.md

Environment Variables:
    DEVAGENTS_ROOT=/path/to/project
    PRJ_CONFIG_HOME=.config
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

# Module level cache for the project root
_project_root: Path | None = None


def _is_project_root(path: Path) -> bool:
    """Check if path looks like a persona library root."""
    if (path / "agents").is_dir() and (path / "conf").is_dir():
        return True
    return (path / ".git").exists() or (path / "pyproject.toml").exists()


def _git_toplevel(cwd: Path) -> Path | None:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            cwd=cwd,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0 or not result.stdout.strip():
        return None
    return Path(result.stdout.strip())


def clear_project_root_cache() -> None:
    """Clear the project root cache. Useful for testing."""
    global _project_root
    _project_root = None


def get_project_root() -> Path:
    """
    Get the project root directory.

    Priority:
    1. DEVAGENTS_ROOT environment variable
    2. Git toplevel (git rev-parse --show-toplevel)
    3. Search upward from the current directory for project indicators
    4. Current working directory
    """
    global _project_root

    env_root = os.environ.get("DEVAGENTS_ROOT")
    if env_root:
        return Path(env_root).resolve()

    if _project_root is not None:
        return _project_root

    cwd = Path.cwd()
    root = _git_toplevel(cwd)
    if root is None:
        for candidate in (cwd, *cwd.parents):
            if _is_project_root(candidate):
                root = candidate
                break
    _project_root = root or cwd
    return _project_root


def PRJ_CONFIG(*parts: str) -> Path:
    """Path under the user configuration home.

    PRJ_CONFIG_HOME may be absolute (set by --conf) or relative to the project root.
    """
    config_home = Path(os.environ.get("PRJ_CONFIG_HOME", ".config"))
    if not config_home.is_absolute():
        config_home = get_project_root() / config_home
    return config_home.joinpath(*parts)


def AGENTS_DIR(*parts: str) -> Path:
    """Persona directory (settings: agents.dir), resolved against the project root."""
    from .settings import get_setting

    agents_dir = Path(get_setting("agents.dir", "agents"))
    if not agents_dir.is_absolute():
        agents_dir = get_project_root() / agents_dir
    return agents_dir.joinpath(*parts)


__all__ = [
    "AGENTS_DIR",
    "PRJ_CONFIG",
    "clear_project_root_cache",
    "get_project_root",
]
