"""
Base module for CLI commands.

Contains shared helpers for resolving the persona directory and registry.
"""

from __future__ import annotations

from pathlib import Path

import typer

from ...config.dirs import AGENTS_DIR
from ...persona.registry import PersonaRegistry, get_registry


def agents_dir_from(ctx: typer.Context) -> Path:
    """Persona directory for this invocation (--agents-dir or settings)."""
    obj = ctx.find_root().obj or {}
    return obj.get("agents_dir") or AGENTS_DIR()


def registry_from(ctx: typer.Context) -> PersonaRegistry:
    registry = get_registry(agents_dir_from(ctx))
    registry.scan(refresh=True)
    return registry


__all__ = ["agents_dir_from", "registry_from"]
