"""
devagents CLI Entry Point

Responsibilities:
1. Bootstrap Environment: Parse --conf and set PRJ_CONFIG_HOME.
2. Initialize Infrastructure: Settings, Logging.
3. Dispatch Commands.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

from ..config.dirs import get_project_root
from ..config.logging import configure_logging
from ..config.settings import get_settings, set_configuration_directory
from ..errors import SettingsError
from .commands import (
    agents_dir_from,
    register_catalog_command,
    register_persona_commands,
    register_validate_command,
)
from .console import print_error

app = typer.Typer(
    name="devagents",
    help="Persona library for Django/Vue.js development agents",
    no_args_is_help=True,
    add_completion=False,
)


def _bootstrap_configuration(conf_path: str | None, verbose: bool = False) -> None:
    """
    Core Bootstrap Logic.

    If the user provides --conf, that directory becomes PRJ_CONFIG_HOME and
    settings are reloaded from it.
    """
    settings = get_settings()
    if conf_path:
        path_obj = Path(conf_path).resolve()
        if not path_obj.exists():
            typer.secho(f"Warning: Config directory not found: {path_obj}", fg=typer.colors.YELLOW, err=True)
        set_configuration_directory(str(path_obj))
    else:
        settings.reload()

    log_level = "DEBUG" if verbose else str(settings.get("logging.level", "INFO"))
    configure_logging(level=log_level, force=True)


@app.callback()
def main_callback(
    ctx: typer.Context,
    conf: Optional[str] = typer.Option(
        None,
        "--conf",
        "-c",
        help="Path to custom configuration directory (Sets PRJ_CONFIG_HOME)",
        envvar="DEVAGENTS_CONF",
    ),
    agents_dir: Optional[Path] = typer.Option(
        None,
        "--agents-dir",
        "-d",
        help="Persona directory (overrides settings agents.dir)",
        envvar="DEVAGENTS_AGENTS_DIR",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Load, validate and render persona documents.

    Global Options:
        --conf, -c        Custom configuration directory
        --agents-dir, -d  Persona directory
        --verbose, -v     Enable debug logging
    """
    try:
        _bootstrap_configuration(conf, verbose)
    except SettingsError as exc:
        print_error(exc)
        raise typer.Exit(1) from exc
    ctx.obj = {"agents_dir": agents_dir.resolve() if agents_dir else None}


@app.command()
def version(ctx: typer.Context):
    """
    Display version information and configuration locations.
    """
    from .. import __version__

    settings = get_settings()
    python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

    typer.echo(f"devagents {__version__}")
    typer.echo(f"  Python:        {python_version}")
    typer.echo(f"  Project root:  {get_project_root()}")
    typer.echo(f"  Agents dir:    {agents_dir_from(ctx)}")
    sources = settings.sources
    typer.echo(f"  Settings:      {', '.join(str(s) for s in sources) if sources else 'built-in defaults'}")


register_persona_commands(app)
register_validate_command(app)
register_catalog_command(app)


def main():
    """Entry point for CLI (used by pyproject.toml [project.scripts])."""
    app()


__all__ = ["app", "main"]
