"""
Catalog command: render the persona index as Markdown or JSON.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Optional

import typer

from ...config.dirs import get_project_root
from ...config.logging import get_logger
from ...config.settings import get_setting
from ...errors import PersonaErrorCode, PersonaFormatError
from ...persona.templating import render_catalog
from ..console import err_console, print_text, reported_errors
from .base import registry_from

logger = get_logger(__name__)


def _configured_output() -> Path:
    target = Path(get_setting("catalog.output", "agents/README.md"))
    return target if target.is_absolute() else get_project_root() / target


class CatalogFormat(StrEnum):
    MARKDOWN = "markdown"
    JSON = "json"


def catalog(
    ctx: typer.Context,
    fmt: CatalogFormat = typer.Option(CatalogFormat.MARKDOWN, "--format", "-F", help="Output format"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
    write: bool = typer.Option(False, "--write", "-w", help="Write to the configured catalog.output file"),
):
    """
    Render the persona catalog.

    Examples:
        devagents catalog > agents/README.md
        devagents catalog --format json --output catalog.json
        devagents catalog --write
    """
    with reported_errors():
        registry = registry_from(ctx)
        text = render_catalog(registry.list(), fmt=fmt.value)
        if output is None and write:
            output = _configured_output()

        if output is None:
            print_text(text)
            return

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise PersonaFormatError(
                f"Cannot write catalog: {exc}",
                code=PersonaErrorCode.WRITE_ERROR,
                source=str(output),
            ) from exc

    logger.info("Wrote catalog", path=str(output), personas=len(registry))
    err_console.print(f"[green]Wrote[/green] {output}")


def register_catalog_command(app_instance: typer.Typer) -> None:
    """Register catalog command with the main app."""
    app_instance.command("catalog")(catalog)


__all__ = ["register_catalog_command"]
