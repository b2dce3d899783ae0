"""
console.py - Console and Output Formatting

UNIX Philosophy:
- stdout: Only command results (catalogs, prompts, JSON) for pipes
- stderr: Tables, panels, logs (visible to user, invisible to pipes)
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel

from ..errors import PersonaError, PersonaNotFoundError

# err_console: responsible for UI, panels and tables (user visible, pipe invisible)
err_console = Console(stderr=True)


def print_json(data: Any) -> None:
    """Write JSON to stdout."""
    sys.stdout.write(json.dumps(data, indent=2, default=str) + "\n")


def print_text(text: str) -> None:
    """Write raw text to stdout, newline-terminated."""
    sys.stdout.write(text)
    if not text.endswith("\n"):
        sys.stdout.write("\n")


def print_metadata_box(metadata: dict[str, Any], title: str = "Persona") -> None:
    err_console.print(
        Panel(
            JSON.from_data(metadata),
            title=f"[bold blue]{title}[/bold blue]",
            border_style="blue",
            expand=False,
        )
    )


def print_error(exc: PersonaError) -> None:
    """Render a PersonaError as a red panel on stderr."""
    lines = [exc.message]
    if isinstance(exc, PersonaNotFoundError) and exc.suggestions:
        lines.append("")
        lines.append("Did you mean: " + ", ".join(exc.suggestions) + "?")
    fields = exc.details.get("fields") if exc.details else None
    if fields:
        lines.append("")
        lines.extend(f"- {err['field']}: {err['message']}" for err in fields)
    code = exc.code.value if exc.code else "UNKNOWN"
    err_console.print(Panel("\n".join(lines), title=f"Error {code}", style="red", expand=False))


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn PersonaError into an error panel and exit status 1."""
    try:
        yield
    except PersonaError as exc:
        print_error(exc)
        raise typer.Exit(1) from exc


__all__ = [
    "err_console",
    "print_error",
    "print_json",
    "print_metadata_box",
    "print_text",
    "reported_errors",
]
