"""
Validate command: lint persona documents.

Exit status is 1 when any error is found (or any warning, with --strict).
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from ...persona.validator import Severity, validate_paths
from ..console import err_console, print_json
from .base import agents_dir_from


def validate(
    ctx: typer.Context,
    paths: Optional[List[Path]] = typer.Argument(None, help="Files or directories (default: agents directory)"),
    strict: bool = typer.Option(False, "--strict", help="Treat warnings as failures"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output report as JSON"),
):
    """Validate persona documents (frontmatter, fields, Markdown)."""
    targets = list(paths) if paths else [agents_dir_from(ctx)]
    report = validate_paths(targets)
    passed = report.ok(strict=strict)

    if json_output:
        print_json({**report.to_dict(), "ok": passed, "strict": strict})
        if not passed:
            raise typer.Exit(1)
        return

    if report.issues:
        table = Table(title="Persona validation", show_header=True)
        table.add_column("Location", style="bold")
        table.add_column("Severity")
        table.add_column("Rule")
        table.add_column("Message")
        for issue in report.issues:
            style = "red" if issue.severity is Severity.ERROR else "yellow"
            table.add_row(
                issue.location(),
                f"[{style}]{issue.severity.value}[/{style}]",
                issue.rule,
                issue.message,
            )
        err_console.print(table)

    summary = (
        f"{report.files_checked} file(s) checked: "
        f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
    )
    if passed:
        err_console.print(f"[green]OK[/green] {summary}")
    else:
        err_console.print(f"[red]FAILED[/red] {summary}")
        raise typer.Exit(1)


def register_validate_command(app_instance: typer.Typer) -> None:
    """Register validate command with the main app."""
    app_instance.command("validate")(validate)


__all__ = ["register_validate_command"]
