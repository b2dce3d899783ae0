"""
Persona commands: list, show, search, new.
"""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ...persona.models import ModelTier
from ...persona.templating import render_system_prompt, scaffold_persona, summarize
from ..console import err_console, print_json, print_metadata_box, print_text, reported_errors
from .base import agents_dir_from, registry_from


def persona_list(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output personas as JSON"),
):
    """List personas in the agents directory."""
    with reported_errors():
        registry = registry_from(ctx)
        documents = registry.list()
        failures = registry.failures

    if json_output:
        print_json([doc.to_dict() for doc in documents])
        return

    table = Table(title=f"Personas in {registry.root}", show_header=True)
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Model")
    table.add_column("Summary")

    for doc in documents:
        table.add_row(doc.name, doc.model, summarize(doc.description, limit=80))

    err_console.print(table)
    if failures:
        err_console.print(
            f"[yellow]{len(failures)} file(s) could not be loaded; run 'devagents validate' for details.[/yellow]"
        )


def persona_show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Persona name"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output persona as JSON"),
    prompt: bool = typer.Option(False, "--prompt", "-p", help="Print the system prompt to stdout"),
    no_header: bool = typer.Option(False, "--no-header", help="Omit the name/description header from --prompt"),
):
    """Show a persona's metadata and body."""
    with reported_errors():
        doc = registry_from(ctx).get(name)

    if json_output:
        print_json(doc.to_dict(include_body=True))
        return
    if prompt:
        print_text(render_system_prompt(doc, header=not no_header))
        return

    print_metadata_box(doc.to_dict(), title=doc.name)
    err_console.print(Panel(Markdown(doc.system_prompt()), title=f"{doc.name}", expand=False))


def persona_search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Keywords to search for"),
    limit: int = typer.Option(5, "--limit", "-n", help="Maximum number of results"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output result as JSON"),
):
    """
    Search personas by keyword.

    Examples:
        devagents search "celery retries"
        devagents search permissions --limit 3 --json
    """
    with reported_errors():
        hits = registry_from(ctx).search(query, limit=limit)

    if json_output:
        print_json([hit.to_dict() for hit in hits])
        return

    if not hits:
        err_console.print(Panel(f"No personas found for '{query}'", title="Results", style="yellow"))
        return

    table = Table(title=f"Search: '{query}'", show_header=True)
    table.add_column("Persona", style="bold", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("Matched")

    for hit in hits:
        score_style = "green" if hit.score >= 5 else "yellow" if hit.score >= 2 else "red"
        table.add_row(hit.name, f"[{score_style}]{hit.score:.1f}[/{score_style}]", ", ".join(hit.matched))

    err_console.print(table)


def persona_new(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Persona name (kebab-case)"),
    description: str = typer.Option(..., "--description", "-D", help="One-line description"),
    model: ModelTier = typer.Option(ModelTier.SONNET, "--model", "-m", help="Model tier"),
    tools: Optional[List[str]] = typer.Option(None, "--tool", "-t", help="Tool the persona may use (repeatable)"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing document"),
):
    """Scaffold a new persona document in the agents directory."""
    with reported_errors():
        target = scaffold_persona(
            agents_dir_from(ctx),
            name,
            description,
            model=model.value,
            tools=tools or (),
            force=force,
        )

    err_console.print(f"[green]Created[/green] {target}")
    print_text(str(target))


def register_persona_commands(app_instance: typer.Typer) -> None:
    """Register persona commands with the main app."""
    app_instance.command("list")(persona_list)
    app_instance.command("show")(persona_show)
    app_instance.command("search")(persona_search)
    app_instance.command("new")(persona_new)


__all__ = ["register_persona_commands"]
