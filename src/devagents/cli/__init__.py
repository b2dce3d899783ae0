"""devagents command-line interface (typer)."""
