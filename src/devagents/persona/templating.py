"""
persona/templating.py - Jinja2 rendering for persona documents

Renders:
- the agent catalog (Markdown table or JSON)
- new persona documents (scaffolding)
- a persona's system prompt
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import jinja2

from ..config.logging import get_logger
from ..errors import PersonaErrorCode, PersonaExistsError, PersonaFormatError, PersonaValidationError
from .loader import parse_persona
from .models import NAME_PATTERN, ModelTier, PersonaDocument

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_SENTENCE_END = re.compile(r"(?<=[.!?])\s")


class TemplateEngine:
    """Jinja2-based template engine for persona rendering."""

    def __init__(self, search_paths: list[Path] | None = None) -> None:
        self.loader = jinja2.FileSystemLoader(search_paths or [TEMPLATES_DIR])
        self.env = jinja2.Environment(
            loader=self.loader,
            autoescape=False,  # Markdown and YAML, not HTML
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
        )

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        template = self.env.get_template(template_name)
        return template.render(**context)


_engine: TemplateEngine | None = None


def get_engine() -> TemplateEngine:
    """Get the global template engine instance."""
    global _engine
    if _engine is None:
        _engine = TemplateEngine()
    return _engine


# =============================================================================
# Catalog
# =============================================================================


def summarize(description: str, limit: int = 160) -> str:
    """First sentence of a description, flattened for a table cell."""
    text = " ".join(description.split())
    first = _SENTENCE_END.split(text, maxsplit=1)[0]
    if len(first) > limit:
        first = first[: limit - 3].rstrip() + "..."
    return first.replace("|", "\\|")


def render_catalog(documents: Iterable[PersonaDocument], *, fmt: str = "markdown") -> str:
    """Render the catalog of personas.

    Args:
        documents: Personas to include (sorted by name in the output)
        fmt: "markdown" or "json"
    """
    docs = sorted(documents, key=lambda doc: doc.name)

    if fmt == "json":
        return json.dumps([doc.to_dict() for doc in docs], indent=2) + "\n"
    if fmt != "markdown":
        raise ValueError(f"Unknown catalog format: {fmt}")

    rows = [
        {
            "name": doc.name,
            "model": doc.model,
            "summary": summarize(doc.description),
            "filename": doc.path.name if doc.path else f"{doc.name}.md",
        }
        for doc in docs
    ]
    return get_engine().render("catalog.md.j2", {"documents": rows})


# =============================================================================
# Scaffolding
# =============================================================================


def _title_from_name(name: str) -> str:
    words = name.replace("-", " ").split()
    article = "an" if words and words[0][0] in "aeiou" else "a"
    return f"{article} {' '.join(word.capitalize() for word in words)}"


def render_persona(
    name: str,
    description: str,
    model: str = ModelTier.SONNET.value,
    tools: Sequence[str] = (),
    title: str | None = None,
) -> str:
    """Render a new persona document.

    Raises:
        PersonaValidationError: if name, description or model is invalid
    """
    field_errors = []
    if not NAME_PATTERN.match(name or ""):
        field_errors.append({"field": "name", "message": "must be kebab-case", "type": "value_error"})
    if not description or not description.strip():
        field_errors.append({"field": "description", "message": "must not be empty", "type": "value_error"})
    if model not in {tier.value for tier in ModelTier}:
        field_errors.append(
            {"field": "model", "message": f"must be one of {[t.value for t in ModelTier]}", "type": "value_error"}
        )
    if field_errors:
        fields = ", ".join(err["field"] for err in field_errors)
        raise PersonaValidationError(f"Cannot scaffold persona: invalid {fields}", field_errors=field_errors)

    context = {
        "name": name,
        "description": " ".join(description.split()),
        "model": model,
        "tools": [tool.strip() for tool in tools if tool.strip()],
        "title": title or _title_from_name(name),
    }
    return get_engine().render("persona.md.j2", context)


def scaffold_persona(
    directory: Path,
    name: str,
    description: str,
    model: str = ModelTier.SONNET.value,
    tools: Sequence[str] = (),
    *,
    force: bool = False,
) -> Path:
    """Write a new persona document to `<directory>/<name>.md`.

    Raises:
        PersonaExistsError: if the file exists and force is not set
    """
    text = render_persona(name, description, model=model, tools=tools)
    # The rendered document must load like any hand-written persona.
    parse_persona(text, source=f"<scaffold:{name}>")

    directory = Path(directory)
    target = directory / f"{name}.md"
    if target.exists() and not force:
        raise PersonaExistsError(str(target))

    try:
        directory.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise PersonaFormatError(
            f"Cannot write persona document: {exc}",
            code=PersonaErrorCode.WRITE_ERROR,
            source=str(target),
        ) from exc

    logger.info("Created persona", name=name, path=str(target))
    return target


# =============================================================================
# System prompt
# =============================================================================


def render_system_prompt(document: PersonaDocument, *, header: bool = True) -> str:
    """The persona body, optionally prefixed with its name and description."""
    prompt = document.system_prompt()
    if not header:
        return prompt + "\n"
    description = " ".join(document.description.split())
    header_text = f"# {document.name}\n\n> {description}\n"
    return f"{header_text}\n{prompt}\n" if prompt else header_text


__all__ = [
    "TEMPLATES_DIR",
    "TemplateEngine",
    "get_engine",
    "render_catalog",
    "render_persona",
    "render_system_prompt",
    "scaffold_persona",
    "summarize",
]
