"""
persona/loader.py
Loader for persona documents (YAML frontmatter + Markdown body).

Parsing is strict: a document without frontmatter, with broken YAML or with
invalid fields raises a PersonaError subclass. PersonaLoader.load_all() is the
tolerant entry point used when scanning a whole directory.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import frontmatter
import yaml
from pydantic import ValidationError

from ..config.logging import get_logger
from ..errors import (
    PersonaError,
    PersonaErrorCode,
    PersonaFormatError,
    PersonaNotFoundError,
    PersonaValidationError,
)
from .models import PersonaDocument, PersonaMetadataModel

logger = get_logger(__name__)

_yaml_handler = frontmatter.YAMLHandler()


# =============================================================================
# Parsing
# =============================================================================


def split_frontmatter(text: str, *, source: str | None = None) -> tuple[str | None, str]:
    """Split a document into (raw frontmatter, body).

    Returns (None, text) when the document does not open with a `---` fence.
    Raises PersonaFormatError when the opening fence is never closed.
    """
    text = text.lstrip("\ufeff")
    if not _yaml_handler.detect(text):
        return None, text
    try:
        raw, body = _yaml_handler.split(text)
    except ValueError as exc:
        raise PersonaFormatError(
            "Frontmatter opened with '---' but never closed",
            code=PersonaErrorCode.UNTERMINATED_FRONTMATTER,
            source=source,
            line=1,
        ) from exc
    return raw, body


def load_frontmatter(raw: str, *, source: str | None = None) -> dict[str, Any]:
    """Parse a raw frontmatter block into a mapping."""
    try:
        loaded = _yaml_handler.load(raw)
    except yaml.YAMLError as exc:
        line = None
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            # raw starts with the remainder of the opening fence line
            line = mark.line + 1
        raise PersonaFormatError(
            f"Frontmatter is not valid YAML: {exc}",
            code=PersonaErrorCode.INVALID_YAML,
            source=source,
            line=line,
        ) from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise PersonaFormatError(
            f"Frontmatter must be a mapping, got {type(loaded).__name__}",
            code=PersonaErrorCode.FRONTMATTER_NOT_MAPPING,
            source=source,
            line=2,
        )
    return loaded


def field_errors_from(exc: ValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into {field, message, type} records."""
    errors = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        errors.append(
            {
                "field": ".".join(str(part) for part in loc) if loc else "",
                "message": error.get("msg", ""),
                "type": error.get("type", ""),
            }
        )
    return errors


def parse_persona(text: str, *, source: str | None = None, path: Path | None = None) -> PersonaDocument:
    """Parse persona text into a PersonaDocument."""
    raw, body = split_frontmatter(text, source=source)
    if raw is None:
        raise PersonaFormatError(
            "Document has no YAML frontmatter",
            code=PersonaErrorCode.MISSING_FRONTMATTER,
            source=source,
            line=1,
        )

    meta = load_frontmatter(raw, source=source)
    try:
        model = PersonaMetadataModel.model_validate(meta)
    except ValidationError as exc:
        field_errors = field_errors_from(exc)
        fields = ", ".join(sorted({err["field"] for err in field_errors}))
        raise PersonaValidationError(
            f"Invalid frontmatter fields: {fields}",
            field_errors=field_errors,
            source=source,
        ) from exc

    return PersonaDocument(metadata=model.to_metadata(), body=body.lstrip("\n"), path=path)


def load_persona(path: Path) -> PersonaDocument:
    """Read and parse one persona document."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise PersonaNotFoundError(str(path)) from exc
    except UnicodeDecodeError as exc:
        raise PersonaFormatError(
            f"File is not valid UTF-8: {exc.reason}",
            code=PersonaErrorCode.READ_ERROR,
            source=str(path),
        ) from exc
    except OSError as exc:
        raise PersonaFormatError(
            f"Cannot read file: {exc}",
            code=PersonaErrorCode.READ_ERROR,
            source=str(path),
        ) from exc
    return parse_persona(text, source=str(path), path=path)


# =============================================================================
# Discovery
# =============================================================================


def iter_persona_files(
    root: Path,
    *,
    pattern: str = "*.md",
    exclude: Sequence[str] = ("README.md",),
    recursive: bool = False,
) -> Iterator[Path]:
    """Yield persona files under root in sorted order.

    Hidden files and excluded names are skipped.
    """
    root = Path(root)
    if not root.is_dir():
        return
    candidates = root.rglob(pattern) if recursive else root.glob(pattern)
    excluded = set(exclude)
    for path in sorted(candidates):
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if path.name in excluded or not path.is_file():
            continue
        yield path


class PersonaLoader:
    """
    Loads every persona document in a directory.

    Discovery settings default to the `agents.*` settings keys.
    """

    __slots__ = ("root", "pattern", "exclude", "recursive")

    def __init__(
        self,
        root: Path,
        *,
        pattern: str | None = None,
        exclude: Sequence[str] | None = None,
        recursive: bool | None = None,
    ) -> None:
        from ..config.settings import get_settings

        settings = get_settings()
        self.root = Path(root)
        self.pattern = pattern or settings.get("agents.pattern", "*.md")
        self.exclude = tuple(exclude if exclude is not None else settings.get_list("agents.exclude"))
        self.recursive = bool(
            recursive if recursive is not None else settings.get("agents.recursive", False)
        )

    def discover(self) -> list[Path]:
        return list(
            iter_persona_files(
                self.root,
                pattern=self.pattern,
                exclude=self.exclude,
                recursive=self.recursive,
            )
        )

    def load(self, path: Path) -> PersonaDocument:
        return load_persona(path)

    def load_all(self) -> tuple[list[PersonaDocument], dict[Path, PersonaError]]:
        """Load every discovered file.

        Returns:
            (documents, failures) where failures maps a path to its error
        """
        documents: list[PersonaDocument] = []
        failures: dict[Path, PersonaError] = {}

        for path in self.discover():
            try:
                documents.append(self.load(path))
            except PersonaError as exc:
                failures[path] = exc
                logger.warning(
                    "Skipping persona file",
                    path=str(path),
                    code=exc.code.value if exc.code else None,
                    error=exc.message,
                )

        logger.debug(
            "Loaded persona directory",
            root=str(self.root),
            loaded=len(documents),
            failed=len(failures),
        )
        return documents, failures


__all__ = [
    "PersonaLoader",
    "field_errors_from",
    "iter_persona_files",
    "load_frontmatter",
    "load_persona",
    "parse_persona",
    "split_frontmatter",
]
