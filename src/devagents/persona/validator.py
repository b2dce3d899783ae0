"""
persona/validator.py
Lint checks for persona documents.

Unlike the loader, validation never raises for a bad document: every problem
becomes a ValidationIssue so a whole directory can be reported in one pass.

Rules:
    missing-frontmatter      error    no leading `---` YAML block
    unterminated-frontmatter error    opening fence never closed
    invalid-yaml             error    frontmatter is not YAML
    frontmatter-not-mapping  error    frontmatter is a list/scalar
    missing-field            error    required field absent, null or blank
    invalid-field-type       error    required field or color is not a string
    invalid-name             error    name is not kebab-case
    invalid-tools            error    tools is not a string or list of strings
    invalid-tags             error    tags is not a string or list of strings
    unknown-model            warning  model not in agents.allowed_models
    name-mismatch            warning  name differs from the file stem
    duplicate-name           error    name already declared by another file
    unclosed-code-fence      error    ``` or ~~~ fence never closed
    executable-entry-point   error    shebang line or executable permission bit
    empty-body               warning  nothing after the frontmatter
    unreadable               error    file cannot be read as UTF-8
"""

from __future__ import annotations

import os
import re
import stat
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from ..config.logging import get_logger
from ..config.settings import Settings, get_settings
from ..errors import PersonaErrorCode, PersonaFormatError
from .loader import iter_persona_files, load_frontmatter, split_frontmatter
from .models import NAME_PATTERN

logger = get_logger(__name__)

_FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    """One problem found in one file."""

    rule: str
    severity: Severity
    message: str
    path: Path | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path) if self.path else None,
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.line,
        }

    def location(self) -> str:
        where = str(self.path) if self.path else "<text>"
        return f"{where}:{self.line}" if self.line else where


@dataclass(slots=True)
class ValidationReport:
    """Issues for a set of files."""

    issues: list[ValidationIssue] = field(default_factory=list)
    files_checked: int = 0

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.WARNING]

    def ok(self, strict: bool = False) -> bool:
        """True when there are no errors (and no warnings, when strict)."""
        if strict:
            return not self.issues
        return not self.errors

    def by_path(self) -> dict[Path | None, list[ValidationIssue]]:
        grouped: dict[Path | None, list[ValidationIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.path, []).append(issue)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_checked": self.files_checked,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [issue.to_dict() for issue in self.issues],
        }


# =============================================================================
# Body checks
# =============================================================================


def _body_start_line(text: str, body: str) -> int:
    """1-based line number of the first body line within the full text."""
    offset = len(text) - len(body)
    return text.count("\n", 0, max(offset, 0)) + 1


def find_unclosed_fence(body: str) -> int | None:
    """Return the 0-based line index of a code fence that is never closed.

    A closing fence uses the same character, is at least as long as the
    opener and carries no info string.
    """
    open_char = ""
    open_len = 0
    open_line: int | None = None

    for index, line in enumerate(body.splitlines()):
        match = _FENCE_PATTERN.match(line)
        if not match:
            continue
        marker, rest = match.group(1), match.group(2)
        if open_line is None:
            if marker[0] == "`" and "`" in rest:
                continue
            open_char, open_len, open_line = marker[0], len(marker), index
        elif marker[0] == open_char and len(marker) >= open_len and not rest.strip():
            open_line = None

    return open_line


def _check_fields(
    meta: dict[str, Any],
    path: Path | None,
    settings: Settings,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    required = settings.get_list("agents.required_fields") or ["name", "description", "model"]

    for name in required:
        value = meta.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            issues.append(
                ValidationIssue(
                    rule="missing-field",
                    severity=Severity.ERROR,
                    message=f"Required field '{name}' is missing or empty",
                    path=path,
                )
            )
        elif not isinstance(value, str):
            issues.append(
                ValidationIssue(
                    rule="invalid-field-type",
                    severity=Severity.ERROR,
                    message=f"Field '{name}' must be a string, got {type(value).__name__}",
                    path=path,
                )
            )

    name = meta.get("name")
    if isinstance(name, str) and name.strip() and not NAME_PATTERN.match(name.strip()):
        issues.append(
            ValidationIssue(
                rule="invalid-name",
                severity=Severity.ERROR,
                message=f"Name '{name}' must be kebab-case",
                path=path,
            )
        )

    model = meta.get("model")
    allowed_models = settings.get_list("agents.allowed_models")
    if isinstance(model, str) and model.strip() and allowed_models and model.strip() not in allowed_models:
        issues.append(
            ValidationIssue(
                rule="unknown-model",
                severity=Severity.WARNING,
                message=f"Model '{model}' is not one of: {', '.join(allowed_models)}",
                path=path,
            )
        )

    for list_field in ("tools", "tags"):
        value = meta.get(list_field)
        if value is not None and not (
            isinstance(value, str)
            or (isinstance(value, list) and all(isinstance(item, str) for item in value))
        ):
            issues.append(
                ValidationIssue(
                    rule=f"invalid-{list_field}",
                    severity=Severity.ERROR,
                    message=f"Field '{list_field}' must be a comma-separated string or a list of strings",
                    path=path,
                )
            )

    color = meta.get("color")
    if "color" not in required and color is not None and not isinstance(color, str):
        issues.append(
            ValidationIssue(
                rule="invalid-field-type",
                severity=Severity.ERROR,
                message=f"Field 'color' must be a string, got {type(color).__name__}",
                path=path,
            )
        )

    return issues


_FORMAT_RULES = {
    PersonaErrorCode.MISSING_FRONTMATTER: "missing-frontmatter",
    PersonaErrorCode.UNTERMINATED_FRONTMATTER: "unterminated-frontmatter",
    PersonaErrorCode.INVALID_YAML: "invalid-yaml",
    PersonaErrorCode.FRONTMATTER_NOT_MAPPING: "frontmatter-not-mapping",
}


def _format_issue(exc: PersonaFormatError, path: Path | None) -> ValidationIssue:
    return ValidationIssue(
        rule=_FORMAT_RULES.get(exc.code, "invalid-yaml"),
        severity=Severity.ERROR,
        message=exc.message,
        path=path,
        line=exc.line,
    )


# =============================================================================
# Public API
# =============================================================================


def _check_text(
    text: str,
    path: Path | None,
    settings: Settings,
) -> tuple[list[ValidationIssue], str | None]:
    """Content checks plus the declared name (None when unparseable or blank)."""
    source = str(path) if path else None
    issues: list[ValidationIssue] = []
    declared: str | None = None

    if text.lstrip("\ufeff").startswith("#!"):
        issues.append(
            ValidationIssue(
                rule="executable-entry-point",
                severity=Severity.ERROR,
                message="Persona documents must not start with a shebang line",
                path=path,
                line=1,
            )
        )

    try:
        raw, body = split_frontmatter(text, source=source)
    except PersonaFormatError as exc:
        issues.append(_format_issue(exc, path))
        return issues, None

    if raw is None:
        issues.append(
            ValidationIssue(
                rule="missing-frontmatter",
                severity=Severity.ERROR,
                message="Document has no YAML frontmatter",
                path=path,
                line=1,
            )
        )
        body = text
    else:
        try:
            meta = load_frontmatter(raw, source=source)
        except PersonaFormatError as exc:
            issues.append(_format_issue(exc, path))
        else:
            issues.extend(_check_fields(meta, path, settings))
            name = meta.get("name")
            if isinstance(name, str) and name.strip():
                declared = name.strip()

    if not body.strip():
        issues.append(
            ValidationIssue(
                rule="empty-body",
                severity=Severity.WARNING,
                message="Persona has no Markdown body after the frontmatter",
                path=path,
            )
        )
    else:
        unclosed = find_unclosed_fence(body)
        if unclosed is not None:
            stripped = text.lstrip("\ufeff")
            issues.append(
                ValidationIssue(
                    rule="unclosed-code-fence",
                    severity=Severity.ERROR,
                    message="Code fence is opened but never closed",
                    path=path,
                    line=_body_start_line(stripped, body) + unclosed,
                )
            )

    return issues, declared


def validate_text(
    text: str,
    *,
    path: Path | None = None,
    settings: Settings | None = None,
) -> list[ValidationIssue]:
    """Validate persona text (content checks only, no filesystem checks)."""
    issues, _ = _check_text(text, path, settings or get_settings())
    return issues


def _read(path: Path) -> tuple[str | None, ValidationIssue | None]:
    try:
        return path.read_text(encoding="utf-8"), None
    except UnicodeDecodeError as exc:
        message = f"File is not valid UTF-8: {exc.reason}"
    except OSError as exc:
        message = f"Cannot read file: {exc.strerror or exc}"
    return None, ValidationIssue(
        rule="unreadable", severity=Severity.ERROR, message=message, path=path
    )


def _check_file(path: Path, settings: Settings) -> tuple[list[ValidationIssue], str | None]:
    text, issue = _read(path)
    if issue is not None:
        return [issue], None

    issues, declared = _check_text(text, path, settings)

    if os.name == "posix" and path.stat().st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
        issues.append(
            ValidationIssue(
                rule="executable-entry-point",
                severity=Severity.ERROR,
                message="Persona documents must not be executable (chmod -x)",
                path=path,
            )
        )

    if declared and declared != path.stem:
        issues.append(
            ValidationIssue(
                rule="name-mismatch",
                severity=Severity.WARNING,
                message=f"Name '{declared}' does not match file name '{path.stem}'",
                path=path,
            )
        )

    return issues, declared


def validate_file(path: Path, *, settings: Settings | None = None) -> list[ValidationIssue]:
    """Validate one persona file, including filesystem checks."""
    issues, _ = _check_file(Path(path), settings or get_settings())
    return issues


def _expand(paths: Iterable[Path], settings: Settings) -> list[Path]:
    """Files to check, in argument order; a file reached twice is kept once."""
    files: list[Path] = []
    seen: set[Path] = set()
    for entry in paths:
        entry = Path(entry)
        if entry.is_dir():
            candidates = list(
                iter_persona_files(
                    entry,
                    pattern=settings.get("agents.pattern", "*.md"),
                    exclude=settings.get_list("agents.exclude"),
                    recursive=bool(settings.get("agents.recursive", False)),
                )
            )
        else:
            candidates = [entry]
        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            files.append(candidate)
    return files


def validate_paths(
    paths: Iterable[Path],
    *,
    settings: Settings | None = None,
) -> ValidationReport:
    """Validate files and directories, including cross-file duplicate names."""
    settings = settings or get_settings()
    report = ValidationReport()
    seen: dict[str, Path] = {}

    for path in _expand(paths, settings):
        report.files_checked += 1
        issues, name = _check_file(path, settings)
        report.issues.extend(issues)

        if name is None:
            continue
        if name in seen:
            report.issues.append(
                ValidationIssue(
                    rule="duplicate-name",
                    severity=Severity.ERROR,
                    message=f"Name '{name}' is already declared in {seen[name]}",
                    path=path,
                )
            )
        else:
            seen[name] = path

    logger.debug(
        "Validated persona files",
        files=report.files_checked,
        errors=len(report.errors),
        warnings=len(report.warnings),
    )
    return report


__all__ = [
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "find_unclosed_fence",
    "validate_file",
    "validate_paths",
    "validate_text",
]
