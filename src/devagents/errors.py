"""
errors.py - Error Code System

Error Code Structure:
- 1xxx: Validation errors (frontmatter, fields)
- 3xxx: Runtime errors (lookup, scaffolding)
- 4xxx: Storage errors (reading files, settings)

Usage:
    from devagents.errors import PersonaError, PersonaErrorCode

    raise PersonaError(
        message="Persona not found",
        code=PersonaErrorCode.PERSONA_NOT_FOUND,
        details={"name": "rbac-architect"},
    )
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Error category classification."""

    VALIDATION = "VALIDATION"
    RUNTIME = "RUNTIME"
    STORAGE = "STORAGE"
    UNKNOWN = "UNKNOWN"


def _infer_category_from_code(code: str) -> ErrorCategory:
    """Infer error category from error code prefix."""
    if not code or len(code) < 2:
        return ErrorCategory.UNKNOWN

    category_map = {
        "1": ErrorCategory.VALIDATION,
        "3": ErrorCategory.RUNTIME,
        "4": ErrorCategory.STORAGE,
    }
    return category_map.get(code[0], ErrorCategory.UNKNOWN)


class PersonaErrorCode(str, Enum):
    """Error codes for persona handling."""

    # ==========================================================================
    # Validation Errors (1xxx)
    # ==========================================================================
    MISSING_FRONTMATTER = "1001"
    UNTERMINATED_FRONTMATTER = "1002"
    INVALID_YAML = "1003"
    FRONTMATTER_NOT_MAPPING = "1004"
    INVALID_FIELD = "1005"

    # ==========================================================================
    # Runtime Errors (3xxx)
    # ==========================================================================
    PERSONA_NOT_FOUND = "3001"
    PERSONA_EXISTS = "3002"
    DUPLICATE_PERSONA = "3003"

    # ==========================================================================
    # Storage Errors (4xxx)
    # ==========================================================================
    READ_ERROR = "4001"
    WRITE_ERROR = "4002"
    SETTINGS_ERROR = "4003"


class PersonaError(Exception):
    """Base exception for devagents errors.

    Attributes:
        message: Human-readable error description
        code: Error code from PersonaErrorCode
        category: Error category (inferred from the code when not given)
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[PersonaErrorCode] = None,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code

        if category == ErrorCategory.UNKNOWN and code:
            category = _infer_category_from_code(code.value)

        self.category = category
        self.details = details or {}
        super().__init__(str(self))

    def __str__(self) -> str:
        code_str = self.code.value if self.code else "UNKNOWN"
        return f"[{code_str}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"code={self.code.value if self.code else None!r}, "
            f"category={self.category.value!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary format."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "code": self.code.value if self.code else None,
            "category": self.category.value,
            "details": self.details,
        }


class PersonaFormatError(PersonaError):
    """The document is not a frontmatter + Markdown file we can read."""

    def __init__(
        self,
        message: str,
        code: PersonaErrorCode = PersonaErrorCode.INVALID_YAML,
        source: Optional[str] = None,
        line: Optional[int] = None,
    ):
        details: dict[str, Any] = {"source": source}
        if line is not None:
            details["line"] = line
        super().__init__(message=message, code=code, details=details)
        self.source = source
        self.line = line


class PersonaValidationError(PersonaError):
    """Frontmatter parsed, but its fields are invalid."""

    def __init__(
        self,
        message: str,
        field_errors: Optional[list[dict[str, Any]]] = None,
        source: Optional[str] = None,
    ):
        self.field_errors = field_errors or []
        self.source = source
        super().__init__(
            message=message,
            code=PersonaErrorCode.INVALID_FIELD,
            category=ErrorCategory.VALIDATION,
            details={"source": source, "fields": self.field_errors},
        )


class PersonaNotFoundError(PersonaError):
    """Exception when a persona (or its file) does not exist."""

    def __init__(self, name: str, suggestions: Optional[list[str]] = None):
        self.name = name
        self.suggestions = list(suggestions or [])
        details: dict[str, Any] = {"name": name}
        if self.suggestions:
            details["suggestions"] = self.suggestions

        super().__init__(
            message=f"Persona not found: {name}",
            code=PersonaErrorCode.PERSONA_NOT_FOUND,
            details=details,
        )


class PersonaExistsError(PersonaError):
    """Exception when scaffolding would overwrite an existing document."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            message=f"Persona document already exists: {path}",
            code=PersonaErrorCode.PERSONA_EXISTS,
            details={"path": path},
        )


class SettingsError(PersonaError):
    """Exception when a settings file cannot be read."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            message=message,
            code=PersonaErrorCode.SETTINGS_ERROR,
            details={"path": path},
        )


__all__ = [
    "ErrorCategory",
    "PersonaErrorCode",
    "PersonaError",
    "PersonaFormatError",
    "PersonaValidationError",
    "PersonaNotFoundError",
    "PersonaExistsError",
    "SettingsError",
]
