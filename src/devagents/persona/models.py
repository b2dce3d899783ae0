"""
persona/models.py
Data models for persona documents.

A persona document is Markdown with YAML frontmatter:

    ---
    name: rbac-architect
    description: Designs role and permission models for Django/Vue apps
    model: sonnet
    tools: Read, Grep, Glob
    ---

    You are an RBAC architect...

PersonaMetadataModel validates the raw frontmatter; PersonaMetadata and
PersonaDocument are the immutable values the rest of the package passes around.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr, field_validator

# =============================================================================
# Constants
# =============================================================================

NAME_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> list[str]:
    """Lowercase alphanumeric tokens of a string."""
    return _TOKEN_PATTERN.findall(text.lower())


def _split_list(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        if not all(isinstance(item, str) for item in value):
            raise ValueError(f"{field_name} entries must be strings")
        items = list(value)
    else:
        raise ValueError(f"{field_name} must be a comma-separated string or a list of strings")
    return tuple(item.strip() for item in items if item.strip())


# =============================================================================
# Enums
# =============================================================================


class ModelTier(StrEnum):
    """Model a persona asks its host to run on."""

    SONNET = "sonnet"
    OPUS = "opus"
    HAIKU = "haiku"
    INHERIT = "inherit"


# =============================================================================
# Data Models
# =============================================================================


@dataclass(slots=True, frozen=True)
class PersonaMetadata:
    """Persona metadata extracted from YAML frontmatter."""

    name: str
    description: str
    model: str
    tools: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    color: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "model": self.model,
            "tools": list(self.tools),
            "tags": list(self.tags),
        }
        if self.color is not None:
            result["color"] = self.color
        if self.extra:
            result["extra"] = dict(self.extra)
        return result


@dataclass(slots=True, frozen=True)
class PersonaDocument:
    """Complete persona: metadata plus the Markdown body that follows it."""

    metadata: PersonaMetadata
    body: str = ""
    path: Path | None = None

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def description(self) -> str:
        return self.metadata.description

    @property
    def model(self) -> str:
        return self.metadata.model

    def system_prompt(self) -> str:
        """The prose an agent host would use as the system prompt."""
        return self.body.strip()

    def keywords(self) -> set[str]:
        """Tokens from name, description and tags, used for keyword search."""
        words = set(tokenize(self.name))
        words.update(tokenize(self.description))
        for tag in self.metadata.tags:
            words.update(tokenize(tag))
        return words

    def to_dict(self, include_body: bool = False) -> dict[str, Any]:
        result = self.metadata.to_dict()
        result["path"] = str(self.path) if self.path else None
        if include_body:
            result["body"] = self.body
        return result


class PersonaMetadataModel(BaseModel):
    """
    Pydantic model for metadata validation from persona frontmatter.

    Required fields must be real strings; YAML values like `model: 3` or
    `name: null` are rejected rather than coerced.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: StrictStr
    description: StrictStr
    model: StrictStr

    tools: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    color: str | None = None

    @field_validator("name", "description", "model")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("name")
    @classmethod
    def _kebab_case(cls, value: str) -> str:
        if not NAME_PATTERN.match(value):
            raise ValueError("must be kebab-case (lowercase letters, digits and single hyphens)")
        return value

    @field_validator("tools", mode="before")
    @classmethod
    def _normalize_tools(cls, value: Any) -> tuple[str, ...]:
        return _split_list(value, "tools")

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> tuple[str, ...]:
        return _split_list(value, "tags")

    def to_metadata(self) -> PersonaMetadata:
        """Convert to PersonaMetadata dataclass."""
        return PersonaMetadata(
            name=self.name,
            description=self.description,
            model=self.model,
            tools=self.tools,
            tags=self.tags,
            color=self.color,
            extra=dict(self.model_extra or {}),
        )


# =============================================================================
# Export
# =============================================================================

__all__ = [
    "NAME_PATTERN",
    "ModelTier",
    "PersonaDocument",
    "PersonaMetadata",
    "PersonaMetadataModel",
    "tokenize",
]
