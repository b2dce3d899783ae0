"""
Unit tests for persona data models.

Tests for:
- PersonaMetadataModel (frontmatter validation)
- PersonaMetadata
- PersonaDocument
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from devagents.persona.models import (
    ModelTier,
    PersonaDocument,
    PersonaMetadata,
    PersonaMetadataModel,
    tokenize,
)

VALID = {
    "name": "rbac-architect",
    "description": "Designs role-based access control.",
    "model": "opus",
}


class TestPersonaMetadataModel:
    """Tests for PersonaMetadataModel Pydantic model."""

    def test_valid_minimal(self):
        model = PersonaMetadataModel.model_validate(VALID)

        assert model.name == "rbac-architect"
        assert model.model == "opus"
        assert model.tools == ()

    def test_strips_whitespace(self):
        model = PersonaMetadataModel.model_validate({**VALID, "description": "  Trimmed.  "})

        assert model.description == "Trimmed."

    @pytest.mark.parametrize("field", ["name", "description", "model"])
    def test_missing_required_field(self, field):
        data = {k: v for k, v in VALID.items() if k != field}

        with pytest.raises(ValidationError) as exc_info:
            PersonaMetadataModel.model_validate(data)

        assert exc_info.value.errors()[0]["loc"] == (field,)

    @pytest.mark.parametrize("value", ["", "   ", None, 3, ["a"]])
    def test_description_must_be_non_empty_string(self, value):
        with pytest.raises(ValidationError):
            PersonaMetadataModel.model_validate({**VALID, "description": value})

    @pytest.mark.parametrize("name", ["RBAC", "rbac_architect", "rbac--architect", "-rbac", "rbac architect"])
    def test_name_must_be_kebab_case(self, name):
        with pytest.raises(ValidationError):
            PersonaMetadataModel.model_validate({**VALID, "name": name})

    def test_tools_from_comma_string(self):
        model = PersonaMetadataModel.model_validate({**VALID, "tools": "Read, Grep, ,Glob"})

        assert model.tools == ("Read", "Grep", "Glob")

    def test_tools_from_list(self):
        model = PersonaMetadataModel.model_validate({**VALID, "tools": ["Read", " Edit "]})

        assert model.tools == ("Read", "Edit")

    def test_tools_rejects_mapping(self):
        with pytest.raises(ValidationError):
            PersonaMetadataModel.model_validate({**VALID, "tools": {"read": True}})

    def test_extra_keys_kept(self):
        model = PersonaMetadataModel.model_validate({**VALID, "color": "purple", "owner": "platform"})
        metadata = model.to_metadata()

        assert metadata.color == "purple"
        assert metadata.extra == {"owner": "platform"}


class TestPersonaMetadata:
    """Tests for PersonaMetadata dataclass."""

    def test_to_dict(self):
        meta = PersonaMetadata(
            name="security-reviewer",
            description="Reviews code.",
            model=ModelTier.OPUS.value,
            tools=("Read",),
        )

        result = meta.to_dict()

        assert result["name"] == "security-reviewer"
        assert result["model"] == "opus"
        assert result["tools"] == ["Read"]
        assert "color" not in result
        assert "extra" not in result

    def test_frozen(self):
        meta = PersonaMetadata(name="a", description="b", model="sonnet")

        with pytest.raises(AttributeError):
            meta.name = "c"  # type: ignore[misc]


class TestPersonaDocument:
    """Tests for PersonaDocument."""

    def _document(self) -> PersonaDocument:
        meta = PersonaMetadata(
            name="async-task-architect",
            description="Designs Celery background jobs.",
            model="sonnet",
            tags=("redis",),
        )
        return PersonaDocument(metadata=meta, body="\nYou design tasks.\n\n", path=Path("agents/x.md"))

    def test_shortcuts(self):
        doc = self._document()

        assert doc.name == "async-task-architect"
        assert doc.model == "sonnet"
        assert doc.description.startswith("Designs")

    def test_system_prompt_is_stripped(self):
        assert self._document().system_prompt() == "You design tasks."

    def test_keywords(self):
        keywords = self._document().keywords()

        assert {"async", "task", "architect", "celery", "redis"} <= keywords

    def test_to_dict_with_body(self):
        result = self._document().to_dict(include_body=True)

        assert result["path"] == str(Path("agents/x.md"))
        assert result["body"].strip() == "You design tasks."


def test_tokenize():
    assert tokenize("Django/Vue.js RBAC-architect") == ["django", "vue", "js", "rbac", "architect"]
