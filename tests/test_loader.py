"""
Unit tests for the persona loader.

Tests for:
- split_frontmatter / load_frontmatter
- parse_persona / load_persona
- iter_persona_files and PersonaLoader discovery
"""

from __future__ import annotations

from pathlib import Path

import pytest

from devagents.errors import (
    PersonaErrorCode,
    PersonaFormatError,
    PersonaNotFoundError,
    PersonaValidationError,
)
from devagents.persona.loader import (
    PersonaLoader,
    iter_persona_files,
    load_frontmatter,
    load_persona,
    parse_persona,
    split_frontmatter,
)

VALID_TEXT = """---
name: rbac-architect
description: Designs role-based access control.
model: opus
tools: Read, Grep
color: purple
---

You design permission models.
"""


class TestSplitFrontmatter:
    def test_split(self):
        raw, body = split_frontmatter(VALID_TEXT)

        assert "name: rbac-architect" in raw
        assert body.strip() == "You design permission models."

    def test_no_frontmatter(self):
        raw, body = split_frontmatter("# Just Markdown\n")

        assert raw is None
        assert body == "# Just Markdown\n"

    def test_byte_order_mark_ignored(self):
        raw, _ = split_frontmatter("\ufeff" + VALID_TEXT)

        assert raw is not None

    def test_unterminated(self):
        with pytest.raises(PersonaFormatError) as exc_info:
            split_frontmatter("---\nname: x\n\nbody\n", source="x.md")

        assert exc_info.value.code is PersonaErrorCode.UNTERMINATED_FRONTMATTER
        assert exc_info.value.line == 1


class TestLoadFrontmatter:
    def test_mapping(self):
        assert load_frontmatter("\nname: a\nmodel: sonnet\n") == {"name": "a", "model": "sonnet"}

    def test_empty_is_empty_mapping(self):
        assert load_frontmatter("\n") == {}

    def test_invalid_yaml_has_line(self):
        with pytest.raises(PersonaFormatError) as exc_info:
            load_frontmatter("\nname: a\ndescription: [unclosed\n")

        assert exc_info.value.code is PersonaErrorCode.INVALID_YAML
        assert exc_info.value.line is not None

    def test_list_is_not_mapping(self):
        with pytest.raises(PersonaFormatError) as exc_info:
            load_frontmatter("\n- a\n- b\n")

        assert exc_info.value.code is PersonaErrorCode.FRONTMATTER_NOT_MAPPING


class TestParsePersona:
    def test_parse_valid(self):
        doc = parse_persona(VALID_TEXT)

        assert doc.name == "rbac-architect"
        assert doc.model == "opus"
        assert doc.metadata.tools == ("Read", "Grep")
        assert doc.metadata.color == "purple"
        assert doc.body.startswith("You design")
        assert doc.path is None

    def test_missing_frontmatter(self):
        with pytest.raises(PersonaFormatError) as exc_info:
            parse_persona("You are nobody.\n")

        assert exc_info.value.code is PersonaErrorCode.MISSING_FRONTMATTER

    def test_missing_fields(self):
        with pytest.raises(PersonaValidationError) as exc_info:
            parse_persona("---\nname: lonely\n---\n\nBody\n", source="lonely.md")

        fields = {err["field"] for err in exc_info.value.field_errors}
        assert fields == {"description", "model"}
        assert exc_info.value.source == "lonely.md"

    def test_body_may_contain_horizontal_rules(self):
        text = VALID_TEXT + "\n---\n\nMore guidance.\n"

        doc = parse_persona(text)

        assert "More guidance." in doc.body


class TestLoadPersona:
    def test_load_from_disk(self, tmp_path: Path):
        path = tmp_path / "rbac-architect.md"
        path.write_text(VALID_TEXT, encoding="utf-8")

        doc = load_persona(path)

        assert doc.path == path
        assert doc.name == "rbac-architect"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(PersonaNotFoundError):
            load_persona(tmp_path / "ghost.md")

    def test_not_utf8(self, tmp_path: Path):
        path = tmp_path / "binary.md"
        path.write_bytes(b"---\nname: \xff\xfe\n---\n")

        with pytest.raises(PersonaFormatError) as exc_info:
            load_persona(path)

        assert exc_info.value.code is PersonaErrorCode.READ_ERROR


class TestDiscovery:
    def test_iter_skips_excluded_and_hidden(self, tmp_path: Path):
        for name in ("b.md", "a.md", "README.md", ".hidden.md", "notes.txt"):
            (tmp_path / name).write_text("x", encoding="utf-8")

        files = [path.name for path in iter_persona_files(tmp_path)]

        assert files == ["a.md", "b.md"]

    def test_iter_recursive(self, tmp_path: Path):
        (tmp_path / "top.md").write_text("x", encoding="utf-8")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "deep.md").write_text("x", encoding="utf-8")

        flat = [path.name for path in iter_persona_files(tmp_path)]
        deep = [path.name for path in iter_persona_files(tmp_path, recursive=True)]

        assert flat == ["top.md"]
        assert sorted(deep) == ["deep.md", "top.md"]

    def test_iter_missing_directory(self, tmp_path: Path):
        assert list(iter_persona_files(tmp_path / "nope")) == []

    def test_loader_uses_settings_defaults(self, agents_dir: Path):
        loader = PersonaLoader(agents_dir)

        assert loader.pattern == "*.md"
        assert "README.md" in loader.exclude
        assert [path.name for path in loader.discover()] == [
            "async-task-architect.md",
            "rbac-architect.md",
            "security-reviewer.md",
        ]

    def test_load_all_collects_failures(self, agents_dir: Path):
        broken = agents_dir / "broken.md"
        broken.write_text("---\nname: broken\n", encoding="utf-8")

        documents, failures = PersonaLoader(agents_dir).load_all()

        assert len(documents) == 3
        assert list(failures) == [broken]
        assert failures[broken].code is PersonaErrorCode.UNTERMINATED_FRONTMATTER
