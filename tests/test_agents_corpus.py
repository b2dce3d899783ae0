"""
Checks for the persona documents shipped in agents/.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from devagents.persona.loader import iter_persona_files, load_persona
from devagents.persona.models import ModelTier
from devagents.persona.registry import PersonaRegistry
from devagents.persona.templating import render_catalog
from devagents.persona.validator import validate_paths

EXPECTED = {
    "async-task-architect",
    "database-architect",
    "devops-engineer",
    "django-api-architect",
    "legal-document-generator",
    "rbac-architect",
    "realtime-architect",
    "security-reviewer",
    "vue-frontend-architect",
}


def _corpus_files() -> list[Path]:
    return list(iter_persona_files(Path(__file__).resolve().parent.parent / "agents"))


def test_corpus_is_clean(corpus_dir: Path):
    report = validate_paths([corpus_dir])

    assert report.files_checked == len(EXPECTED)
    assert report.ok(strict=True), [issue.to_dict() for issue in report.issues]


def test_corpus_names(corpus_dir: Path):
    assert set(PersonaRegistry(corpus_dir).names()) == EXPECTED


@pytest.mark.parametrize("path", _corpus_files(), ids=lambda path: path.stem)
def test_persona_document(path: Path):
    doc = load_persona(path)

    assert doc.name == path.stem
    assert doc.model in {tier.value for tier in ModelTier}
    assert doc.description
    assert doc.metadata.tools
    assert len(doc.system_prompt()) > 200


def test_catalog_is_up_to_date(corpus_dir: Path):
    expected = render_catalog(PersonaRegistry(corpus_dir).list())

    assert (corpus_dir / "README.md").read_text(encoding="utf-8") == expected


def test_search_routes_common_requests(corpus_dir: Path):
    registry = PersonaRegistry(corpus_dir)

    assert registry.search("celery retries")[0].name == "async-task-architect"
    assert registry.search("permissions roles")[0].name == "rbac-architect"
    assert registry.search("websockets")[0].name == "realtime-architect"
