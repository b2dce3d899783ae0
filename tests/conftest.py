"""
Pytest Configuration and Common Fixtures for the devagents test suite.

Categories:
    - Isolation: every test gets its own project root and config home
    - Path Fixtures: repo_root, corpus_dir, agents_dir
    - Factories: persona_factory writes persona documents
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from devagents.config.dirs import clear_project_root_cache
from devagents.config.settings import get_settings
from devagents.persona.registry import reset_registry

_REPO_ROOT = Path(__file__).resolve().parent.parent


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point project root and config home at temporary directories."""
    project = tmp_path.resolve() / "project"
    project.mkdir()
    monkeypatch.setenv("DEVAGENTS_ROOT", str(project))
    monkeypatch.setenv("PRJ_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("DEVAGENTS_AGENTS_DIR", raising=False)
    monkeypatch.delenv("DEVAGENTS_CONF", raising=False)

    clear_project_root_cache()
    get_settings().reload()
    reset_registry()
    yield project
    get_settings().reload()
    reset_registry()


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return _REPO_ROOT


@pytest.fixture(scope="session")
def corpus_dir(repo_root: Path) -> Path:
    """The persona documents shipped in this repository."""
    return repo_root / "agents"


# =============================================================================
# Factories
# =============================================================================


def render_persona_text(
    name: str,
    description: str = "Helps with testing Django apps.",
    model: str = "sonnet",
    body: str = "You are a test persona.\n",
    extra: str = "",
) -> str:
    return f"---\nname: {name}\ndescription: {description}\nmodel: {model}\n{extra}---\n\n{body}"


@pytest.fixture
def persona_factory() -> Callable[..., Path]:
    """Write a persona document: persona_factory(directory, name, **fields)."""

    def _write(directory: Path, name: str, filename: str | None = None, text: str | None = None, **kwargs) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / (filename or f"{name}.md")
        path.write_text(text if text is not None else render_persona_text(name, **kwargs), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def agents_dir(isolated_project: Path, persona_factory: Callable[..., Path]) -> Path:
    """A small valid persona directory inside the temporary project."""
    directory = isolated_project / "agents"
    persona_factory(
        directory,
        "async-task-architect",
        description="Designs Celery background jobs with retries and scheduling.",
        extra="tags: [celery, redis]\n",
        body="You design Celery tasks.\n\n```python\n@shared_task\ndef ping():\n    return 'pong'\n```\n",
    )
    persona_factory(
        directory,
        "rbac-architect",
        description="Designs role-based access control for Django REST Framework.",
        model="opus",
        extra="tools: Read, Grep\n",
        body="You design permission models.\n",
    )
    persona_factory(
        directory,
        "security-reviewer",
        description="Reviews Django and Vue.js code for security vulnerabilities.",
        body="You review code for injection and XSS.\n",
    )
    (directory / "README.md").write_text("# Catalog\n", encoding="utf-8")
    return directory
