"""
persona/registry.py
In-memory index of the persona library.

Usage:
    from devagents.persona.registry import get_registry

    registry = get_registry()
    doc = registry.get("rbac-architect")
    for hit in registry.search("celery retries"):
        print(hit.name, hit.score)
"""

from __future__ import annotations

import difflib
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from ..config.logging import get_logger
from ..errors import PersonaError, PersonaErrorCode, PersonaNotFoundError
from .loader import PersonaLoader
from .models import PersonaDocument, tokenize

logger = get_logger(__name__)

# Keyword scoring weights
EXACT_NAME_SCORE = 10.0
NAME_TOKEN_SCORE = 3.0
TAG_TOKEN_SCORE = 2.0
DESCRIPTION_TOKEN_SCORE = 2.0
BODY_TOKEN_SCORE = 0.5


@dataclass(slots=True, frozen=True)
class SearchHit:
    """A persona matched by keyword search."""

    document: PersonaDocument
    score: float
    matched: tuple[str, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.document.name

    def to_dict(self) -> dict:
        return {
            "name": self.document.name,
            "score": round(self.score, 2),
            "matched": list(self.matched),
            "description": self.document.description,
            "model": self.document.model,
        }


class PersonaRegistry:
    """
    Persona index for one directory.

    The directory is scanned lazily on first access; scan(refresh=True)
    re-reads it. Files that fail to load are kept in `failures` instead of
    aborting the scan.
    """

    def __init__(self, root: Path, *, loader: PersonaLoader | None = None) -> None:
        self.root = Path(root)
        self._loader = loader or PersonaLoader(self.root)
        self._personas: dict[str, PersonaDocument] = {}
        self._failures: dict[Path, PersonaError] = {}
        self._scanned = False
        self._lock = threading.Lock()

    # =========================================================================
    # Loading
    # =========================================================================

    def scan(self, refresh: bool = False) -> None:
        """Load the directory (once, unless refresh is set)."""
        with self._lock:
            if self._scanned and not refresh:
                return

            documents, failures = self._loader.load_all()
            personas: dict[str, PersonaDocument] = {}
            for doc in documents:
                existing = personas.get(doc.name)
                if existing is not None:
                    failures[doc.path] = PersonaError(
                        f"Duplicate persona name '{doc.name}' (first declared in {existing.path})",
                        code=PersonaErrorCode.DUPLICATE_PERSONA,
                        details={"name": doc.name, "first": str(existing.path)},
                    )
                    logger.warning(
                        "Duplicate persona name",
                        name=doc.name,
                        path=str(doc.path),
                        first=str(existing.path),
                    )
                    continue
                personas[doc.name] = doc

            self._personas = personas
            self._failures = failures
            self._scanned = True

        logger.debug("Scanned personas", root=str(self.root), count=len(personas))

    @property
    def failures(self) -> dict[Path, PersonaError]:
        self.scan()
        return dict(self._failures)

    # =========================================================================
    # Lookup
    # =========================================================================

    def names(self) -> list[str]:
        self.scan()
        return sorted(self._personas)

    def list(self) -> list[PersonaDocument]:
        """All personas sorted by name."""
        self.scan()
        return [self._personas[name] for name in sorted(self._personas)]

    def get(self, name: str) -> PersonaDocument:
        """Get a persona by name.

        Raises:
            PersonaNotFoundError: with close matches in `suggestions`
        """
        self.scan()
        try:
            return self._personas[name]
        except KeyError:
            suggestions = difflib.get_close_matches(name, list(self._personas), n=3, cutoff=0.5)
            raise PersonaNotFoundError(name, suggestions=suggestions) from None

    def __contains__(self, name: object) -> bool:
        self.scan()
        return name in self._personas

    def __len__(self) -> int:
        self.scan()
        return len(self._personas)

    def __iter__(self) -> Iterator[PersonaDocument]:
        return iter(self.list())

    # =========================================================================
    # Search
    # =========================================================================

    def search(self, query: str, limit: int = 5) -> list[SearchHit]:
        """Keyword search over names, tags, descriptions and bodies."""
        tokens = list(dict.fromkeys(tokenize(query)))
        if limit <= 0 or not tokens:
            return []

        normalized_query = query.strip().lower()
        hits: list[SearchHit] = []
        for doc in self.list():
            score, matched = _score(doc, tokens, normalized_query)
            if score > 0:
                hits.append(SearchHit(document=doc, score=score, matched=tuple(matched)))

        hits.sort(key=lambda hit: (-hit.score, hit.name))
        return hits[:limit]


def _score(doc: PersonaDocument, tokens: list[str], query: str) -> tuple[float, list[str]]:
    name_tokens = set(tokenize(doc.name))
    tag_tokens = {token for tag in doc.metadata.tags for token in tokenize(tag)}
    description_tokens = set(tokenize(doc.description))
    body_tokens = set(tokenize(doc.body))

    score = EXACT_NAME_SCORE if query == doc.name else 0.0
    matched: list[str] = []
    for token in tokens:
        token_score = 0.0
        if token in name_tokens:
            token_score += NAME_TOKEN_SCORE
        if token in tag_tokens:
            token_score += TAG_TOKEN_SCORE
        if token in description_tokens:
            token_score += DESCRIPTION_TOKEN_SCORE
        if token in body_tokens:
            token_score += BODY_TOKEN_SCORE
        if token_score:
            matched.append(token)
            score += token_score
    return score, matched


# =============================================================================
# Process-wide registry
# =============================================================================

_registry: PersonaRegistry | None = None
_registry_lock = threading.Lock()


def get_registry(root: Path | None = None) -> PersonaRegistry:
    """Get the registry for `root` (default: the configured agents directory)."""
    global _registry
    from ..config.dirs import AGENTS_DIR

    target = Path(root) if root is not None else AGENTS_DIR()
    with _registry_lock:
        if _registry is None or _registry.root != target:
            _registry = PersonaRegistry(target)
        return _registry


def reset_registry() -> None:
    """Drop the cached registry. Useful for testing."""
    global _registry
    with _registry_lock:
        _registry = None


__all__ = [
    "PersonaRegistry",
    "SearchHit",
    "get_registry",
    "reset_registry",
]
