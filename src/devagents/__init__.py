"""
devagents - Persona library for Django/Vue.js development agents.

Each agent is a Markdown document with YAML frontmatter (name, description,
model) that steers an AI assistant's tone and domain focus. This package loads,
validates, indexes and renders those documents.
"""

__version__ = "0.3.0"

from .errors import PersonaError
from .persona import PersonaDocument, PersonaRegistry, get_registry, load_persona, validate_paths

__all__ = [
    "PersonaDocument",
    "PersonaError",
    "PersonaRegistry",
    "__version__",
    "get_registry",
    "load_persona",
    "validate_paths",
]
