"""
devagents.persona - Persona documents: models, loading, validation, registry, rendering.
"""

from .loader import PersonaLoader, load_persona, parse_persona
from .models import ModelTier, PersonaDocument, PersonaMetadata, PersonaMetadataModel
from .registry import PersonaRegistry, SearchHit, get_registry, reset_registry
from .templating import render_catalog, render_persona, render_system_prompt, scaffold_persona
from .validator import Severity, ValidationIssue, ValidationReport, validate_file, validate_paths, validate_text

__all__ = [
    "ModelTier",
    "PersonaDocument",
    "PersonaLoader",
    "PersonaMetadata",
    "PersonaMetadataModel",
    "PersonaRegistry",
    "SearchHit",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "get_registry",
    "load_persona",
    "parse_persona",
    "render_catalog",
    "render_persona",
    "render_system_prompt",
    "reset_registry",
    "scaffold_persona",
    "validate_file",
    "validate_paths",
    "validate_text",
]
