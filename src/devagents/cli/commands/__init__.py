"""
CLI command modules.

- persona.py: list, show, search, new
- validate.py: validate
- catalog.py: catalog
"""

from __future__ import annotations

from .base import agents_dir_from, registry_from
from .catalog import register_catalog_command
from .persona import register_persona_commands
from .validate import register_validate_command

__all__ = [
    "agents_dir_from",
    "register_catalog_command",
    "register_persona_commands",
    "register_validate_command",
    "registry_from",
]
