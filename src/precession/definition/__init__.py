"""
Session definitions.

This package provides the declarative session tree and its file loader:
- Session, Window and Pane models with defaulting and validation
- The Layout enumeration and its tmux names
- Definition file lookup, YAML decoding and directory listing
"""

from .loader import (
    DefinitionSummary,
    definitions_dir,
    find_definition_file,
    list_definitions,
    load_definition,
)
from .models import DEFAULT_LAYOUT, Layout, Pane, Session, Window, parse_definition

__all__ = [
    "DEFAULT_LAYOUT",
    "DefinitionSummary",
    "Layout",
    "Pane",
    "Session",
    "Window",
    "definitions_dir",
    "find_definition_file",
    "list_definitions",
    "load_definition",
    "parse_definition",
]
