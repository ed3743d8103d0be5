"""Locating, reading and decoding session definition files."""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from ..utils.logging import (
    DefinitionNotFound,
    LogContext,
    MalformedDefinition,
    get_logger,
)
from .models import DEFAULT_LAYOUT, Layout, Session, parse_definition

logger = get_logger(__name__, LogContext.DEFINITION)

LOCAL_DEFINITION = Path(".session.yaml")
DEFINITION_SUFFIXES = (".yaml", ".yml")


@dataclass
class DefinitionSummary:
    """One entry in a listing of the definitions directory."""

    name: str
    path: Path
    session_name: str | None = None
    window_count: int | None = None
    error: str | None = None


def definitions_dir(configured: str | None = None) -> Path:
    """Directory holding per-session definition files.

    Uses the configured directory if given, otherwise
    ``$XDG_CONFIG_HOME/precession`` or ``~/.config/precession``.
    """
    if configured:
        return Path(configured).expanduser()

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home).expanduser() / "precession"
    return Path.home() / ".config" / "precession"


def find_definition_file(
    session_name: str | None = None,
    file: str | None = None,
    definitions_path: Path | None = None,
) -> Path:
    """Resolve which definition file to load.

    Lookup order:
    1. An explicitly supplied file
    2. ``<definitions dir>/<session_name>.yaml`` (or ``.yml``)
    3. ``./.session.yaml``

    Raises:
        DefinitionNotFound: If the resolved file does not exist
    """
    if file:
        path = Path(file).expanduser()
    elif session_name:
        directory = definitions_path or definitions_dir()
        candidates = [directory / f"{session_name}{suffix}" for suffix in DEFINITION_SUFFIXES]
        path = next((c for c in candidates if c.exists()), candidates[0])
    else:
        path = Path.cwd() / LOCAL_DEFINITION

    if not path.is_file():
        raise DefinitionNotFound(f"Session definition not found: {path}", path=path)

    logger.debug("Resolved session definition", path=str(path))
    return path


def load_definition(path: Path, default_layout: Layout = DEFAULT_LAYOUT) -> Session:
    """Read and decode a definition file.

    Raises:
        DefinitionNotFound: If the file cannot be read
        MalformedDefinition: If the file is not a valid definition
    """
    try:
        text = path.read_text()
    except OSError as e:
        raise DefinitionNotFound(
            f"Failed to read session definition {path}: {e.strerror or e}", path=path
        ) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedDefinition(
            f"Invalid YAML in session definition {path}: {e}", path=path
        ) from e

    session = parse_definition(data, default_layout=default_layout, source=path)
    logger.info(
        "Session definition loaded",
        path=str(path),
        session=session.name,
        windows=len(session.windows),
    )
    return session


def list_definitions(directory: Path) -> list[DefinitionSummary]:
    """Summarize every definition file in a directory, sorted by name."""
    if not directory.is_dir():
        logger.debug("Definitions directory does not exist", path=str(directory))
        return []

    summaries = []
    for path in sorted(directory.iterdir()):
        if path.suffix not in DEFINITION_SUFFIXES or not path.is_file():
            continue

        summary = DefinitionSummary(name=path.stem, path=path)
        try:
            session = load_definition(path)
            summary.session_name = session.name
            summary.window_count = len(session.windows)
        except (DefinitionNotFound, MalformedDefinition) as e:
            summary.error = e.message
        summaries.append(summary)

    return summaries
