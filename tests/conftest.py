"""
Pytest configuration and shared fixtures for precession tests.
"""

import logging
import sys
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from precession.tmux.control import TmuxControl

PRECESSION_ENV_VARS = [
    "PRECESSION_BASE_INDEX",
    "PRECESSION_PLACEHOLDER_INDEX",
    "PRECESSION_DEFAULT_LAYOUT",
    "PRECESSION_DEFINITIONS_DIR",
    "PRECESSION_TMUX_SOCKET_NAME",
    "PRECESSION_TMUX_SOCKET_PATH",
    "PRECESSION_ATTACH",
    "PRECESSION_LOG_LEVEL",
    "PRECESSION_LOG_FILE",
    "PRECESSION_STRUCTURED_LOGGING",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the user's config, definitions and tmux out of every test."""
    for var in PRECESSION_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("TMUX", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def temp_log_file() -> Generator[Path, None, None]:
    """Provide a temporary log file for testing."""
    with tempfile.NamedTemporaryFile(suffix=".log", delete=False) as f:
        log_file = Path(f.name)

    yield log_file

    if log_file.exists():
        log_file.unlink()


@pytest.fixture
def reset_logging():
    """Reset logging configuration before each test."""
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(logging.NOTSET)

    yield

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


@pytest.fixture
def mock_control():
    """A tmux control double that records every operation in order."""
    return MagicMock(spec=TmuxControl)


@pytest.fixture
def dev_definition():
    """The dev session: one command window and one two-pane window."""
    return {
        "name": "dev",
        "windows": [
            {"name": "edit", "cmd": "vim"},
            {"name": "run", "panes": ["npm start", "npm test"]},
        ],
    }


@pytest.fixture
def definitions_path(tmp_path) -> Path:
    """The per-user definitions directory the isolated environment points at."""
    path = tmp_path / "xdg" / "precession"
    path.mkdir(parents=True)
    return path
