"""precession: start pre-defined tmux sessions from declarative definitions."""

__version__ = "0.1.0"

from .definition import Layout, Pane, Session, Window, load_definition
from .render import SessionRenderer
from .tmux import TmuxControl

__all__ = [
    "Layout",
    "Pane",
    "Session",
    "SessionRenderer",
    "TmuxControl",
    "Window",
    "load_definition",
    "__version__",
]
