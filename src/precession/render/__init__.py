"""Rendering session definitions into tmux."""

from .renderer import (
    DEFAULT_BASE_INDEX,
    PLACEHOLDER_INDEX,
    PlaceholderWindow,
    RenderedSession,
    SessionRenderer,
    WindowTarget,
)

__all__ = [
    "DEFAULT_BASE_INDEX",
    "PLACEHOLDER_INDEX",
    "PlaceholderWindow",
    "RenderedSession",
    "SessionRenderer",
    "WindowTarget",
]
