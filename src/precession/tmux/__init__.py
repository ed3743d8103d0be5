"""
tmux control for precession.

This package provides the control operations the session renderer issues:
- Session creation around a placeholder window
- Window creation, pane splitting and layout selection
- Startup command delivery through send-keys
- Placeholder removal, window renumbering and attaching
"""

from .control import TmuxControl, session_target, window_target

__all__ = [
    "TmuxControl",
    "session_target",
    "window_target",
]
