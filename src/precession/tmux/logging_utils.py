"""Logging utilities for tmux operations."""

from collections.abc import Sequence
from typing import Any

from ..utils.logging import LogContext, get_logger

tmux_logger = get_logger("precession.tmux", LogContext.TMUX)


def log_control_operation(
    operation: str,
    command: Sequence[str],
    status: str,
    context: dict[str, Any] | None = None,
) -> None:
    """Log a tmux control operation."""
    message = f"tmux {operation} {status} - {' '.join(command)}"
    if status == "error":
        tmux_logger.error(message, operation=operation, **(context or {}))
    else:
        tmux_logger.debug(message, operation=operation, **(context or {}))


def log_session_attach(target: str, switch_client: bool) -> None:
    """Log session attachment."""
    how = "switching client" if switch_client else "attaching"
    tmux_logger.info(f"Session attach - {target} ({how})", target=target)


def log_layout_setup(target: str, layout: str) -> None:
    """Log a window layout selection."""
    tmux_logger.debug(
        f"Layout applied - {target} (layout: {layout})",
        target=target,
        layout=layout,
    )
