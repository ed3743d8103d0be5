"""
tmux control interface.

Each primitive is one blocking round trip (or a short fixed series of them)
to the tmux server. Nothing is read back: callers address windows by the
indices they asked tmux to create them at.
"""

import os
import shutil
import subprocess  # nosec B404
from pathlib import Path

import libtmux
from libtmux import exc as libtmux_exc

from ..utils.logging import ControlOperationFailed
from .logging_utils import (
    log_control_operation,
    log_layout_setup,
    log_session_attach,
)


def window_target(session: str, index: int) -> str:
    """tmux target string for a window of a session."""
    return f"{session}:{index}"


def session_target(session: str) -> str:
    """tmux target string for a session's current window."""
    return f"{session}:"


class TmuxControl:
    """Issues control operations against a running tmux server."""

    def __init__(self, socket_name: str | None = None, socket_path: str | None = None):
        """Initialize tmux control.

        Args:
            socket_name: tmux socket name (``tmux -L``)
            socket_path: tmux socket path (``tmux -S``), overrides socket_name
        """
        self._socket_name = socket_name
        self._socket_path = socket_path
        self._server = libtmux.Server(socket_name=socket_name, socket_path=socket_path)

    def create_session(
        self,
        name: str,
        initial_window_index: int,
        root: Path | None = None,
        base_index: int = 1,
    ) -> None:
        """Create a detached session whose only window sits at a given index.

        The initial window is named after its index. The session's
        base-index option is set so later renumbering compacts from there.
        """
        args = ["new-session", "-d", "-s", name, "-n", str(initial_window_index)]
        if root is not None:
            args.extend(["-c", str(root)])
        self._run("create_session", *args)

        self._run("create_session", "set-option", "-t", name, "base-index", str(base_index))
        self._run(
            "create_session",
            "move-window",
            "-s",
            session_target(name),
            "-t",
            window_target(name, initial_window_index),
        )

    def create_window(
        self,
        session: str,
        index: int,
        name: str | None = None,
        root: Path | None = None,
    ) -> None:
        """Create a window at the given index of a session."""
        args = ["new-window", "-t", window_target(session, index)]
        if name:
            args.extend(["-n", name])
        if root is not None:
            args.extend(["-c", str(root)])
        self._run("create_window", *args)

    def split_pane(self, session: str, window_index: int, root: Path | None = None) -> None:
        """Split the active pane of a window; the new pane becomes active."""
        args = ["split-window", "-t", window_target(session, window_index)]
        if root is not None:
            args.extend(["-c", str(root)])
        self._run("split_pane", *args)

    def send_keys(self, target: str, text: str) -> None:
        """Type text into the target's active pane and press Enter."""
        # -l keeps text such as "Enter" or "C-c" from being read as key names
        self._run("send_keys", "send-keys", "-t", target, "-l", "--", text)
        self._run("send_keys", "send-keys", "-t", target, "Enter")

    def select_layout(self, target: str, layout_name: str) -> None:
        """Re-tile the panes of a window."""
        self._run("select_layout", "select-layout", "-t", target, layout_name)
        log_layout_setup(target, layout_name)

    def kill_window(self, target: str) -> None:
        """Destroy a window."""
        self._run("kill_window", "kill-window", "-t", target)

    def renumber_windows(self, session: str) -> None:
        """Compact a session's window indices starting at its base-index."""
        self._run("renumber_windows", "move-window", "-r", "-t", session_target(session))

    def attach(self, target: str) -> None:
        """Attach the terminal to a session, focused on the target window.

        From inside tmux the current client is switched instead, since
        attaching would nest sessions.
        """
        if os.environ.get("TMUX"):
            log_session_attach(target, switch_client=True)
            self._run("attach", "switch-client", "-t", target)
            return

        log_session_attach(target, switch_client=False)
        command = [shutil.which("tmux") or "tmux", *self._socket_args()]
        command.extend(["attach-session", "-t", target])
        log_control_operation("attach", command, "starting")

        try:
            # Inherits the terminal; returns once the client detaches
            completed = subprocess.run(command, check=False)  # nosec B603
        except OSError as e:
            log_control_operation("attach", command, "error", {"error": str(e)})
            raise ControlOperationFailed(
                f"Failed to run tmux attach-session: {e}",
                operation="attach",
                command=command,
            ) from e

        if completed.returncode != 0:
            log_control_operation(
                "attach", command, "error", {"returncode": completed.returncode}
            )
            raise ControlOperationFailed(
                f"tmux attach-session -t {target} exited with status {completed.returncode}",
                operation="attach",
                command=command,
                returncode=completed.returncode,
            )

    def _socket_args(self) -> list[str]:
        if self._socket_path:
            return ["-S", self._socket_path]
        if self._socket_name:
            return ["-L", self._socket_name]
        return []

    def _run(self, operation: str, *args: str) -> list[str]:
        """Run one tmux command, raising ControlOperationFailed on any error.

        Returns:
            Lines of stdout
        """
        log_control_operation(operation, args, "starting")

        try:
            result = self._server.cmd(*args)
        except (libtmux_exc.LibTmuxException, OSError) as e:
            log_control_operation(operation, args, "error", {"error": str(e)})
            raise ControlOperationFailed(
                f"Failed to run tmux {args[0]}: {e}",
                operation=operation,
                command=args,
            ) from e

        stderr = "\n".join(result.stderr).strip()
        if stderr or result.returncode:
            log_control_operation(
                operation, args, "error", {"stderr": stderr, "returncode": result.returncode}
            )
            raise ControlOperationFailed(
                f"tmux {args[0]} failed: {stderr or f'exit status {result.returncode}'}",
                operation=operation,
                command=args,
                stderr=stderr,
                returncode=result.returncode,
            )

        log_control_operation(operation, args, "success")
        return result.stdout
