"""
Session tree renderer.

Walks a session definition top-down and issues tmux control operations in
the one order that yields the declared state. tmux cannot create an empty
session, so every render starts with a placeholder window parked at a
sentinel index, builds the real windows at the base-index range, then kills
the placeholder and renumbers.
"""

from dataclasses import dataclass, field

from ..definition.models import Layout, Session, Window
from ..tmux.control import TmuxControl, window_target
from ..utils.logging import ControlOperationFailed, LogContext, get_logger, log_performance

logger = get_logger(__name__, LogContext.RENDER)

DEFAULT_BASE_INDEX = 1
PLACEHOLDER_INDEX = 999


@dataclass(frozen=True)
class PlaceholderWindow:
    """The throwaway window a session is created with."""

    session: str
    index: int

    @property
    def target(self) -> str:
        return window_target(self.session, self.index)


@dataclass
class WindowTarget:
    """A rendered window and the index it is addressed by."""

    session: str
    index: int
    name: str | None
    layout: Layout
    pane_count: int

    @property
    def target(self) -> str:
        return window_target(self.session, self.index)


@dataclass
class RenderedSession:
    """Outcome of a completed render."""

    session_name: str
    windows: list[WindowTarget] = field(default_factory=list)
    attached: bool = False
    attach_target: str | None = None


class SessionRenderer:
    """Renders a Session definition into a live tmux session."""

    def __init__(
        self,
        control: TmuxControl,
        base_index: int = DEFAULT_BASE_INDEX,
        placeholder_index: int = PLACEHOLDER_INDEX,
        attach: bool = True,
    ):
        """Initialize the renderer.

        Args:
            control: tmux control interface to issue operations through
            base_index: Index of the first window after renumbering
            placeholder_index: Sentinel index for the placeholder window
            attach: Attach to the session once it is built
        """
        if placeholder_index <= base_index:
            raise ValueError(
                f"placeholder index {placeholder_index} must be above base index {base_index}"
            )
        self.control = control
        self.base_index = base_index
        self.placeholder_index = placeholder_index
        self.attach = attach

    @log_performance(LogContext.RENDER)
    def render(self, session: Session) -> RenderedSession:
        """Build the session described by a definition.

        Every operation is issued and completed before the next one. A
        failure propagates immediately and leaves whatever was already
        created in place.

        Raises:
            ControlOperationFailed: If tmux rejects any operation
        """
        logger.set_session_name(session.name)
        logger.info(
            "Rendering session",
            windows=len(session.windows),
            base_index=self.base_index,
        )

        placeholder = self.create(session)

        rendered = RenderedSession(session_name=session.name)
        for position, window in enumerate(session.windows):
            index = self.base_index + position
            rendered.windows.append(self.render_window(session, window, index))

        self.finalize(session, placeholder, rendered)

        logger.info("Session rendered", windows=len(rendered.windows))
        return rendered

    def create(self, session: Session) -> PlaceholderWindow:
        """Create the session with its placeholder window."""
        placeholder = PlaceholderWindow(session.name, self.placeholder_index)
        self.control.create_session(
            session.name,
            placeholder.index,
            root=session.root,
            base_index=self.base_index,
        )
        logger.debug("Session created", placeholder=placeholder.target)
        return placeholder

    def render_window(self, session: Session, window: Window, index: int) -> WindowTarget:
        """Create one window, its panes and their commands, then lay it out."""
        root = window.root or session.root
        rendered = WindowTarget(
            session=session.name,
            index=index,
            name=window.name,
            layout=window.layout,
            pane_count=max(len(window.pane_commands), 1),
        )
        target = rendered.target

        self.control.create_window(session.name, index, name=window.name, root=root)

        if window.cmd is not None:
            self.control.send_keys(target, window.cmd)

        for position, command in enumerate(window.pane_commands):
            # The window comes with its first pane
            if position > 0:
                self.control.split_pane(session.name, index, root=root)
            if command is not None:
                self.control.send_keys(target, command)

        # Layouts arrange the panes present when selected
        self.control.select_layout(target, window.layout.value)

        logger.debug(
            "Window rendered",
            target=target,
            window=window.name,
            layout=window.layout.value,
            panes=rendered.pane_count,
        )
        return rendered

    def finalize(
        self,
        session: Session,
        placeholder: PlaceholderWindow,
        rendered: RenderedSession,
    ) -> None:
        """Remove the placeholder, compact window indices and attach.

        Raises:
            ControlOperationFailed: If the session has no windows, since
                killing the placeholder ended it
        """
        self.control.kill_window(placeholder.target)

        if not session.windows:
            # tmux ends a session with its last window
            raise ControlOperationFailed(
                f"Session '{session.name}' has no windows; "
                "tmux ended it when the placeholder window was removed",
                operation="finalize",
                command=["kill-window", "-t", placeholder.target],
            )

        self.control.renumber_windows(session.name)

        attach_target = window_target(session.name, self.base_index)
        rendered.attach_target = attach_target
        if not self.attach:
            logger.info("Leaving session detached", target=attach_target)
            return

        self.control.attach(attach_target)
        rendered.attached = True
