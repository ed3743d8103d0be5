"""
Session definition model.

A definition is a strict containment tree: a Session owns Windows, a Window
owns Panes. The models are frozen once validated; the renderer consumes them
as plain data.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from ..utils.logging import MalformedDefinition


class Layout(str, Enum):
    """Tiling arrangements tmux can apply to a window's panes."""

    TILED = "tiled"
    EVEN_HORIZONTAL = "even-horizontal"
    EVEN_VERTICAL = "even-vertical"
    MAIN_HORIZONTAL = "main-horizontal"
    MAIN_VERTICAL = "main-vertical"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, text: str) -> "Layout":
        """Decode a layout from its tmux name.

        Raises:
            MalformedDefinition: If the name is not a known layout
        """
        for layout in cls:
            if layout.value == text:
                return layout
        accepted = ", ".join(layout.value for layout in cls)
        raise MalformedDefinition(
            f"Unknown layout {text!r} (expected one of: {accepted})",
            context={"layout": text},
        )


DEFAULT_LAYOUT = Layout.EVEN_HORIZONTAL


def _expand_path(value: Any) -> Any:
    if isinstance(value, str):
        return Path(value).expanduser()
    if isinstance(value, Path):
        return value.expanduser()
    return value


class Pane(RootModel[str | None]):
    """A single pane, optionally running one startup command."""

    model_config = ConfigDict(frozen=True)

    root: str | None = None

    @property
    def command(self) -> str | None:
        return self.root


class Window(BaseModel):
    """A window within a session, running either a command or a set of panes."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    layout: Layout = Field(default=None, validate_default=True)
    root: Path | None = None
    cmd: str | None = None
    panes: list[Pane] | None = None

    @field_validator("layout", mode="before")
    @classmethod
    def _decode_layout(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            context = info.context or {}
            return context.get("default_layout", DEFAULT_LAYOUT)
        if isinstance(value, Layout):
            return value
        if not isinstance(value, str):
            raise ValueError(f"layout must be a string, got {type(value).__name__}")
        try:
            return Layout.from_string(value)
        except MalformedDefinition as e:
            # pydantic only collects ValueError into a ValidationError
            raise ValueError(e.message) from e

    @field_validator("root", mode="before")
    @classmethod
    def _expand_root(cls, value: Any) -> Any:
        return _expand_path(value)

    @model_validator(mode="after")
    def _check_cmd_or_panes(self) -> "Window":
        if self.cmd is not None and self.panes is not None:
            label = self.name or "<unnamed>"
            raise ValueError(
                f"window {label!r} declares both 'cmd' and 'panes'; use one or the other"
            )
        return self

    @property
    def pane_commands(self) -> list[str | None]:
        """Startup commands of the declared panes, in order."""
        return [pane.command for pane in self.panes or []]


SESSION_NAME_FORBIDDEN = ".:"


class Session(BaseModel):
    """A named tmux session and its windows."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    root: Path | None = None
    windows: list[Window] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        # tmux rewrites these to "_", so later targets would miss the session
        forbidden = [char for char in SESSION_NAME_FORBIDDEN if char in value]
        if forbidden:
            raise ValueError(
                f"session name {value!r} must not contain {' or '.join(map(repr, forbidden))}"
            )
        return value

    @field_validator("root", mode="before")
    @classmethod
    def _expand_root(cls, value: Any) -> Any:
        return _expand_path(value)

    @field_validator("windows", mode="before")
    @classmethod
    def _null_windows(cls, value: Any) -> Any:
        # "windows:" with nothing under it parses as null
        return [] if value is None else value

    def renamed(self, name: str) -> "Session":
        """Return a copy of this session under a different name.

        Raises:
            MalformedDefinition: If the name is not a valid session name
        """
        try:
            return Session.model_validate({**dict(self), "name": name})
        except ValidationError as e:
            raise MalformedDefinition(
                f"Invalid session name {name!r}: {_format_validation_error(e)}",
                context={"name": name},
            ) from e


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "<root>"
        problems.append(f"{location}: {detail['msg']}")
    return "; ".join(problems)


def parse_definition(
    data: Any,
    default_layout: Layout = DEFAULT_LAYOUT,
    source: Path | None = None,
) -> Session:
    """Decode a structured mapping into a Session tree.

    Args:
        data: Decoded document, normally the result of YAML loading
        default_layout: Layout for windows that do not declare one
        source: Path the document came from, for error messages

    Returns:
        Validated Session

    Raises:
        MalformedDefinition: If the document is not a valid session definition
    """
    where = f" in {source}" if source else ""
    if not isinstance(data, dict):
        raise MalformedDefinition(
            f"Session definition{where} must be a mapping, got {type(data).__name__}",
            path=source,
        )

    try:
        return Session.model_validate(
            data, context={"default_layout": default_layout}
        )
    except ValidationError as e:
        raise MalformedDefinition(
            f"Invalid session definition{where}: {_format_validation_error(e)}",
            path=source,
            context={"errors": e.error_count()},
        ) from e
