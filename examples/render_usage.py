#!/usr/bin/env python3
"""
Example usage of precession as a library.

Builds a session definition in code, renders it detached on a private tmux
socket, then loads the same kind of definition from YAML.
"""

import sys
import tempfile
from pathlib import Path

from precession import Layout, Pane, Session, SessionRenderer, TmuxControl, Window, load_definition
from precession.utils.logging import LogLevel, PrecessionError, setup_logging

SOCKET_NAME = "precession-example"

EXAMPLE_YAML = """\
name: example-yaml
root: ~/
windows:
  - name: shell
  - name: monitor
    layout: main-vertical
    panes:
      - top
      - echo 'second pane'
      -
"""


def render_from_code(control: TmuxControl) -> None:
    """Render a session assembled from model objects."""
    print("=== Session from code ===")

    session = Session(
        name="example-code",
        root=Path.cwd(),
        windows=[
            Window(name="edit", cmd="echo 'editor would start here'"),
            Window(
                name="run",
                layout=Layout.EVEN_VERTICAL,
                panes=[Pane("echo 'server'"), Pane("echo 'tests'")],
            ),
        ],
    )

    rendered = SessionRenderer(control, attach=False).render(session)
    print(f"✓ Session '{rendered.session_name}' rendered")
    for window in rendered.windows:
        print(f"  {window.target}: {window.name} ({window.pane_count} panes, {window.layout})")
    print(f"  Attach with: tmux -L {SOCKET_NAME} attach -t {rendered.attach_target}")


def render_from_yaml(control: TmuxControl) -> None:
    """Render a session loaded from a YAML definition file."""
    print("\n=== Session from YAML ===")

    with tempfile.TemporaryDirectory() as directory:
        path = Path(directory) / "example.yaml"
        path.write_text(EXAMPLE_YAML)
        session = load_definition(path, default_layout=Layout.TILED)

    # base index 0 matches tmux's own default numbering
    rendered = SessionRenderer(control, base_index=0, attach=False).render(session)
    print(f"✓ Session '{rendered.session_name}' rendered")
    for window in rendered.windows:
        print(f"  {window.target}: {window.name} ({window.pane_count} panes, {window.layout})")


def main() -> int:
    setup_logging(log_level=LogLevel.INFO)
    control = TmuxControl(socket_name=SOCKET_NAME)

    try:
        render_from_code(control)
        render_from_yaml(control)
    except PrecessionError as e:
        print(f"✗ Error: {e}")
        return 1

    print(f"\nClean up with: tmux -L {SOCKET_NAME} kill-server")
    return 0


if __name__ == "__main__":
    sys.exit(main())
