"""CLI commands for starting and inspecting session definitions."""

import click
import yaml

from ..definition import (
    definitions_dir,
    find_definition_file,
    list_definitions,
    load_definition,
)
from ..render import RenderedSession, SessionRenderer
from ..tmux import TmuxControl
from .utils import (
    error_handler,
    json_output,
    load_cli_config,
    output_json,
    output_table,
    quiet_echo,
    success_message,
    verbose_echo,
)


def _rendered_to_dict(rendered: RenderedSession) -> dict:
    return {
        "session_name": rendered.session_name,
        "attached": rendered.attached,
        "attach_target": rendered.attach_target,
        "windows": [
            {
                "index": window.index,
                "name": window.name,
                "layout": window.layout.value,
                "panes": window.pane_count,
            }
            for window in rendered.windows
        ],
    }


@click.command()
@click.argument("session_name", required=False)
@click.argument("alias", required=False)
@click.option(
    "--file",
    "-f",
    "file",
    help="Definition file to load instead of looking one up by name",
)
@click.option(
    "--detach",
    "-d",
    is_flag=True,
    help="Build the session without attaching to it",
)
@click.pass_context
@error_handler
def start(
    ctx: click.Context,
    session_name: str | None,
    alias: str | None,
    file: str | None,
    detach: bool,
) -> None:
    """Start a new tmux session from its definition.

    SESSION_NAME: Definition to load from the definitions directory;
    ./.session.yaml is used when omitted

    ALIAS: Name for the tmux session if it should differ from the definition
    """
    config = load_cli_config(ctx)

    path = find_definition_file(
        session_name, file, definitions_dir(config.definitions_dir)
    )
    verbose_echo(ctx, f"Using definition {path}")

    session = load_definition(path, default_layout=config.layout)
    if alias:
        session = session.renamed(alias)

    control = TmuxControl(
        socket_name=config.tmux_socket_name, socket_path=config.tmux_socket_path
    )
    renderer = SessionRenderer(
        control,
        base_index=config.base_index,
        placeholder_index=config.placeholder_index,
        attach=config.attach and not detach,
    )
    rendered = renderer.render(session)

    if json_output(ctx):
        output_json(_rendered_to_dict(rendered))
    elif not rendered.attached and not (ctx.obj and ctx.obj.get("quiet")):
        success_message(
            f"Started session '{rendered.session_name}' "
            f"with {len(rendered.windows)} window(s)"
        )
        quiet_echo(ctx, f"Attach with: tmux attach -t {rendered.attach_target}")


@click.command(name="list")
@click.pass_context
@error_handler
def list_command(ctx: click.Context) -> None:
    """List the available session definitions."""
    config = load_cli_config(ctx)
    directory = definitions_dir(config.definitions_dir)
    summaries = list_definitions(directory)

    if json_output(ctx):
        output_json(
            {
                "definitions_dir": str(directory),
                "definitions": [
                    {
                        "name": s.name,
                        "path": str(s.path),
                        "session_name": s.session_name,
                        "windows": s.window_count,
                        "error": s.error,
                    }
                    for s in summaries
                ],
            }
        )
        return

    if not summaries:
        quiet_echo(ctx, f"No session definitions in {directory}")
        return

    rows = []
    for s in summaries:
        if s.error:
            rows.append([s.name, "-", "-", f"invalid: {s.error}"])
        else:
            rows.append([s.name, s.session_name or "", str(s.window_count), str(s.path)])
    output_table(["NAME", "SESSION", "WINDOWS", "PATH"], rows)


@click.command()
@click.argument("session_name", required=False)
@click.option("--file", "-f", "file", help="Definition file to show")
@click.pass_context
@error_handler
def show(ctx: click.Context, session_name: str | None, file: str | None) -> None:
    """Show a session definition with defaults filled in."""
    config = load_cli_config(ctx)
    path = find_definition_file(
        session_name, file, definitions_dir(config.definitions_dir)
    )
    session = load_definition(path, default_layout=config.layout)
    data = session.model_dump(mode="json", exclude_none=True)

    if json_output(ctx):
        output_json(data)
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False, default_flow_style=False), nl=False)
