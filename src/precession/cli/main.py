"""Main CLI entry point for precession."""

import click

from .. import __version__
from ..definition.models import Layout
from .sessions import list_command, show, start


@click.group()
@click.version_option(version=__version__, prog_name="precession")
@click.option("--config", "-c", help="Configuration file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
# Configuration override flags
@click.option("--log-level", help="Override log_level setting")
@click.option("--base-index", type=int, help="Override base_index setting")
@click.option(
    "--default-layout",
    type=click.Choice([layout.value for layout in Layout]),
    help="Override default_layout setting",
)
@click.option("--socket-name", help="Override tmux_socket_name setting")
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    verbose: bool,
    quiet: bool,
    json: bool,
    log_level: str | None,
    base_index: int | None,
    default_layout: str | None,
    socket_name: str | None,
) -> None:
    """A simple tmux session starter.

    Start pre-defined tmux sessions easily and declaratively. Definitions
    are YAML files naming a session, its windows, and the panes and
    commands inside each window.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["json"] = json

    # Store CLI overrides for configuration
    ctx.obj["cli_overrides"] = {
        "log_level": log_level,
        "base_index": base_index,
        "default_layout": default_layout,
        "tmux_socket_name": socket_name,
    }
    # Remove None values
    ctx.obj["cli_overrides"] = {
        k: v for k, v in ctx.obj["cli_overrides"].items() if v is not None
    }

    if verbose and quiet:
        raise click.UsageError("Cannot use both --verbose and --quiet options")


main.add_command(start)
main.add_command(list_command)
main.add_command(show)


if __name__ == "__main__":
    main()
