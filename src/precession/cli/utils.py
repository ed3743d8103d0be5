"""CLI utilities for output formatting and common functionality."""

import json
import sys
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

import click

from ..config.loader import PrecessionConfig, load_config
from ..utils.logging import PrecessionError, setup_logging


def cause_chain(error: BaseException) -> list[str]:
    """First line of each chained cause of an error, outermost first."""
    causes = []
    cause = error.__cause__
    while cause is not None:
        text = str(cause).strip().splitlines()
        causes.append(f"{type(cause).__name__}: {text[0]}" if text else type(cause).__name__)
        cause = cause.__cause__
    return causes


def error_handler(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator for handling CLI errors."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except PrecessionError as e:
            click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
            for cause in cause_chain(e):
                click.echo(click.style(f"  caused by: {cause}", fg="red"), err=True)
            sys.exit(1)
        except Exception as e:
            click.echo(click.style(f"Unexpected error: {e}", fg="red"), err=True)
            sys.exit(1)

    return wrapper


def success_message(message: str) -> None:
    """Display a success message."""
    click.echo(click.style(f"✓ {message}", fg="green"))


def output_json(data: Any) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=2, default=str))


def output_table(headers: list[str], rows: list[list[str]]) -> None:
    """Output data as a formatted table."""
    if not rows:
        click.echo("No data to display")
        return

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(col_widths):
                col_widths[i] = max(col_widths[i], len(str(cell)))

    header_row = " | ".join(
        h.ljust(w) for h, w in zip(headers, col_widths, strict=False)
    )
    click.echo(header_row)
    click.echo("-" * len(header_row))

    for row in rows:
        formatted_row = " | ".join(
            str(cell).ljust(w) for cell, w in zip(row, col_widths, strict=False)
        )
        click.echo(formatted_row)


def verbose_echo(ctx: click.Context, message: str) -> None:
    """Echo message only if verbose mode is enabled."""
    if ctx.obj and ctx.obj.get("verbose"):
        click.echo(click.style(f"[VERBOSE] {message}", fg="blue"), err=True)


def quiet_echo(ctx: click.Context, message: str) -> None:
    """Echo message only if not in quiet mode."""
    if not (ctx.obj and ctx.obj.get("quiet")):
        click.echo(message)


def json_output(ctx: click.Context) -> bool:
    """Whether machine-readable output was requested."""
    return bool(ctx.obj and ctx.obj.get("json"))


def load_cli_config(ctx: click.Context) -> PrecessionConfig:
    """Load configuration for a command and set up logging from it."""
    obj = ctx.obj or {}
    config = load_config(obj.get("config"), obj.get("cli_overrides"))

    if obj.get("verbose"):
        log_level = "DEBUG"
    elif obj.get("quiet"):
        log_level = "ERROR"
    else:
        log_level = config.log_level

    setup_logging(
        log_level=log_level,
        log_file=Path(config.log_file).expanduser() if config.log_file else None,
        enable_structured=config.structured_logging,
    )
    return config
