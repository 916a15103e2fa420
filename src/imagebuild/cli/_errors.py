"""Error handling utilities for the CLI."""

from __future__ import annotations

import sys
import traceback
from typing import NoReturn

import click

from imagebuild.cli._common import Context
from imagebuild.exceptions import BackendConnectionError, ImageBuildError


def handle_error(e: ImageBuildError | OSError, ctx: Context) -> NoReturn:
    """
    Report a failed command and exit with a non-zero status.

    The error's own message is shown as is, so backend diagnostics reach
    the user unchanged.

    Args:
        e: The error that ended the command
        ctx: The CLI context
    """
    if isinstance(e, BackendConnectionError):
        show_current_config(ctx)
        click.echo("", err=True)

    if ctx.debug:
        click.echo("Stack trace:", err=True)
        traceback.print_exception(type(e), e, e.__traceback__, file=sys.stderr)
        click.echo("", err=True)
    elif not isinstance(e, ImageBuildError):
        click.echo(
            "For technical details and stack trace, run with --debug or set IMAGEBUILD_DEBUG=1",
            err=True,
        )

    if isinstance(e, ImageBuildError):
        raise click.ClickException(e.message)
    raise click.ClickException(f"File system error while preparing build request: {e}")


def show_current_config(ctx: Context) -> None:
    """
    Display current backend configuration with sources.

    Args:
        ctx: The CLI context
    """
    click.echo("Current configuration:", err=True)
    if ctx.endpoint:
        click.echo(f"  Endpoint: {ctx.endpoint} (from {ctx.endpoint_source})", err=True)
    else:
        click.echo("  Endpoint: not configured", err=True)
    click.echo(f"  Auth: {'Token' if ctx.token else 'None'}", err=True)
