#!/usr/bin/env python3
"""
mdbook-backlinks: mdBook preprocessor that inserts backlinks

Usage (invoked by mdBook, see [preprocessor.backlinks] in book.toml):
    mdbook-backlinks supports html    # Capability query, always succeeds
    mdbook-backlinks < input.json     # Process [context, book] from stdin
"""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

import click

from . import __version__ as BACKLINKS_VERSION

log = logging.getLogger(__name__)


def _handle_error(
    ctx: click.Context,
    error: Exception,
    fallback_message: str | None = None,
    exit_code: int = 1,
) -> NoReturn:
    """Report an error on stderr and exit.

    With --json-errors the error is written as a JSON object, otherwise as a
    single human-readable line.

    Args:
        ctx: Click context (obj["json_errors"] may be set).
        error: The exception that occurred.
        fallback_message: Message to use for exceptions from outside this package.
        exit_code: Exit code to use (default 1).
    """
    from .errors import BacklinksError, format_error_json

    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if isinstance(error, BacklinksError):
        if json_errors:
            click.echo(error.to_json(), err=True)
        else:
            click.echo(f"Error: {error.message}", err=True)
    else:
        message = fallback_message or str(error)
        if json_errors:
            click.echo(format_error_json("BACKLINKS_ERROR", message), err=True)
        else:
            click.echo(f"Error: {message}", err=True)

    sys.exit(exit_code)


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.version_option(version=BACKLINKS_VERSION, prog_name="mdbook-backlinks")
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="MDBOOK_BACKLINKS_QUIET",
    help="Suppress warnings, show only errors",
)
@click.pass_context
def cli(ctx: click.Context, json_errors: bool, quiet: bool):
    """A mdbook preprocessor which inserts backlinks.

    Without a subcommand, reads the [context, book] pair mdBook sends on
    stdin and writes the book with backlink sections added to stdout.
    """
    from ._logging import configure_logging, set_quiet_mode

    configure_logging()

    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors
    ctx.obj["quiet"] = quiet

    if quiet:
        set_quiet_mode(True)

    if ctx.invoked_subcommand is None:
        from .errors import BookDecodeError
        from .preprocessor import handle_preprocessing

        try:
            handle_preprocessing(sys.stdin, sys.stdout)
        except BookDecodeError as e:
            _handle_error(ctx, e)


@cli.command()
@click.argument("renderer")
def supports(renderer: str):
    """Check whether a renderer is supported by this preprocessor.

    Backlinks only edit markdown, so every renderer is supported.
    """
    log.debug("Renderer %r is supported", renderer)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
