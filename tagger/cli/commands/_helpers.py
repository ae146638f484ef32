"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from tagger.core.result import Err, Ok, Result
from tagger.output.errors import print_release_error, release_error_exit_code
from tagger.release.errors import ReleaseError

if TYPE_CHECKING:
    from tagger.cli.context import CLIContext

T = TypeVar("T")


def unwrap_or_exit(result: Result[T, ReleaseError], ctx: CLIContext) -> T:
    """Return the Ok value, or print the error and exit with its code.

    Replaces the common pattern:
        if isinstance(result, Err):
            ctx.console.error(result.error.message)
            raise typer.Exit(code=...)
    """
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))
    assert isinstance(result, Ok)
    return result.value
