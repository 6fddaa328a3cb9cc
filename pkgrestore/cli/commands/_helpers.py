"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from pkgrestore.core.errors import ErrorCode
from pkgrestore.core.result import Err, Result
from pkgrestore.output.errors import print_restore_error, restore_error_exit_code
from pkgrestore.packages.model import PartialPolicy

if TYPE_CHECKING:
    from pkgrestore.cli.context import CLIContext
    from pkgrestore.services.restore_errors import RestoreError

T = TypeVar("T")


def exit_on_error(result: Result[T, RestoreError], ctx: CLIContext) -> T:
    """Return the Ok value, or print the error and exit with its code.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(e):
                print_restore_error(e, ctx.console)
                raise typer.Exit(code=restore_error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        print_restore_error(result.error, ctx.console)
        raise typer.Exit(code=restore_error_exit_code(result.error))
    return result.value


def parse_policy(value: str | None, ctx: CLIContext) -> PartialPolicy | None:
    """Validate a --policy value; None when the option was not given."""
    if value is None:
        return None
    try:
        return PartialPolicy(value.strip().lower())
    except ValueError:
        ctx.console.error(f"Invalid --policy {value!r}: expected 'all' or 'any'")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR)) from None
