"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from dbdiff.cli.common.output import out

# 0 = success (or no differences), 1 = runtime failure / differences with
# --fail-on-diff, 2 = invalid input.
EXIT_FAILURE = 1
EXIT_USAGE = 2


def ok_exit(msg: str | None = None) -> NoReturn:
    """Exit successfully with an optional informational message."""
    if msg:
        out.info(msg)
    raise typer.Exit(0)


def die(msg: str, code: int = EXIT_FAILURE) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(
    exc: Exception, *, message: str, code: int = EXIT_FAILURE
) -> NoReturn:
    """Print `message` and exit with `code`, chaining `exc`."""
    out.error(message)
    raise typer.Exit(code) from exc
