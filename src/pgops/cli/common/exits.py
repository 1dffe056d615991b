"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from pgops.cli.common.output import out
from pgops.core.errors import IdentifierError, PermissionDeniedError


def die(msg: str, code: int = 1) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = 1) -> NoReturn:
    """
    Helper function to print an error message and exit with a given code.

    Exists to satisfy pylint W0707 and to standardize error exits.
    """
    out.error(message)
    raise typer.Exit(code) from exc


def exit_from_pgops_error(exc: Exception, *, action: str) -> NoReturn:
    """Map a core error to a standard message and exit code."""
    if isinstance(exc, IdentifierError):
        exit_from_exc(exc, message=str(exc), code=2)
    if isinstance(exc, PermissionDeniedError):
        exit_from_exc(exc, message=f"Permission denied while trying to {action}: {exc}")
    exit_from_exc(exc, message=f"Could not {action}: {exc}")
