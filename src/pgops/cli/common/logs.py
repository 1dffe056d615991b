"""Logging setup for the CLI (rich handler on the shared console)."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from pgops.cli.common.output import console


def configure_logging(verbose: bool = False) -> None:
    """Route the ``pgops`` loggers through rich; DEBUG when verbose, else WARNING."""
    handler = RichHandler(
        console=console,
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger("pgops")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False
