"""Common CLI options for the CLI."""

import typer

from pgops.core.grants import DEFAULT_EVENT_TRIGGER, DEFAULT_READONLY_ROLE

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="libpq service name (from ~/.pg_service.conf)",
)

DsnOpt = typer.Option(
    None,
    "--dsn",
    envvar="PGOPS_DSN",
    help="Connection string or URL (PG* environment variables also apply)",
)

RoleOpt = typer.Option(
    DEFAULT_READONLY_ROLE,
    "--role",
    "-r",
    envvar="PGOPS_READONLY_ROLE",
    help="Read-only role to grant",
)

TriggerNameOpt = typer.Option(
    DEFAULT_EVENT_TRIGGER,
    "--name",
    envvar="PGOPS_EVENT_TRIGGER",
    help="Event trigger name",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show what would change, but do nothing",
)

YesOpt = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt")

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log every statement (DEBUG level)",
)
