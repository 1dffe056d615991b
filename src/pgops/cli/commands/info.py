from __future__ import annotations

import typer

from pgops.cli.common.context import PgAppContext, build_context
from pgops.cli.common.exits import exit_from_pgops_error, warn_exit
from pgops.cli.common.options import DsnOpt, ProfileOpt
from pgops.cli.common.output import out
from pgops.core.errors import PgOpsError
from pgops.core.introspect import list_columns, list_tables, list_views, primary_key

info_app = typer.Typer(
    help="Catalog introspection.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@info_app.callback()
def _init(
    ctx: typer.Context,
    profile: str | None = ProfileOpt,
    dsn: str | None = DsnOpt,
):
    """Initialize database context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = build_context(profile, dsn)
    ctx.call_on_close(ctx.obj.conn.close)


@info_app.command("tables")
def info_tables(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name"),
):
    """List base tables in a schema."""
    appctx: PgAppContext = ctx.obj
    try:
        tables = list_tables(appctx.adapter, schema)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"list tables of '{schema}'")

    if not tables:
        warn_exit("No tables found.")
    out.tables_table(tables, title=f"Tables in {schema}")


@info_app.command("columns")
def info_columns(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name"),
    table: str = typer.Argument(..., help="Table name"),
):
    """List columns of a table."""
    appctx: PgAppContext = ctx.obj
    try:
        columns = list_columns(appctx.adapter, schema, table)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"list columns of '{schema}.{table}'")

    if not columns:
        warn_exit(f"Table '{schema}.{table}' not found or has no columns.")
    out.columns_table(columns, title=f"{schema}.{table}")


@info_app.command("pk")
def info_pk(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name"),
    table: str = typer.Argument(..., help="Table name"),
):
    """Show the primary-key columns (and types) of a table."""
    appctx: PgAppContext = ctx.obj
    try:
        columns = primary_key(appctx.adapter, schema, table)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"read primary key of '{schema}.{table}'")

    if not columns:
        warn_exit(f"No primary key on '{schema}.{table}'.")
    out.primary_key_table(columns, title=f"Primary key of {schema}.{table}")


@info_app.command("views")
def info_views(
    ctx: typer.Context,
    schema: str | None = typer.Option(None, "--schema", help="Only this schema"),
):
    """List user-created views."""
    appctx: PgAppContext = ctx.obj
    try:
        views = list_views(appctx.adapter, schema=schema)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action="list views")

    if not views:
        warn_exit("No views found.")
    out.views_table(views)
