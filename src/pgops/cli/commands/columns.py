from __future__ import annotations

import typer

from pgops.cli.common.context import PgAppContext, build_context
from pgops.cli.common.exits import exit_from_pgops_error, warn_exit
from pgops.cli.common.options import DryRunOpt, DsnOpt, ProfileOpt, YesOpt
from pgops.cli.common.output import out
from pgops.core.columns import find_text_columns, lowercase_text_columns
from pgops.core.errors import PgOpsError

columns_app = typer.Typer(
    help="Column data operations.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@columns_app.callback()
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


@columns_app.command("lowercase")
def columns_lowercase(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name"),
    table: str = typer.Argument(..., help="Table name"),
    dry_run: bool = DryRunOpt,
    yes: bool = YesOpt,
):
    """Lower-case every value of the text/char/varchar columns of a table."""
    appctx: PgAppContext = ctx.obj
    adapter = appctx.adapter

    try:
        with out.status("Loading columns..."):
            columns = find_text_columns(adapter, schema, table)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"read columns of '{schema}.{table}'")

    if not columns:
        warn_exit(f"No text columns in '{schema}.{table}'; nothing to do.")

    out.header("Text columns")
    out.text_columns_table(columns, title=f"{schema}.{table}")

    if dry_run:
        warn_exit("DRY RUN: no changes will be made.")

    if not yes:
        if not out.confirm("Rewrite all values of these columns to lower case?"):
            warn_exit("Cancelled.")

    try:
        with out.status("Updating rows..."):
            results = lowercase_text_columns(adapter, schema, table)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"lower-case '{schema}.{table}'")

    out.lowercase_results_table(results)
    total = sum(r.rows_updated or 0 for r in results)
    out.success(f"Lower-cased {len(results)} column(s), {total} row value(s) changed.")
