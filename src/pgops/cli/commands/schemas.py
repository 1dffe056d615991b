"""Commands for listing, creating and erasing schemas."""

from __future__ import annotations

import typer

from pgops.cli.common.context import PgAppContext, build_context
from pgops.cli.common.exits import exit_from_pgops_error, warn_exit
from pgops.cli.common.options import DryRunOpt, DsnOpt, ProfileOpt, RoleOpt, YesOpt
from pgops.cli.common.output import out
from pgops.core.errors import PgOpsError
from pgops.core.grants import ReadOnlyGrantPropagator, SchemaEvents
from pgops.core.schemas import erase_all_schemas, find_user_schemas

schemas_app = typer.Typer(
    help="Schema operations.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@schemas_app.callback()
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


@schemas_app.command("list")
def schemas_list(
    ctx: typer.Context,
    all_: bool = typer.Option(False, "--all", help="Include system schemas"),
):
    """List schemas in the current database."""
    appctx: PgAppContext = ctx.obj

    try:
        with out.status("Loading schemas..."):
            if all_:
                schemas = appctx.adapter.list_schemas()
            else:
                schemas = find_user_schemas(appctx.adapter)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action="list schemas")

    if not schemas:
        warn_exit("No schemas found.")

    out.header("Schemas")
    out.info(f"Database: {appctx.dbname} | Schemas: {len(schemas)}")
    out.schemas_table(schemas)


@schemas_app.command("erase-all")
def schemas_erase_all(
    ctx: typer.Context,
    dry_run: bool = DryRunOpt,
    yes: bool = YesOpt,
):
    """Drop every non-system schema and everything in it (CASCADE)."""
    appctx: PgAppContext = ctx.obj
    adapter = appctx.adapter

    try:
        with out.status("Building erase plan..."):
            plan = erase_all_schemas(adapter, dry_run=True)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action="list schemas")

    if not plan:
        warn_exit("No non-system schemas found.")

    out.header("Erase plan")
    out.kv({"Database": appctx.dbname, "Schemas to drop": len(plan)})
    out.schemas_table([r.schema for r in plan], title="Schemas to drop (CASCADE)")

    if dry_run:
        warn_exit("DRY RUN: no changes will be made.")

    if not yes:
        if not out.confirm_typed(
            "This irreversibly drops every schema listed above.", appctx.dbname
        ):
            warn_exit("Cancelled.")

    try:
        with out.status("Dropping schemas..."):
            results = erase_all_schemas(adapter, expected=[r.schema for r in plan])
    except PgOpsError as exc:
        exit_from_pgops_error(
            exc, action="erase schemas (rolled back, nothing was dropped)"
        )

    out.schema_drop_results_table(results)
    out.success(f"Dropped {len(results)} schema(s).")


@schemas_app.command("create")
def schemas_create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Schema name"),
    role: str = RoleOpt,
    grant: bool = typer.Option(
        True,
        "--grant/--no-grant",
        help="Grant the read-only role on the new schema in the same transaction",
    ),
):
    """Create a schema and propagate read-only grants to it."""
    appctx: PgAppContext = ctx.obj

    events = SchemaEvents()
    if grant:
        events.on_schema_created(ReadOnlyGrantPropagator(role))

    try:
        with out.status(f"Creating schema '{name}'..."):
            events.create_schema(appctx.adapter, name)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"create schema '{name}'")

    out.success(f"Schema '{name}' created.")
    if grant:
        out.info(f"Role '{role}' can read tables created in '{name}'.")
