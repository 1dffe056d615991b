"""Commands for read-only grants and the CREATE SCHEMA event trigger."""

from __future__ import annotations

import typer

from pgops.cli.common.context import PgAppContext, build_context
from pgops.cli.common.exits import exit_from_pgops_error, warn_exit
from pgops.cli.common.options import (
    DsnOpt,
    ProfileOpt,
    RoleOpt,
    TriggerNameOpt,
    YesOpt,
)
from pgops.cli.common.output import out
from pgops.core.errors import PgOpsError
from pgops.core.grants import (
    create_read_only_user,
    event_trigger_installed,
    grant_read_only,
    grant_state,
    install_event_trigger,
    uninstall_event_trigger,
)
from pgops.core.models import GrantTarget

grants_app = typer.Typer(
    help="Read-only grant operations.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@grants_app.callback()
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


@grants_app.command("apply")
def grants_apply(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name"),
    role: str = RoleOpt,
):
    """Grant USAGE and default SELECT on a schema to the read-only role."""
    appctx: PgAppContext = ctx.obj
    target = GrantTarget(schema=schema, role=role)

    try:
        with out.status("Granting..."):
            with appctx.adapter.transaction():
                grant_read_only(appctx.adapter, target)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"grant '{role}' on '{schema}'")

    out.success(f"Role '{role}' granted read-only access to '{schema}'.")


@grants_app.command("status")
def grants_status(
    ctx: typer.Context,
    schemas: list[str] = typer.Argument(..., help="Schema name(s)"),
    role: str = RoleOpt,
):
    """Show whether the read-only grant is applied on schemas."""
    appctx: PgAppContext = ctx.obj

    try:
        with out.status("Checking privileges..."):
            rows = [
                (t, grant_state(appctx.adapter, t))
                for t in (GrantTarget(schema=s, role=role) for s in schemas)
            ]
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action="read privileges")

    out.grants_table(rows)


@grants_app.command("trigger-install")
def grants_trigger_install(
    ctx: typer.Context,
    role: str = RoleOpt,
    name: str = TriggerNameOpt,
    yes: bool = YesOpt,
):
    """Install an event trigger granting the role on every new schema."""
    appctx: PgAppContext = ctx.obj

    out.kv({"Event trigger": name, "Role": role, "Fires on": "CREATE SCHEMA"})
    if not yes:
        if not out.confirm("Install the event trigger (requires superuser)?"):
            warn_exit("Cancelled.")

    try:
        with out.status("Installing event trigger..."):
            install_event_trigger(appctx.adapter, role, name=name)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"install event trigger '{name}'")

    out.success(f"Event trigger '{name}' installed.")


@grants_app.command("trigger-uninstall")
def grants_trigger_uninstall(
    ctx: typer.Context,
    name: str = TriggerNameOpt,
):
    """Remove the event trigger and its function."""
    appctx: PgAppContext = ctx.obj

    try:
        if not event_trigger_installed(appctx.adapter, name=name):
            warn_exit(f"Event trigger '{name}' is not installed.")
        uninstall_event_trigger(appctx.adapter, name=name)
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"remove event trigger '{name}'")

    out.success(f"Event trigger '{name}' removed.")


@grants_app.command("setup-user")
def grants_setup_user(
    ctx: typer.Context,
    role: str = typer.Argument(..., help="Login role to create"),
    schemas: list[str] = typer.Option(
        ..., "--schema", "-s", help="Schema to grant (repeatable)"
    ),
    password: str = typer.Option(
        ...,
        "--password",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        envvar="PGOPS_READONLY_PASSWORD",
        help="Password for the new role",
    ),
    revoke_public: bool = typer.Option(
        True,
        "--revoke-public-create/--keep-public-create",
        help="Revoke CREATE on schema public from PUBLIC",
    ),
):
    """Create a read-only login role with SELECT on the given schemas."""
    appctx: PgAppContext = ctx.obj

    try:
        with out.status(f"Creating role '{role}'..."):
            targets = create_read_only_user(
                appctx.adapter,
                role,
                password,
                schemas,
                revoke_public_create=revoke_public,
            )
    except PgOpsError as exc:
        exit_from_pgops_error(exc, action=f"create read-only user '{role}'")

    out.success(f"Read-only user '{role}' created for {len(targets)} schema(s).")
