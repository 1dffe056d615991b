"""Read-only grant propagation.

A read-only role gets, per schema:
  - USAGE on the schema
  - default privileges so every table created there later grants SELECT

Propagation is reactive. ``SchemaEvents`` is the in-process event
interface: listeners registered with ``on_schema_created`` run inside the
same transaction as the CREATE SCHEMA, so a failing listener (e.g. the
role does not exist) makes the schema creation itself fail. The
server-side alternative is a PostgreSQL event trigger installed with
``install_event_trigger``; it has the same coupling because event
triggers run inside the DDL command's transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol

from pgops.core.errors import ExecutionError
from pgops.core.models import GrantState, GrantTarget

logger = logging.getLogger(__name__)

DEFAULT_READONLY_ROLE = "readonly_user"
DEFAULT_EVENT_TRIGGER = "pgops_grant_readonly"


class GrantAdapter(Protocol):
    """Interface for schema creation and privilege statements."""

    def transaction(self): ...

    def create_schema(self, schema: str) -> None: ...

    def grant_schema_usage(self, schema: str, role: str) -> None: ...

    def alter_default_select(self, schema: str, role: str) -> None: ...

    def role_exists(self, role: str) -> bool: ...

    def schema_exists(self, schema: str) -> bool: ...

    def has_schema_usage(self, schema: str, role: str) -> bool: ...

    def has_default_select(self, schema: str, role: str) -> bool: ...


@dataclass(frozen=True)
class SchemaCreatedEvent:
    """Payload delivered to schema-created listeners."""

    schema: str


SchemaListener = Callable[[GrantAdapter, SchemaCreatedEvent], None]


def grant_read_only(adapter: GrantAdapter, target: GrantTarget) -> None:
    """Grant USAGE and default SELECT on target.schema to target.role."""
    adapter.grant_schema_usage(target.schema, target.role)
    adapter.alter_default_select(target.schema, target.role)
    logger.info("read-only grant applied: %s -> %s", target.schema, target.role)


def grant_state(adapter: GrantAdapter, target: GrantTarget) -> GrantState:
    """Return GRANT_APPLIED when both the usage and default-select grants exist.

    A missing role or schema has no grant.
    """
    if not adapter.role_exists(target.role) or not adapter.schema_exists(target.schema):
        return GrantState.NO_GRANT
    if adapter.has_schema_usage(target.schema, target.role) and adapter.has_default_select(
        target.schema, target.role
    ):
        return GrantState.GRANT_APPLIED
    return GrantState.NO_GRANT


class ReadOnlyGrantPropagator:
    """Schema-created listener granting a fixed read-only role."""

    def __init__(self, role: str = DEFAULT_READONLY_ROLE) -> None:
        self.role = role

    def __call__(self, adapter: GrantAdapter, event: SchemaCreatedEvent) -> None:
        grant_read_only(adapter, GrantTarget(schema=event.schema, role=self.role))


class SchemaEvents:
    """In-process registry of schema-created listeners."""

    def __init__(self) -> None:
        self._listeners: list[SchemaListener] = []

    def on_schema_created(self, listener: SchemaListener) -> SchemaListener:
        """Register a listener; returns it so this can be used as a decorator."""
        self._listeners.append(listener)
        return listener

    @property
    def listeners(self) -> tuple[SchemaListener, ...]:
        return tuple(self._listeners)

    def create_schema(self, adapter: GrantAdapter, schema: str) -> SchemaCreatedEvent:
        """
        Create a schema and notify every listener, all in one transaction.

        Raises:
            PgOpsError: If the CREATE or any listener fails; the schema is
                then not created.
        """
        event = SchemaCreatedEvent(schema=schema)
        with adapter.transaction():
            adapter.create_schema(schema)
            for listener in self._listeners:
                listener(adapter, event)
        return event


def install_event_trigger(
    adapter,
    role: str = DEFAULT_READONLY_ROLE,
    *,
    name: str = DEFAULT_EVENT_TRIGGER,
    check_role: bool = True,
) -> None:
    """
    Install the server-side CREATE SCHEMA event trigger for ``role``.

    Replaces an existing trigger of the same name. Requires superuser.
    """
    with adapter.transaction():
        if check_role and not adapter.role_exists(role):
            raise ExecutionError(
                f"Role '{role}' does not exist; every CREATE SCHEMA would fail."
            )
        adapter.install_event_trigger(name, role)
    logger.info("event trigger '%s' installed for role '%s'", name, role)


def uninstall_event_trigger(adapter, *, name: str = DEFAULT_EVENT_TRIGGER) -> None:
    """Drop the event trigger and its function (no-op if absent)."""
    with adapter.transaction():
        adapter.uninstall_event_trigger(name)
    logger.info("event trigger '%s' removed", name)


def event_trigger_installed(adapter, *, name: str = DEFAULT_EVENT_TRIGGER) -> bool:
    return adapter.event_trigger_exists(name)


def create_read_only_user(
    adapter,
    role: str,
    password: str,
    schemas: Iterable[str],
    *,
    revoke_public_create: bool = True,
) -> list[GrantTarget]:
    """
    Create a login role that can read every table in ``schemas``.

    For each schema: USAGE, SELECT on all existing tables, and default
    SELECT on future tables. Optionally revokes PUBLIC's CREATE on
    ``public`` first. Runs in one transaction.
    """
    targets = [GrantTarget(schema=s, role=role) for s in schemas]
    with adapter.transaction():
        if revoke_public_create:
            adapter.revoke_public_create("public")
        adapter.create_login_role(role, password)
        for target in targets:
            adapter.grant_schema_usage(target.schema, target.role)
            adapter.grant_select_all_tables(target.schema, target.role)
            adapter.alter_default_select(target.schema, target.role)
    logger.info("read-only user '%s' created for %d schema(s)", role, len(targets))
    return targets
