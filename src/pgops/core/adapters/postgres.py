from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

import psycopg
from psycopg import errors as pg_errors
from psycopg import sql

from pgops.core.errors import CatalogReadError, ExecutionError, PermissionDeniedError
from pgops.core.identifiers import ident, ident_for_body
from pgops.core.models import (
    ColumnDescriptor,
    ColumnInfo,
    PrimaryKeyColumn,
    SchemaDescriptor,
    TableDescriptor,
    TextType,
    ViewDescriptor,
)

logger = logging.getLogger(__name__)

_LIST_SCHEMAS = """
SELECT n.nspname, pg_get_userbyid(n.nspowner)
FROM pg_namespace n
"""

_LIST_TEXT_COLUMNS = """
SELECT column_name, data_type
FROM information_schema.columns
WHERE table_schema = %s
  AND table_name = %s
  AND data_type = ANY(%s)
  AND is_generated = 'NEVER'
ORDER BY ordinal_position
"""

_LIST_TABLES = """
SELECT table_name, table_type
FROM information_schema.tables
WHERE table_schema = %s AND table_type = 'BASE TABLE'
ORDER BY table_name
"""

_LIST_COLUMNS = """
SELECT column_name, data_type, is_nullable, ordinal_position
FROM information_schema.columns
WHERE table_schema = %s AND table_name = %s
ORDER BY ordinal_position
"""

_PRIMARY_KEY = """
SELECT a.attname, format_type(a.atttypid, a.atttypmod)
FROM pg_index i
JOIN pg_class c ON c.oid = i.indrelid
JOIN pg_namespace n ON n.oid = c.relnamespace
JOIN pg_attribute a ON a.attrelid = c.oid AND a.attnum = ANY(i.indkey)
WHERE n.nspname = %s AND c.relname = %s AND i.indisprimary
ORDER BY array_position(i.indkey::int2[], a.attnum)
"""

_LIST_VIEWS = """
SELECT schemaname, viewname
FROM pg_catalog.pg_views
WHERE schemaname NOT IN ('pg_catalog', 'information_schema')
ORDER BY schemaname, viewname
"""

_ROLE_EXISTS = "SELECT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = %s)"

_SCHEMA_EXISTS = "SELECT EXISTS (SELECT 1 FROM pg_namespace WHERE nspname = %s)"

_SCHEMA_USAGE = "SELECT has_schema_privilege(%s, %s, 'USAGE')"

_DEFAULT_SELECT = """
SELECT EXISTS (
    SELECT 1
    FROM pg_default_acl d
    JOIN pg_namespace n ON n.oid = d.defaclnamespace
    CROSS JOIN LATERAL aclexplode(d.defaclacl) a
    JOIN pg_roles r ON r.oid = a.grantee
    WHERE n.nspname = %s
      AND r.rolname = %s
      AND d.defaclobjtype = 'r'
      AND a.privilege_type = 'SELECT'
)
"""

_EVENT_TRIGGER_EXISTS = "SELECT EXISTS (SELECT 1 FROM pg_event_trigger WHERE evtname = %s)"

# Only the schema(s) created by the firing command are granted; the role name
# is a string literal formatted with %I at run time.
_EVENT_TRIGGER_FUNCTION = """
CREATE OR REPLACE FUNCTION {function}()
    RETURNS event_trigger
    LANGUAGE plpgsql
AS $pgops$
DECLARE
    obj record;
BEGIN
    FOR obj IN
        SELECT object_identity
        FROM pg_event_trigger_ddl_commands()
        WHERE command_tag = 'CREATE SCHEMA'
    LOOP
        EXECUTE format('GRANT USAGE ON SCHEMA %s TO %I', obj.object_identity, {role});
        EXECUTE format(
            'ALTER DEFAULT PRIVILEGES IN SCHEMA %s GRANT SELECT ON TABLES TO %I',
            obj.object_identity,
            {role}
        );
    END LOOP;
END;
$pgops$
"""


class PostgresAdapter:
    """Adapter around a psycopg connection (catalog reads, DDL/DML execution)."""

    def __init__(self, conn: psycopg.Connection) -> None:
        self.conn = conn

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed statements in one transaction (rolled back on error)."""
        with self.conn.transaction():
            yield

    def _fetch(self, query: Any, params: Sequence[Any], *, what: str) -> list[tuple]:
        """Run a catalog query and return all rows."""
        logger.debug("catalog read: %s", what)
        try:
            return self.conn.execute(query, params).fetchall()
        except pg_errors.InsufficientPrivilege as exc:
            raise PermissionDeniedError(f"No permission to read {what}: {exc}") from exc
        except psycopg.Error as exc:
            raise CatalogReadError(f"Failed to read {what}: {exc}") from exc

    def _execute(self, query: sql.Composable, *, what: str) -> int:
        """Run one DDL/DML statement and return its rowcount."""
        logger.info("executing: %s", what)
        try:
            cur = self.conn.execute(query)
        except pg_errors.InsufficientPrivilege as exc:
            raise PermissionDeniedError(f"No permission to {what}: {exc}") from exc
        except psycopg.Error as exc:
            raise ExecutionError(f"Failed to {what}: {exc}") from exc
        return cur.rowcount

    # -- catalog reads -------------------------------------------------

    def list_schemas(self) -> list[SchemaDescriptor]:
        """List every schema in the current database (system ones included)."""
        rows = self._fetch(_LIST_SCHEMAS, (), what="schemas")
        return [SchemaDescriptor(name=name, owner=owner) for name, owner in rows]

    def list_text_columns(self, schema: str, table: str) -> list[ColumnDescriptor]:
        """List writable text columns of schema.table (empty if it doesn't exist).

        Generated columns are skipped; they are recomputed from their base columns.
        """
        types = [t.value for t in TextType]
        rows = self._fetch(
            _LIST_TEXT_COLUMNS,
            (schema, table, types),
            what=f"columns of '{schema}.{table}'",
        )
        return [
            ColumnDescriptor(
                schema=schema, table=table, name=name, data_type=TextType(data_type)
            )
            for name, data_type in rows
        ]

    def list_tables(self, schema: str) -> list[TableDescriptor]:
        """List base tables in a schema."""
        rows = self._fetch(_LIST_TABLES, (schema,), what=f"tables of '{schema}'")
        return [
            TableDescriptor(schema=schema, name=name, table_type=table_type)
            for name, table_type in rows
        ]

    def list_columns(self, schema: str, table: str) -> list[ColumnInfo]:
        """List all columns of schema.table in ordinal order."""
        rows = self._fetch(
            _LIST_COLUMNS, (schema, table), what=f"columns of '{schema}.{table}'"
        )
        return [
            ColumnInfo(
                name=name,
                data_type=data_type,
                nullable=(is_nullable == "YES"),
                position=position,
            )
            for name, data_type, is_nullable, position in rows
        ]

    def primary_key(self, schema: str, table: str) -> list[PrimaryKeyColumn]:
        """Return the primary-key columns of schema.table in key order."""
        rows = self._fetch(
            _PRIMARY_KEY, (schema, table), what=f"primary key of '{schema}.{table}'"
        )
        return [PrimaryKeyColumn(name=name, type=type_) for name, type_ in rows]

    def list_views(self) -> list[ViewDescriptor]:
        """List user-created views."""
        rows = self._fetch(_LIST_VIEWS, (), what="views")
        return [ViewDescriptor(schema=s, name=v) for s, v in rows]

    def role_exists(self, role: str) -> bool:
        rows = self._fetch(_ROLE_EXISTS, (role,), what=f"role '{role}'")
        return bool(rows[0][0])

    def schema_exists(self, schema: str) -> bool:
        rows = self._fetch(_SCHEMA_EXISTS, (schema,), what=f"schema '{schema}'")
        return bool(rows[0][0])

    def has_schema_usage(self, schema: str, role: str) -> bool:
        rows = self._fetch(
            _SCHEMA_USAGE, (role, schema), what=f"privileges of '{role}' on '{schema}'"
        )
        return bool(rows[0][0])

    def has_default_select(self, schema: str, role: str) -> bool:
        rows = self._fetch(
            _DEFAULT_SELECT,
            (schema, role),
            what=f"default privileges of '{schema}'",
        )
        return bool(rows[0][0])

    def event_trigger_exists(self, name: str) -> bool:
        rows = self._fetch(
            _EVENT_TRIGGER_EXISTS, (name,), what=f"event trigger '{name}'"
        )
        return bool(rows[0][0])

    # -- statements ----------------------------------------------------

    def drop_schema(self, schema: str, *, cascade: bool = True) -> None:
        """Drop a schema (and, with cascade, every object it contains)."""
        query = sql.SQL("DROP SCHEMA {schema}{cascade}").format(
            schema=ident(schema, kind="schema"),
            cascade=sql.SQL(" CASCADE" if cascade else ""),
        )
        self._execute(query, what=f"drop schema '{schema}'")

    def create_schema(self, schema: str) -> None:
        query = sql.SQL("CREATE SCHEMA {schema}").format(
            schema=ident(schema, kind="schema")
        )
        self._execute(query, what=f"create schema '{schema}'")

    def lowercase_column(self, column: ColumnDescriptor) -> int:
        """Lower-case every value of a column; returns the number of rows changed."""
        col = ident(column.name, kind="column")
        query = sql.SQL(
            "UPDATE {table} SET {col} = lower({col}) "
            "WHERE {col} IS DISTINCT FROM lower({col})"
        ).format(
            table=ident(column.schema, column.table, kind="table"),
            col=col,
        )
        return self._execute(
            query,
            what=f"lower-case '{column.schema}.{column.table}.{column.name}'",
        )

    def grant_schema_usage(self, schema: str, role: str) -> None:
        query = sql.SQL("GRANT USAGE ON SCHEMA {schema} TO {role}").format(
            schema=ident(schema, kind="schema"),
            role=ident(role, kind="role"),
        )
        self._execute(query, what=f"grant usage on '{schema}' to '{role}'")

    def grant_select_all_tables(self, schema: str, role: str) -> None:
        query = sql.SQL("GRANT SELECT ON ALL TABLES IN SCHEMA {schema} TO {role}").format(
            schema=ident(schema, kind="schema"),
            role=ident(role, kind="role"),
        )
        self._execute(query, what=f"grant select on tables in '{schema}' to '{role}'")

    def alter_default_select(self, schema: str, role: str) -> None:
        query = sql.SQL(
            "ALTER DEFAULT PRIVILEGES IN SCHEMA {schema} GRANT SELECT ON TABLES TO {role}"
        ).format(
            schema=ident(schema, kind="schema"),
            role=ident(role, kind="role"),
        )
        self._execute(
            query, what=f"alter default privileges in '{schema}' for '{role}'"
        )

    def revoke_public_create(self, schema: str = "public") -> None:
        query = sql.SQL("REVOKE CREATE ON SCHEMA {schema} FROM PUBLIC").format(
            schema=ident(schema, kind="schema")
        )
        self._execute(query, what=f"revoke create on '{schema}' from PUBLIC")

    def create_login_role(self, role: str, password: str) -> None:
        query = sql.SQL("CREATE USER {role} WITH PASSWORD {password}").format(
            role=ident(role, kind="role"),
            password=sql.Literal(password),
        )
        self._execute(query, what=f"create user '{role}'")

    def install_event_trigger(self, name: str, role: str) -> None:
        """Create (or replace) the grant function and its CREATE SCHEMA event trigger."""
        function = ident(ident_for_body(f"{name}_fn", kind="function"), kind="function")
        body = sql.SQL(_EVENT_TRIGGER_FUNCTION).format(
            function=function,
            role=sql.Literal(ident_for_body(role, kind="role")),
        )
        self._execute(body, what=f"create function '{name}_fn'")
        self._execute(
            sql.SQL("DROP EVENT TRIGGER IF EXISTS {name}").format(
                name=ident(name, kind="event trigger")
            ),
            what=f"drop event trigger '{name}'",
        )
        self._execute(
            sql.SQL(
                "CREATE EVENT TRIGGER {name} ON ddl_command_end "
                "WHEN TAG IN ('CREATE SCHEMA') EXECUTE FUNCTION {function}()"
            ).format(name=ident(name, kind="event trigger"), function=function),
            what=f"create event trigger '{name}'",
        )

    def uninstall_event_trigger(self, name: str) -> None:
        self._execute(
            sql.SQL("DROP EVENT TRIGGER IF EXISTS {name}").format(
                name=ident(name, kind="event trigger")
            ),
            what=f"drop event trigger '{name}'",
        )
        self._execute(
            sql.SQL("DROP FUNCTION IF EXISTS {function}()").format(
                function=ident(f"{name}_fn", kind="function")
            ),
            what=f"drop function '{name}_fn'",
        )
