"""Application context management for the CLI."""

from dataclasses import dataclass

import psycopg

from pgops.cli.common.exits import die
from pgops.core.adapters.postgres import PostgresAdapter
from pgops.core.connection import get_connection
from pgops.core.errors import ConnectError


@dataclass
class PgAppContext:
    """Application context holding the psycopg connection and catalog adapter."""

    profile: str | None
    conn: psycopg.Connection
    adapter: PostgresAdapter

    @property
    def dbname(self) -> str:
        return self.conn.info.dbname


def build_context(profile: str | None, dsn: str | None = None) -> PgAppContext:
    """Build and return the application context for database commands.

    Args:
        profile: Optional libpq service name to connect with.
        dsn: Optional connection string; combined with the profile if both are set.

    Returns:
        PgAppContext: Application context with an open connection and adapter.
    """
    try:
        conn = get_connection(profile, dsn)
    except ConnectError as exc:
        die(str(exc), code=1)
    return PgAppContext(profile=profile, conn=conn, adapter=PostgresAdapter(conn))
