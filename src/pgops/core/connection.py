"""Connection helpers for PostgreSQL.

This module centralizes creation of a psycopg connection and applies
small but important normalization rules (such as accepting SQLAlchemy
style URLs) so every command connects the same way.
"""

from __future__ import annotations

import logging
import re

import psycopg
from psycopg.conninfo import make_conninfo

from pgops.core.errors import ConnectError

logger = logging.getLogger(__name__)

_SQLALCHEMY_PREFIX = re.compile(r"^postgres(?:ql)?\+[a-z0-9_]+://", re.IGNORECASE)


def _format_connect_error(message: str, profile: str | None) -> str:
    """Return a user-friendly connection error message."""
    if "password authentication failed" in message:
        where = f"service '{profile}'" if profile else "the connection"
        return (
            "PostgreSQL authentication failed. Check the password for "
            f"{where} (~/.pgpass or PGPASSWORD)."
        )
    if profile and "definition of service" in message:
        return (
            f"Unknown service '{profile}'. Define it in ~/.pg_service.conf "
            "or point PGSERVICEFILE at your service file."
        )
    return f"PostgreSQL connection failed: {message.strip()}"


def _sanitize_dsn(dsn: str | None) -> str:
    """
    Normalize a DSN.

    - Accepts SQLAlchemy-style URLs ('postgresql+psycopg://...')
    - Strips surrounding whitespace

    Anything else (libpq key/value strings, plain URLs) passes through.
    """
    if not dsn:
        return ""
    dsn = dsn.strip()
    return _SQLALCHEMY_PREFIX.sub("postgresql://", dsn, count=1)


def build_conninfo(profile: str | None = None, dsn: str | None = None) -> str:
    """Combine a libpq service name (profile) and a DSN into one conninfo."""
    base = _sanitize_dsn(dsn)
    if profile:
        return make_conninfo(base, service=profile)
    return make_conninfo(base)


def get_connection(
    profile: str | None = None, dsn: str | None = None
) -> psycopg.Connection:
    """
    Open and return a psycopg connection in autocommit mode.

    If a profile is provided, it is resolved as a libpq service from
    ~/.pg_service.conf; standard PG* environment variables are honoured.
    Operations open explicit transactions with ``conn.transaction()``.
    """
    try:
        conninfo = build_conninfo(profile, dsn)
    except psycopg.ProgrammingError as exc:
        raise ConnectError(f"Invalid connection string: {exc}") from exc

    try:
        conn = psycopg.connect(conninfo, autocommit=True)
    except psycopg.OperationalError as exc:
        raise ConnectError(_format_connect_error(str(exc), profile)) from exc

    logger.debug("connected to %s", conn.info.dbname)
    return conn
