"""Safe SQL identifier construction.

Names coming from the catalog or from the command line are only ever
turned into SQL through psycopg.sql.Identifier, which quotes them. The
checks here reject names PostgreSQL could never have produced, so a bad
value fails before any statement is sent.
"""

from __future__ import annotations

from psycopg import sql

from pgops.core.errors import IdentifierError

# NAMEDATALEN - 1
MAX_IDENTIFIER_BYTES = 63


def validate_identifier(name: str, *, kind: str = "identifier") -> str:
    """Return ``name`` unchanged or raise IdentifierError."""
    if not isinstance(name, str) or not name:
        raise IdentifierError(f"Empty {kind} name.")
    if "\x00" in name:
        raise IdentifierError(f"Invalid {kind} name {name!r}: contains a NUL byte.")
    if len(name.encode("utf-8")) > MAX_IDENTIFIER_BYTES:
        raise IdentifierError(
            f"Invalid {kind} name {name!r}: longer than "
            f"{MAX_IDENTIFIER_BYTES} bytes."
        )
    return name


def ident(*parts: str, kind: str = "identifier") -> sql.Identifier:
    """Build a (possibly qualified) quoted identifier from validated parts."""
    return sql.Identifier(*(validate_identifier(p, kind=kind) for p in parts))


def ident_for_body(name: str, *, kind: str = "identifier") -> str:
    """Validate a name that ends up inside a dollar-quoted function body."""
    validate_identifier(name, kind=kind)
    if "$" in name:
        raise IdentifierError(
            f"Invalid {kind} name {name!r}: '$' is not allowed in names "
            "embedded in a function body."
        )
    return name
