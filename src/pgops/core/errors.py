"""Error taxonomy for PostgreSQL operations.

Every failure raised by the core layer is a PgOpsError. The underlying
psycopg error is always chained (``raise ... from exc``) so the database
message stays visible to the caller; the wrapper only adds which schema,
table or column was being processed.
"""


class PgOpsError(RuntimeError):
    """Base class for all pgops failures."""


class ConnectError(PgOpsError):
    """Raised when a database connection cannot be established."""


class CatalogReadError(PgOpsError):
    """Raised when a catalog (metadata) query fails."""


class IdentifierError(PgOpsError, ValueError):
    """Raised when a name cannot be safely used as an SQL identifier."""


class ExecutionError(PgOpsError):
    """Raised when a DDL/DML statement (drop, update, grant) fails."""


class PermissionDeniedError(ExecutionError):
    """Raised when the current role lacks the privilege for a statement."""


class PlanMismatchError(PgOpsError):
    """Raised when the catalog no longer matches a confirmed plan."""
