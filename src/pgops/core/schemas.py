"""Schema enumeration and erasure.

``erase_all_schemas`` drops every non-system schema of the current
database together with everything it contains. Enumeration and the drops
run in one transaction: if any drop fails the whole transaction is rolled
back, nothing is dropped, and the error propagates. Partial erasure is
never left behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol

from pgops.core.errors import PgOpsError, PlanMismatchError
from pgops.core.models import SchemaDescriptor

logger = logging.getLogger(__name__)

SYSTEM_SCHEMAS = frozenset({"information_schema"})
SYSTEM_SCHEMA_PREFIX = "pg_"


class SchemaAdapter(Protocol):
    """Interface for listing and dropping schemas."""

    def transaction(self): ...

    def list_schemas(self) -> list[SchemaDescriptor]: ...

    def drop_schema(self, schema: str, *, cascade: bool = True) -> None: ...


@dataclass(frozen=True)
class SchemaDropResult:
    """One schema of an erase; ``dropped`` is False on a dry run."""

    schema: str
    dropped: bool = False


def is_system_schema(name: str) -> bool:
    """
    Return True for schemas owned by PostgreSQL itself.

    PostgreSQL reserves the ``pg_`` prefix (pg_catalog, pg_toast,
    pg_temp_N, pg_toast_temp_N); information_schema is the only other
    built-in. User schemas that merely contain ``pg_`` are not system.
    """
    return name in SYSTEM_SCHEMAS or name.startswith(SYSTEM_SCHEMA_PREFIX)


def find_user_schemas(adapter: SchemaAdapter) -> list[SchemaDescriptor]:
    """Return every non-system schema, in catalog order."""
    return [s for s in adapter.list_schemas() if not is_system_schema(s.name)]


def erase_all_schemas(
    adapter: SchemaAdapter,
    *,
    dry_run: bool = False,
    expected: Iterable[str] | None = None,
) -> list[SchemaDropResult]:
    """
    Drop every non-system schema with CASCADE.

    Args:
        adapter: Catalog adapter bound to the target database.
        dry_run: Only enumerate; return the schemas that would be dropped.
        expected: Schema names the operator confirmed. If the enumeration
            inside the transaction differs, nothing is dropped.

    Returns:
        One SchemaDropResult per schema.

    Raises:
        PlanMismatchError: If ``expected`` differs from the schemas found.
        PgOpsError: On the first failing drop. The transaction is rolled
            back, so no schema has been dropped when this propagates.
    """
    if dry_run:
        schemas = find_user_schemas(adapter)
        return [SchemaDropResult(schema=s.name) for s in schemas]

    results: list[SchemaDropResult] = []
    with adapter.transaction():
        schemas = find_user_schemas(adapter)
        if expected is not None:
            _check_plan(schemas, expected)
        logger.info("erasing %d schema(s)", len(schemas))
        for s in schemas:
            try:
                adapter.drop_schema(s.name, cascade=True)
            except PgOpsError:
                logger.error(
                    "drop of schema '%s' failed; rolling back %d earlier drop(s)",
                    s.name,
                    len(results),
                )
                raise
            results.append(SchemaDropResult(schema=s.name, dropped=True))
    return results


def _check_plan(schemas: list[SchemaDescriptor], expected: Iterable[str]) -> None:
    found = {s.name for s in schemas}
    confirmed = set(expected)
    if found == confirmed:
        return
    added = sorted(found - confirmed)
    gone = sorted(confirmed - found)
    raise PlanMismatchError(
        "Schemas changed since the plan was confirmed "
        f"(new: {', '.join(added) or '-'}; gone: {', '.join(gone) or '-'}). "
        "Nothing was dropped; re-run to review the new plan."
    )
