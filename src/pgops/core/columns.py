"""Lower-casing of textual columns.

Only columns whose declared type is text, character or character varying
are touched. NULL stays NULL (``lower(NULL)`` is NULL), running twice
gives the same result as running once, and a table that does not exist
simply has no matching columns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from pgops.core.models import ColumnDescriptor

logger = logging.getLogger(__name__)


class ColumnAdapter(Protocol):
    """Interface for listing textual columns and rewriting them."""

    def transaction(self): ...

    def list_text_columns(self, schema: str, table: str) -> list[ColumnDescriptor]: ...

    def lowercase_column(self, column: ColumnDescriptor) -> int: ...


@dataclass(frozen=True)
class ColumnLowercaseResult:
    """Result for one column; rows_updated is None on a dry run."""

    schema: str
    table: str
    column: str
    rows_updated: int | None = None


def find_text_columns(
    adapter: ColumnAdapter, schema: str, table: str
) -> list[ColumnDescriptor]:
    """Return the text/char/varchar columns of schema.table."""
    return adapter.list_text_columns(schema, table)


def lowercase_text_columns(
    adapter: ColumnAdapter,
    schema: str,
    table: str,
    *,
    dry_run: bool = False,
) -> list[ColumnLowercaseResult]:
    """
    Rewrite every value of every textual column of schema.table to lower case.

    All updates run in one transaction together with the column lookup;
    the first failure rolls everything back and propagates.
    """
    if dry_run:
        return [
            ColumnLowercaseResult(schema=c.schema, table=c.table, column=c.name)
            for c in find_text_columns(adapter, schema, table)
        ]

    results: list[ColumnLowercaseResult] = []
    with adapter.transaction():
        columns = find_text_columns(adapter, schema, table)
        if not columns:
            logger.info("no text columns in '%s.%s'; nothing to do", schema, table)
        for c in columns:
            updated = adapter.lowercase_column(c)
            results.append(
                ColumnLowercaseResult(
                    schema=c.schema, table=c.table, column=c.name, rows_updated=updated
                )
            )
    return results
