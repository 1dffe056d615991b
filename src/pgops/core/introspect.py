"""Read-only catalog introspection helpers."""

from __future__ import annotations

from pgops.core.models import ColumnInfo, PrimaryKeyColumn, TableDescriptor, ViewDescriptor


def list_tables(adapter, schema: str) -> list[TableDescriptor]:
    """Base tables in a schema, ordered by name."""
    return adapter.list_tables(schema)


def list_columns(adapter, schema: str, table: str) -> list[ColumnInfo]:
    return adapter.list_columns(schema, table)


def primary_key(adapter, schema: str, table: str) -> list[PrimaryKeyColumn]:
    """Primary-key columns in key order (empty if the table has none)."""
    return adapter.primary_key(schema, table)


def list_views(adapter, *, schema: str | None = None) -> list[ViewDescriptor]:
    """User views ordered by schema, then name; optionally one schema only."""
    views = adapter.list_views()
    if schema is None:
        return views
    return [v for v in views if v.schema == schema]
