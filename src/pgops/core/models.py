"""Core domain models for PostgreSQL catalog objects.

These models represent catalog entries in a simple, immutable form.
They are intentionally free of psycopg types and UI/CLI concerns, and
are never cached: every operation re-reads the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TextType(str, Enum):
    """Textual column types, as reported by information_schema.columns."""

    TEXT = "text"
    CHAR = "character"
    VARCHAR = "character varying"


class GrantState(str, Enum):
    """Read-only grant state of a schema for a given role."""

    NO_GRANT = "NO_GRANT"
    GRANT_APPLIED = "GRANT_APPLIED"


@dataclass(frozen=True)
class SchemaDescriptor:
    """Lightweight representation of a schema (pg_namespace row)."""

    name: str
    owner: str | None = None


@dataclass(frozen=True)
class ColumnDescriptor:
    """A textual column of a table."""

    schema: str
    table: str
    name: str
    data_type: TextType


@dataclass(frozen=True)
class GrantTarget:
    """Schema/role pair a read-only grant is applied to."""

    schema: str
    role: str


@dataclass(frozen=True)
class TableDescriptor:
    """Lightweight representation of a table (information_schema.tables row)."""

    schema: str
    name: str
    table_type: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.name}"


@dataclass(frozen=True)
class ColumnInfo:
    """Any column of a table, as listed by information_schema.columns."""

    name: str
    data_type: str
    nullable: bool
    position: int


@dataclass(frozen=True)
class PrimaryKeyColumn:
    """A primary-key column with its formatted type (e.g. ``integer``)."""

    name: str
    type: str


@dataclass(frozen=True)
class ViewDescriptor:
    """A user-created view."""

    schema: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.name}"
