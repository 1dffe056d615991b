from __future__ import annotations

import copy
import sys
from contextlib import contextmanager
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from pgops.core.errors import ExecutionError  # noqa: E402
from pgops.core.models import ColumnDescriptor, SchemaDescriptor, TextType  # noqa: E402


class FakeDatabase:
    """In-memory stand-in for PostgresAdapter with transactional rollback."""

    def __init__(
        self,
        schemas=("public",),
        roles=("readonly_user",),
    ):
        self.schemas: dict[str, str] = {s: "postgres" for s in schemas}
        self.tables: dict[tuple[str, str], dict] = {}
        self.roles: set[str] = set(roles)
        self.usage: set[tuple[str, str]] = set()
        self.default_select: set[tuple[str, str]] = set()
        self.fail_drop: set[str] = set()
        self.calls: list[str] = []
        self.rollbacks = 0

    def add_table(
        self,
        schema: str,
        table: str,
        columns: dict[str, str],
        rows: list[dict],
        generated: tuple[str, ...] = (),
    ):
        self.schemas.setdefault(schema, "postgres")
        self.tables[(schema, table)] = {
            "columns": dict(columns),
            "rows": rows,
            "generated": set(generated),
        }

    def _state(self):
        return (self.schemas, self.tables, self.usage, self.default_select)

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self._state())
        try:
            yield
        except Exception:
            self.schemas, self.tables, self.usage, self.default_select = snapshot
            self.rollbacks += 1
            raise

    def list_schemas(self):
        return [SchemaDescriptor(name=n, owner=o) for n, o in self.schemas.items()]

    def drop_schema(self, schema: str, *, cascade: bool = True) -> None:
        self.calls.append(f"drop_schema:{schema}")
        if schema in self.fail_drop:
            raise ExecutionError(f"Failed to drop schema '{schema}': lock timeout")
        del self.schemas[schema]
        for key in [k for k in self.tables if k[0] == schema]:
            del self.tables[key]

    def create_schema(self, schema: str) -> None:
        self.calls.append(f"create_schema:{schema}")
        if schema in self.schemas:
            raise ExecutionError(f'schema "{schema}" already exists')
        self.schemas[schema] = "postgres"

    def list_text_columns(self, schema: str, table: str):
        entry = self.tables.get((schema, table))
        if entry is None:
            return []
        text_types = {t.value for t in TextType}
        return [
            ColumnDescriptor(schema=schema, table=table, name=c, data_type=TextType(t))
            for c, t in entry["columns"].items()
            if t in text_types and c not in entry["generated"]
        ]

    def lowercase_column(self, column: ColumnDescriptor) -> int:
        self.calls.append(f"lowercase:{column.schema}.{column.table}.{column.name}")
        entry = self.tables[(column.schema, column.table)]
        if column.name in entry["generated"]:
            raise ExecutionError(
                f'column "{column.name}" can only be updated to DEFAULT'
            )
        changed = 0
        for row in entry["rows"]:
            value = row[column.name]
            if value is not None and value != value.lower():
                row[column.name] = value.lower()
                changed += 1
        return changed

    def _require_role(self, role: str) -> None:
        if role not in self.roles:
            raise ExecutionError(f'role "{role}" does not exist')

    def grant_schema_usage(self, schema: str, role: str) -> None:
        self.calls.append(f"grant_usage:{schema}:{role}")
        self._require_role(role)
        self.usage.add((schema, role))

    def alter_default_select(self, schema: str, role: str) -> None:
        self.calls.append(f"default_select:{schema}:{role}")
        self._require_role(role)
        self.default_select.add((schema, role))

    def role_exists(self, role: str) -> bool:
        return role in self.roles

    def schema_exists(self, schema: str) -> bool:
        return schema in self.schemas

    def has_schema_usage(self, schema: str, role: str) -> bool:
        return (schema, role) in self.usage

    def has_default_select(self, schema: str, role: str) -> bool:
        return (schema, role) in self.default_select


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()
