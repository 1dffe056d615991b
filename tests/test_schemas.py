import pytest

from pgops.core.errors import ExecutionError, PlanMismatchError
from pgops.core.schemas import erase_all_schemas, find_user_schemas, is_system_schema


@pytest.mark.parametrize(
    "name",
    ["pg_catalog", "pg_toast", "pg_temp_3", "pg_toast_temp_3", "information_schema"],
)
def test_is_system_schema_accepts_builtin_schemas(name: str):
    assert is_system_schema(name) is True


@pytest.mark.parametrize("name", ["public", "a", "app_pg_data", "mypg_", "PG_CATALOG"])
def test_is_system_schema_rejects_user_schemas(name: str):
    assert is_system_schema(name) is False


def test_erase_all_schemas_keeps_only_system_schemas(fake_db):
    fake_db.schemas = {"a": "me", "b": "me", "pg_catalog": "postgres"}

    results = erase_all_schemas(fake_db)

    assert set(fake_db.schemas) == {"pg_catalog"}
    assert sorted(r.schema for r in results) == ["a", "b"]
    assert all(r.dropped for r in results)


def test_erase_all_schemas_drops_contained_objects(fake_db):
    fake_db.add_table("sales", "orders", {"id": "integer"}, [{"id": 1}])
    fake_db.add_table("app_pg_data", "t", {"id": "integer"}, [])

    erase_all_schemas(fake_db)

    assert fake_db.tables == {}
    assert find_user_schemas(fake_db) == []


def test_erase_all_schemas_dry_run_drops_nothing(fake_db):
    fake_db.schemas = {"a": "me", "information_schema": "postgres"}

    results = erase_all_schemas(fake_db, dry_run=True)

    assert [r.schema for r in results] == ["a"]
    assert fake_db.calls == []
    assert not any(r.dropped for r in results)
    assert "a" in fake_db.schemas


def test_erase_all_schemas_aborts_and_rolls_back_on_first_failure(fake_db):
    fake_db.schemas = {"a": "me", "locked": "me", "c": "me", "pg_catalog": "postgres"}
    fake_db.fail_drop = {"locked"}

    with pytest.raises(ExecutionError, match="locked"):
        erase_all_schemas(fake_db)

    assert set(fake_db.schemas) == {"a", "locked", "c", "pg_catalog"}
    assert "drop_schema:c" not in fake_db.calls
    assert fake_db.rollbacks == 1


def test_erase_all_schemas_with_no_user_schemas_is_noop(fake_db):
    fake_db.schemas = {"pg_catalog": "postgres", "information_schema": "postgres"}

    assert erase_all_schemas(fake_db) == []
    assert fake_db.calls == []


def test_erase_all_schemas_drops_confirmed_plan(fake_db):
    fake_db.schemas = {"a": "me", "b": "me", "pg_catalog": "postgres"}

    results = erase_all_schemas(fake_db, expected=["b", "a"])

    assert [r.schema for r in results] == ["a", "b"]
    assert set(fake_db.schemas) == {"pg_catalog"}


def test_erase_all_schemas_refuses_when_schemas_changed(fake_db):
    fake_db.schemas = {"a": "me", "late": "me", "pg_catalog": "postgres"}

    with pytest.raises(PlanMismatchError, match="new: late; gone: b"):
        erase_all_schemas(fake_db, expected=["a", "b"])

    assert set(fake_db.schemas) == {"a", "late", "pg_catalog"}
    assert fake_db.calls == []
    assert fake_db.rollbacks == 1
