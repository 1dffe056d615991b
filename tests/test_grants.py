import pytest

from pgops.core.errors import ExecutionError
from pgops.core.grants import (
    ReadOnlyGrantPropagator,
    SchemaCreatedEvent,
    SchemaEvents,
    create_read_only_user,
    grant_read_only,
    grant_state,
    install_event_trigger,
)
from pgops.core.models import GrantState, GrantTarget


def test_grant_read_only_applies_usage_and_default_select(fake_db):
    fake_db.schemas["s"] = "postgres"
    target = GrantTarget(schema="s", role="readonly_user")

    grant_read_only(fake_db, target)

    assert fake_db.calls == [
        "grant_usage:s:readonly_user",
        "default_select:s:readonly_user",
    ]
    assert grant_state(fake_db, target) is GrantState.GRANT_APPLIED


def test_grant_state_without_grant(fake_db):
    assert grant_state(fake_db, GrantTarget("s", "readonly_user")) is GrantState.NO_GRANT
    assert grant_state(fake_db, GrantTarget("s", "ghost")) is GrantState.NO_GRANT


def test_create_schema_fires_propagator_once(fake_db):
    events = SchemaEvents()
    events.on_schema_created(ReadOnlyGrantPropagator("readonly_user"))

    event = events.create_schema(fake_db, "s")

    assert event == SchemaCreatedEvent(schema="s")
    assert "s" in fake_db.schemas
    assert fake_db.calls.count("grant_usage:s:readonly_user") == 1
    assert grant_state(fake_db, GrantTarget("s", "readonly_user")) is GrantState.GRANT_APPLIED


def test_create_schema_fails_when_role_is_missing(fake_db):
    events = SchemaEvents()
    events.on_schema_created(ReadOnlyGrantPropagator("ghost"))

    with pytest.raises(ExecutionError, match="ghost"):
        events.create_schema(fake_db, "s")

    assert "s" not in fake_db.schemas
    assert fake_db.usage == set()


def test_schema_events_decorator_registration(fake_db):
    events = SchemaEvents()
    seen: list[str] = []

    @events.on_schema_created
    def _record(adapter, event):
        seen.append(event.schema)

    events.create_schema(fake_db, "a")
    events.create_schema(fake_db, "b")

    assert seen == ["a", "b"]
    assert events.listeners == (_record,)


def test_create_schema_without_listeners_only_creates(fake_db):
    SchemaEvents().create_schema(fake_db, "plain")

    assert fake_db.calls == ["create_schema:plain"]
    assert grant_state(fake_db, GrantTarget("plain", "readonly_user")) is GrantState.NO_GRANT


def test_grant_state_on_missing_schema_is_no_grant(fake_db):
    fake_db.usage.add(("gone", "readonly_user"))
    fake_db.default_select.add(("gone", "readonly_user"))

    assert grant_state(fake_db, GrantTarget("gone", "readonly_user")) is GrantState.NO_GRANT


def test_install_event_trigger_refuses_missing_role():
    class _Adapter:
        def __init__(self):
            self.installed: list[tuple[str, str]] = []

        def transaction(self):
            from contextlib import nullcontext

            return nullcontext()

        def role_exists(self, role: str) -> bool:
            return False

        def install_event_trigger(self, name: str, role: str) -> None:
            self.installed.append((name, role))

    adapter = _Adapter()
    with pytest.raises(ExecutionError, match="does not exist"):
        install_event_trigger(adapter, "ghost")

    assert adapter.installed == []


def test_create_read_only_user_grants_every_schema():
    class _Adapter:
        def __init__(self):
            self.calls: list[str] = []

        def transaction(self):
            from contextlib import nullcontext

            return nullcontext()

        def revoke_public_create(self, schema: str) -> None:
            self.calls.append(f"revoke:{schema}")

        def create_login_role(self, role: str, password: str) -> None:
            self.calls.append(f"create_user:{role}")

        def grant_schema_usage(self, schema: str, role: str) -> None:
            self.calls.append(f"usage:{schema}")

        def grant_select_all_tables(self, schema: str, role: str) -> None:
            self.calls.append(f"select_all:{schema}")

        def alter_default_select(self, schema: str, role: str) -> None:
            self.calls.append(f"default:{schema}")

    adapter = _Adapter()
    targets = create_read_only_user(adapter, "reader", "secret", ["a", "b"])

    assert [t.schema for t in targets] == ["a", "b"]
    assert adapter.calls == [
        "revoke:public",
        "create_user:reader",
        "usage:a",
        "select_all:a",
        "default:a",
        "usage:b",
        "select_all:b",
        "default:b",
    ]
