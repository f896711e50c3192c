"""Tests for the ActionAuditLogger and payload hashing."""

from __future__ import annotations

from modiva.core.audit.logger import ActionAuditLogger, _hash_payload
from modiva.core.store.actions import Action, ActionType
from modiva.core.store.store import Store


class TestHashPayload:
    def test_hashes_dict(self):
        h = _hash_payload({"key": "value"})
        assert isinstance(h, str)
        assert len(h) == 64

    def test_order_independent(self):
        assert _hash_payload({"z": 1, "a": 2}) == _hash_payload({"a": 2, "z": 1})

    def test_different_inputs_differ(self):
        assert _hash_payload({"a": 1}) != _hash_payload({"a": 2})

    def test_non_serializable_returns_empty(self):
        assert _hash_payload(object()) == ""


class TestLogAction:
    def test_returns_uuid(self, audit_logger: ActionAuditLogger):
        eid = audit_logger.log_action(Action(type="AUTH_LOGIN", payload={"token": "t"}, timestamp=1))
        assert len(eid) == 36

    def test_payload_is_never_stored_raw(self, audit_logger: ActionAuditLogger, state_db):
        audit_logger.log_action(
            Action(type="AUTH_LOGIN", payload={"token": "secret-token"}, timestamp=1)
        )
        rows = state_db.connection.execute("SELECT * FROM action_audit").fetchall()
        assert len(rows) == 1
        assert all("secret-token" not in str(v) for v in dict(rows[0]).values())
        assert rows[0]["payload_hash"] == _hash_payload({"token": "secret-token"})

    def test_no_payload_has_no_hash(self, audit_logger: ActionAuditLogger):
        audit_logger.log_action(Action(type="APP_RESET", timestamp=1))
        assert audit_logger.get_events()[0]["payload_hash"] is None

    def test_unknown_type_marked_unrecognized(self, audit_logger: ActionAuditLogger):
        audit_logger.log_action(Action(type="NOT_A_TYPE", timestamp=1))
        audit_logger.log_action(Action(type="APP_INIT", timestamp=2))
        assert audit_logger.count_events() == 2
        assert audit_logger.count_events(unrecognized_only=True) == 1

    def test_closed_database_loses_entry_without_raising(self, state_db):
        audit = ActionAuditLogger(state_db)
        state_db.close()
        assert audit.log_action(Action(type="APP_INIT", timestamp=1)) == ""


class TestQueries:
    def test_filter_by_action_type(self, audit_logger: ActionAuditLogger):
        audit_logger.log_action(Action(type="UI_SET_THEME", payload="dark", timestamp=1))
        audit_logger.log_action(Action(type="UI_SET_LANGUAGE", payload="en", timestamp=2))
        events = audit_logger.get_events(action_type="UI_SET_THEME")
        assert [e["action_type"] for e in events] == ["UI_SET_THEME"]

    def test_limit(self, audit_logger: ActionAuditLogger):
        for i in range(5):
            audit_logger.log_action(Action(type="APP_INIT", timestamp=i))
        assert len(audit_logger.get_events(limit=3)) == 3


class TestMiddleware:
    def test_records_every_dispatch(self, audit_logger: ActionAuditLogger):
        store = Store()
        store.use(audit_logger.middleware)
        store.dispatch(ActionType.USER_INCREMENT_CONSUMPTION)
        store.dispatch("UNKNOWN_ACTION")

        assert audit_logger.count_events() == 2
        assert store.get_state()["user"]["vitamin_consumption"]["count"] == 1
