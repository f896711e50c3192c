"""Tests for the built-in store middleware."""

from __future__ import annotations

import logging

from modiva.core.store.actions import ActionType
from modiva.core.store.middleware import logging_middleware, payload_check_middleware
from modiva.core.store.store import Store


class TestPayloadCheck:
    def test_warns_on_wrong_shape_but_still_applies(self, store: Store, caplog):
        store.use(payload_check_middleware)
        with caplog.at_level(logging.WARNING, logger="modiva.core.store.middleware"):
            store.dispatch(ActionType.USER_UPDATE_HB, "twelve")
        assert "USER_UPDATE_HB should be number" in caplog.text
        assert store.get_state()["user"]["hemoglobin"]["current"] is None
        assert len(store.get_history()) == 1

    def test_silent_on_matching_shape(self, store: Store, caplog):
        store.use(payload_check_middleware)
        with caplog.at_level(logging.WARNING, logger="modiva.core.store.middleware"):
            store.dispatch(ActionType.USER_UPDATE_HB, 12.5)
            store.dispatch(ActionType.AUTH_LOGOUT)
        assert "should be" not in caplog.text

    def test_ignores_unknown_types(self, store: Store, caplog):
        store.use(payload_check_middleware)
        with caplog.at_level(logging.WARNING, logger="modiva.core.store.middleware"):
            store.dispatch("CUSTOM", object())
        assert "should be" not in caplog.text


class TestLogging:
    def test_logs_type_not_payload(self, store: Store, caplog):
        store.use(logging_middleware)
        with caplog.at_level(logging.DEBUG, logger="modiva.core.store.middleware"):
            store.dispatch(ActionType.AUTH_LOGIN, {"token": "secret-token"})
        assert "AUTH_LOGIN" in caplog.text
        assert "secret-token" not in caplog.text
