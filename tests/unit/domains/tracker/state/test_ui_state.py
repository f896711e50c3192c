"""Tests for the UI slice."""

from __future__ import annotations

from modiva.domains.tracker.domain_logic.constants import NAVIGATION_HISTORY_LIMIT
from modiva.domains.tracker.state import ui


class TestNavigation:
    def test_current_and_previous(self):
        state = ui.set_current_screen(ui.get_initial_state(), "home")
        state = ui.set_current_screen(state, "reports")
        assert state["current_screen"] == "reports"
        assert state["previous_screen"] == "home"

    def test_history_capped(self):
        state = ui.get_initial_state()
        for i in range(NAVIGATION_HISTORY_LIMIT + 5):
            state = ui.set_current_screen(state, f"s{i}")
        assert len(state["navigation_history"]) == NAVIGATION_HISTORY_LIMIT
        assert state["navigation_history"][0] == "s5"


class TestOverlays:
    def test_modal_shows_and_hides_overlay(self):
        state = ui.show_modal(ui.get_initial_state(), {"title": "Done"})
        assert state["modal"]["is_open"] is True
        assert state["modal"]["type"] == "custom"
        assert state["overlay"]["is_visible"] is True
        state = ui.hide_modal(state)
        assert state["modal"] == ui.get_initial_state()["modal"]
        assert state["overlay"]["is_visible"] is False

    def test_toast_defaults(self):
        state = ui.show_toast(ui.get_initial_state(), {"message": "Saved"})
        assert state["toast"] == {"is_visible": True, "type": "info", "message": "Saved", "duration": 3000}
        assert ui.hide_toast(state)["toast"]["is_visible"] is False

    def test_drawer_toggles_without_flag(self):
        state = ui.toggle_drawer(ui.get_initial_state(), {})
        assert state["drawer"]["is_open"] is True
        assert state["overlay"]["is_visible"] is True
        state = ui.toggle_drawer(state, {"is_open": False})
        assert state["drawer"]["is_open"] is False

    def test_overlay_opacity(self):
        assert ui.show_overlay(ui.get_initial_state(), 0.8)["overlay"]["opacity"] == 0.8
        assert ui.show_overlay(ui.get_initial_state(), None)["overlay"]["opacity"] == 0.5


class TestLoadingAndScreens:
    def test_loading_keys(self):
        state = ui.set_loading(ui.get_initial_state(), {"key": "dashboard", "is_loading": True})
        assert ui.is_any_loading(state)
        state = ui.set_loading(state, {"key": "dashboard", "is_loading": False})
        assert not ui.is_any_loading(state)
        assert ui.is_any_loading(ui.set_global_loading(state, True))

    def test_loading_without_key_is_ignored(self):
        initial = ui.get_initial_state()
        assert ui.set_loading(initial, {"is_loading": True}) is initial

    def test_screen_state(self):
        state = ui.set_screen_ui_state(
            ui.get_initial_state(), {"screen": "reports", "updates": {"view_mode": "grid"}}
        )
        state = ui.set_scroll_position(state, {"screen": "reports", "position": 120})
        assert ui.get_screen_ui_state(state, "reports") == {"scroll_position": 120, "view_mode": "grid"}
        assert ui.get_screen_ui_state(state, "unknown") == {}

    def test_app_bar_merge(self):
        state = ui.set_app_bar(ui.get_initial_state(), {"title": "Laporan"})
        assert state["app_bar"]["title"] == "Laporan"
        assert state["app_bar"]["actions"] == []
