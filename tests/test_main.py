"""Headless tests for the Streamlit variant setup page."""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP_PATH = str(Path(__file__).parent.parent / "main.py")


@pytest.fixture
def app():
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.run()
    assert not at.exception
    return at


def slider_values(at):
    return [s.value for s in at.slider]


def click(at, key):
    at.button(key=key).click().run()
    assert not at.exception


class TestInitialState:
    def test_starts_with_two_even_variants(self, app):
        assert slider_values(app) == [50.0, 50.0]
        assert [v.name for v in app.session_state["variants"]] == ["Variant 1", "Variant 2"]

    def test_remove_disabled_at_minimum(self, app):
        for v in app.session_state["variants"]:
            assert app.button(key=f"remove_{v.id}").disabled

    def test_no_weight_warning(self, app):
        assert not any("add up to 100%" in w.value for w in app.warning)


class TestEditing:
    def test_add_variant_reevenizes(self, app):
        click(app, "add_variant")
        assert slider_values(app) == [34.0, 33.0, 33.0]

    def test_add_disabled_at_maximum(self, app):
        for _ in range(3):
            click(app, "add_variant")
        assert len(app.slider) == 5
        assert app.button(key="add_variant").disabled

    def test_remove_variant(self, app):
        click(app, "add_variant")
        second = app.session_state["variants"][1]
        click(app, f"remove_{second.id}")
        assert slider_values(app) == [50.0, 50.0]
        assert second.id not in [v.id for v in app.session_state["variants"]]

    def test_remove_clears_widget_state(self, app):
        click(app, "add_variant")
        second = app.session_state["variants"][1]
        click(app, f"remove_{second.id}")
        for prefix in ("weight_", "offer_", "description_"):
            assert f"{prefix}{second.id}" not in app.session_state

    def test_description_is_multiline_box(self, app):
        assert len(app.text_area) == 2
        assert len(app.text_input) == 0
        app.text_area[0].input("Long-form lander\nwith testimonials").run()
        assert not app.exception
        first = app.session_state["variants"][0]
        assert first.description == "Long-form lander\nwith testimonials"

    def test_unassigned_traffic_shown(self, app):
        notes = [m.value for m in app.markdown]
        assert "- Unassigned traffic: 0%" in notes

    def test_slider_shifts_others_proportionally(self, app):
        click(app, "add_variant")
        app.slider[0].set_value(70.0).run()
        assert not app.exception
        assert slider_values(app) == pytest.approx([70.0, 15.0, 15.0])
        assert [v.weight for v in app.session_state["variants"]] == pytest.approx([70, 15, 15])

    def test_reset_to_even_split(self, app):
        click(app, "add_variant")
        app.slider[0].set_value(70.0).run()
        app.sidebar.button[0].click().run()
        assert slider_values(app) == [34.0, 33.0, 33.0]


class TestSave:
    def test_save_without_offers_warns(self, app):
        click(app, "save")
        messages = [w.value for w in app.warning]
        assert "Variant 1 has no offer selected" in messages
        assert "Variant 2 has no offer selected" in messages
        assert len(app.json) == 0

    def test_save_valid_split_test(self, app):
        app.selectbox[0].select("1").run()
        app.selectbox[1].select("2").run()
        offers = [v.offer_id for v in app.session_state["variants"]]
        assert offers == ["1", "2"]

        click(app, "save")
        assert len(app.warning) == 0
        assert len(app.success) == 1
        assert len(app.json) == 1
