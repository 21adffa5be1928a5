"""Tests for the text layer model: mutations, selection and subscriptions."""

import pytest

from core.text_layers import DUPLICATE_OFFSET, Gradient, Shadow, TextElement, TextLayerModel


@pytest.fixture
def model():
    return TextLayerModel()


class TestAddElement:
    def test_defaults(self, model):
        element_id = model.add_element()
        element = model.get(element_id)
        assert element.text == "Behind Text"
        assert (element.x, element.y) == (50.0, 50.0)
        assert element.font_size == 48.0
        assert element.font_family == "Impact"
        assert element.stroke_width == 2.0
        assert element.shadow == Shadow(enabled=True, color="#000000", blur=10.0, offset_x=2.0, offset_y=2.0)
        assert element.gradient == Gradient(enabled=False, colors=("#ff0000", "#0000ff"))
        assert element.visible

    def test_selects_new_element(self, model):
        element_id = model.add_element()
        assert model.selected_id == element_id

    def test_appends_in_paint_order(self, model):
        first = model.add_element(text="A")
        second = model.add_element(text="B")
        assert [e.id for e in model.snapshot()] == [first, second]

    def test_ids_are_unique(self, model):
        ids = {model.add_element() for _ in range(20)}
        assert len(ids) == 20


class TestUpdateElement:
    def test_partial_update(self, model):
        element_id = model.add_element()
        model.update_element(element_id, text="Hello", color="#123456")
        element = model.get(element_id)
        assert element.text == "Hello"
        assert element.color == "#123456"
        assert element.font_size == 48.0

    def test_unknown_id_is_noop(self, model):
        model.add_element()
        version = model.version
        model.update_element("missing", text="x")
        assert model.version == version

    def test_opacity_is_clamped(self, model):
        element_id = model.add_element()
        model.update_element(element_id, opacity=1.7)
        assert model.get(element_id).opacity == 1.0
        model.update_element(element_id, opacity=-3)
        assert model.get(element_id).opacity == 0.0

    def test_invalid_values_rejected(self, model):
        element_id = model.add_element()
        model.update_element(element_id, font_size=0, stroke_width=-1, font_family="Comic Sans", text_transform="wavy")
        element = model.get(element_id)
        assert element.font_size == 48.0
        assert element.stroke_width == 2.0
        assert element.font_family == "Impact"
        assert element.text_transform == "none"

    def test_rotation_unconstrained(self, model):
        element_id = model.add_element()
        model.update_element(element_id, rotation=540)
        assert model.get(element_id).rotation == 540.0

    def test_partial_shadow_update(self, model):
        element_id = model.add_element()
        model.update_element(element_id, shadow={"blur": 4, "color": "#ff0000"})
        shadow = model.get(element_id).shadow
        assert shadow.blur == 4.0
        assert shadow.color == "#ff0000"
        assert shadow.enabled
        assert shadow.offset_x == 2.0

    def test_negative_shadow_blur_rejected(self, model):
        element_id = model.add_element()
        model.update_element(element_id, shadow={"blur": -1})
        assert model.get(element_id).shadow.blur == 10.0

    def test_gradient_update(self, model):
        element_id = model.add_element()
        model.update_element(element_id, gradient={"enabled": True, "colors": ["#000000", "#ffffff"]})
        assert model.get(element_id).gradient == Gradient(enabled=True, colors=("#000000", "#ffffff"))

    def test_records_are_replaced_not_mutated(self, model):
        element_id = model.add_element()
        before = model.get(element_id)
        model.update_element(element_id, x=10)
        assert before.x == 50.0
        assert model.get(element_id).x == 10.0


class TestDuplicateAndRemove:
    def test_duplicate_copies_and_offsets(self, model):
        source_id = model.add_element(text="Copy me", rotation=15)
        copy_id = model.duplicate_element(source_id)
        source, copy = model.get(source_id), model.get(copy_id)
        assert copy_id != source_id
        assert copy.text == "Copy me"
        assert copy.rotation == 15.0
        assert (copy.x, copy.y) == (source.x + DUPLICATE_OFFSET, source.y + DUPLICATE_OFFSET)
        assert model.snapshot()[-1].id == copy_id
        assert model.selected_id == copy_id

    def test_duplicate_unknown_id(self, model):
        assert model.duplicate_element("missing") is None

    def test_remove_clears_selection(self, model):
        element_id = model.add_element()
        model.remove_element(element_id)
        assert len(model) == 0
        assert model.selected_id is None

    def test_remove_keeps_other_selection(self, model):
        first = model.add_element()
        second = model.add_element()
        model.remove_element(first)
        assert model.selected_id == second

    def test_remove_unknown_id_is_noop(self, model):
        model.add_element()
        model.remove_element("missing")
        assert len(model) == 1

    def test_set_visible(self, model):
        element_id = model.add_element()
        model.set_visible(element_id, False)
        assert not model.get(element_id).visible


class TestSubscriptions:
    def test_listener_called_on_commit(self, model):
        calls = []
        model.subscribe(lambda: calls.append(model.version))
        model.add_element()
        assert calls == [1]

    def test_close_unsubscribes(self, model):
        calls = []
        with model.subscribe(lambda: calls.append(1)) as subscription:
            model.add_element()
        assert not subscription.active
        model.add_element()
        subscription.close()
        assert calls == [1]

    def test_snapshot_is_stable(self, model):
        model.add_element()
        snapshot = model.snapshot()
        model.add_element()
        assert len(snapshot) == 1
        assert all(isinstance(e, TextElement) for e in snapshot)

    def test_clear(self, model):
        model.add_element()
        model.clear()
        assert len(model) == 0
        assert model.selected_id is None
