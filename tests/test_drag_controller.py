"""Tests for the pointer drag state machine."""

import pytest

from core.drag_controller import (
    DRAG_THRESHOLD,
    DragController,
    DragState,
    clamp_position,
    fallback_element_size,
)
from core.text_layers import TextElement, TextLayerModel

CONTAINER = (400.0, 300.0)


@pytest.fixture
def model():
    return TextLayerModel()


@pytest.fixture
def element_id(model):
    element_id = model.add_element(x=100, y=100)
    model.select(None)
    return element_id


@pytest.fixture
def controller(model):
    return DragController(model, container_size=CONTAINER, size_provider=lambda element: (80.0, 40.0))


def position(model, element_id):
    element = model.get(element_id)
    return element.x, element.y


class TestThreshold:
    def test_press_selects_and_arms(self, model, element_id, controller):
        controller.on_pointer_down((110, 110), element_id)
        assert model.selected_id == element_id
        assert controller.state is DragState.ARMED
        assert controller.session.drag_offset == (10.0, 10.0)

    def test_small_move_does_not_move(self, model, element_id, controller):
        controller.on_pointer_down((110, 110), element_id)
        consumed = controller.on_pointer_move((113, 110))
        assert not consumed
        assert controller.state is DragState.ARMED
        assert position(model, element_id) == (100.0, 100.0)

    def test_move_at_threshold_does_not_move(self, model, element_id, controller):
        controller.on_pointer_down((110, 110), element_id)
        controller.on_pointer_move((110 + DRAG_THRESHOLD, 110))
        assert position(model, element_id) == (100.0, 100.0)

    def test_large_move_drags(self, model, element_id, controller):
        controller.on_pointer_down((110, 110), element_id)
        consumed = controller.on_pointer_move((117, 110))
        assert consumed
        assert controller.state is DragState.DRAGGING
        assert controller.dragged_id == element_id
        assert position(model, element_id) == (107.0, 100.0)

    def test_click_leaves_position(self, model, element_id, controller):
        version = model.version
        controller.on_pointer_down((110, 110), element_id)
        controller.on_pointer_up()
        assert position(model, element_id) == (100.0, 100.0)
        # Only the selection changed.
        assert model.version == version + 1

    def test_keeps_dragging_after_threshold(self, model, element_id, controller):
        controller.on_pointer_down((110, 110), element_id)
        controller.on_pointer_move((120, 110))
        controller.on_pointer_move((112, 111))
        assert position(model, element_id) == (102.0, 101.0)


class TestClamping:
    def test_clamped_to_container(self, model, element_id, controller):
        controller.on_pointer_down((110, 110), element_id)
        controller.on_pointer_move((1000, 1000))
        assert position(model, element_id) == (CONTAINER[0] - 80.0, CONTAINER[1] - 40.0)
        controller.on_pointer_move((-500, -500))
        assert position(model, element_id) == (0.0, 0.0)

    @pytest.mark.parametrize("pointer", [(0, 0), (37, 250), (390, 5), (200, 299), (-10, 400)])
    def test_position_always_in_bounds(self, model, element_id, controller, pointer):
        controller.on_pointer_down((110, 110), element_id)
        controller.on_pointer_move((130, 130))
        controller.on_pointer_move(pointer)
        x, y = position(model, element_id)
        assert 0 <= x <= CONTAINER[0] - 80.0
        assert 0 <= y <= CONTAINER[1] - 40.0

    def test_container_origin_offsets_pointer(self, model, element_id):
        controller = DragController(
            model,
            container_origin=(50.0, 20.0),
            container_size=CONTAINER,
            size_provider=lambda element: (10.0, 10.0),
        )
        controller.on_pointer_down((160, 130), element_id)
        assert controller.session.drag_offset == (10.0, 10.0)
        controller.on_pointer_move((170, 130))
        assert position(model, element_id) == (110.0, 100.0)

    def test_fallback_size_when_unmeasured(self, model, element_id):
        controller = DragController(model, container_size=CONTAINER, size_provider=lambda element: None)
        controller.on_pointer_down((110, 110), element_id)
        controller.on_pointer_move((1000, 1000))
        width, height = fallback_element_size(model.get(element_id))
        assert position(model, element_id) == (CONTAINER[0] - width, CONTAINER[1] - height)

    def test_fallback_size_formula(self):
        element = TextElement(id="a", text="abcd", font_size=10)
        assert fallback_element_size(element) == pytest.approx((24.0, 12.0))
        empty = TextElement(id="b", text="", font_size=10)
        assert fallback_element_size(empty) == pytest.approx((50.0, 12.0))

    def test_oversized_element_pins_to_zero(self):
        assert clamp_position(30, 30, (100, 100), (150, 150)) == (0.0, 0.0)


class TestSelection:
    def test_release_keeps_selection(self, model, element_id, controller):
        controller.on_pointer_down((110, 110), element_id)
        controller.on_pointer_move((130, 130))
        controller.on_pointer_up()
        assert controller.state is DragState.IDLE
        assert controller.session is None
        assert model.selected_id == element_id

    def test_press_on_empty_canvas_deselects(self, model, element_id, controller):
        model.select(element_id)
        controller.on_pointer_down((5, 5), None)
        assert model.selected_id is None
        assert controller.state is DragState.IDLE

    def test_move_while_idle_is_ignored(self, model, element_id, controller):
        assert not controller.on_pointer_move((300, 300))
        assert position(model, element_id) == (100.0, 100.0)

    def test_element_removed_mid_drag(self, model, element_id, controller):
        controller.on_pointer_down((110, 110), element_id)
        model.remove_element(element_id)
        assert not controller.on_pointer_move((150, 150))
        assert controller.state is DragState.IDLE
