"""Pointer-drag state machine for moving text layers in edit space."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional, Tuple

from core.text_layers import TextElement, TextLayerModel

logger = logging.getLogger(__name__)

# Pointer travel (edit-space px) that turns a press into a drag.
DRAG_THRESHOLD = 5.0

# Size estimate used when the host cannot measure the rendered element.
FALLBACK_WIDTH_FACTOR = 0.6
FALLBACK_HEIGHT_FACTOR = 1.2
FALLBACK_SIZE = 50.0

Point = Tuple[float, float]
SizeProvider = Callable[[TextElement], Optional[Tuple[float, float]]]


class DragState(Enum):
    IDLE = auto()
    ARMED = auto()
    DRAGGING = auto()


@dataclass(frozen=True)
class DragSession:
    """Bookkeeping for the element under the pointer."""

    element_id: str
    initial_pointer: Point
    drag_offset: Point


def fallback_element_size(element: TextElement) -> Tuple[float, float]:
    """Rough size of an element from its font size and character count."""
    width = element.font_size * len(element.text) * FALLBACK_WIDTH_FACTOR or FALLBACK_SIZE
    height = element.font_size * FALLBACK_HEIGHT_FACTOR or FALLBACK_SIZE
    return width, height


def clamp_position(
    x: float, y: float, container_size: Tuple[float, float], element_size: Tuple[float, float]
) -> Tuple[float, float]:
    """Clamp a top-left position to [0, container - element] on both axes (0 wins if it does not fit)."""
    container_w, container_h = container_size
    element_w, element_h = element_size
    return (
        max(0.0, min(container_w - element_w, x)),
        max(0.0, min(container_h - element_h, y)),
    )


class DragController:
    """
    Turns pointer events into element moves.

    Idle -> Armed on press over an element; Armed -> Dragging once the pointer
    travels more than DRAG_THRESHOLD; any state -> Idle on release. Positions
    change only while Dragging, so a click selects without nudging.
    """

    def __init__(
        self,
        model: TextLayerModel,
        *,
        container_origin: Point = (0.0, 0.0),
        container_size: Tuple[float, float] = (0.0, 0.0),
        size_provider: Optional[SizeProvider] = None,
        threshold: float = DRAG_THRESHOLD,
    ) -> None:
        self._model = model
        self._container_origin = (float(container_origin[0]), float(container_origin[1]))
        self._container_size = (float(container_size[0]), float(container_size[1]))
        self._size_provider = size_provider
        self._threshold = float(threshold)
        self._state = DragState.IDLE
        self._session: Optional[DragSession] = None

    # -------------------- host wiring --------------------
    @property
    def state(self) -> DragState:
        return self._state

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def dragged_id(self) -> Optional[str]:
        if self._state is DragState.DRAGGING and self._session is not None:
            return self._session.element_id
        return None

    def set_container(self, origin: Point, size: Tuple[float, float]) -> None:
        """Update the container geometry used for offsets and clamping."""
        self._container_origin = (float(origin[0]), float(origin[1]))
        self._container_size = (float(size[0]), float(size[1]))

    def set_size_provider(self, provider: Optional[SizeProvider]) -> None:
        self._size_provider = provider

    # -------------------- pointer events --------------------
    def on_pointer_down(self, pointer: Point, element_id: Optional[str]) -> None:
        """
        Handle a press. element_id is the element under the pointer, or None
        for a press on empty canvas, which clears the selection.
        """
        if element_id is None:
            self._reset()
            self._model.select(None)
            return

        element = self._model.get(element_id)
        if element is None:
            self._reset()
            return

        self._model.select(element_id)
        px, py = float(pointer[0]), float(pointer[1])
        ox, oy = self._container_origin
        self._session = DragSession(
            element_id=element_id,
            initial_pointer=(px, py),
            drag_offset=(px - ox - element.x, py - oy - element.y),
        )
        self._state = DragState.ARMED

    def on_pointer_move(self, pointer: Point) -> bool:
        """
        Handle pointer motion. Returns True when the move belongs to a drag and
        the host should suppress its default handling.
        """
        session = self._session
        if self._state is DragState.IDLE or session is None:
            return False

        px, py = float(pointer[0]), float(pointer[1])
        if self._state is DragState.ARMED:
            ix, iy = session.initial_pointer
            if math.hypot(px - ix, py - iy) <= self._threshold:
                return False
            self._state = DragState.DRAGGING
            logger.debug("Drag started for element %s", session.element_id)

        element = self._model.get(session.element_id)
        if element is None:
            # Removed while dragging.
            self._reset()
            return False

        ox, oy = self._container_origin
        dx, dy = session.drag_offset
        x, y = clamp_position(
            px - ox - dx,
            py - oy - dy,
            self._container_size,
            self._element_size(element),
        )
        self._model.move_element(element.id, x, y)
        return True

    def on_pointer_up(self) -> None:
        """End any press or drag; the selection is kept."""
        if self._state is DragState.DRAGGING and self._session is not None:
            logger.debug("Drag finished for element %s", self._session.element_id)
        self._reset()

    def _element_size(self, element: TextElement) -> Tuple[float, float]:
        if self._size_provider is not None:
            measured = self._size_provider(element)
            if measured is not None:
                return measured
        return fallback_element_size(element)

    def _reset(self) -> None:
        self._state = DragState.IDLE
        self._session = None
