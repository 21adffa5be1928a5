"""Text layer records and the single-writer model that owns them."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from config import DEFAULT_FONT_FAMILY, FONT_OPTIONS, has_font_family

logger = logging.getLogger(__name__)

# Offset (edit-space px) applied to a duplicated element.
DUPLICATE_OFFSET = 20.0

TEXT_TRANSFORMS = ("none", "uppercase", "lowercase", "capitalize")


@dataclass(frozen=True)
class Shadow:
    enabled: bool = True
    color: str = "#000000"
    blur: float = 10.0
    offset_x: float = 2.0
    offset_y: float = 2.0


@dataclass(frozen=True)
class Gradient:
    enabled: bool = False
    colors: Tuple[str, str] = ("#ff0000", "#0000ff")


@dataclass(frozen=True)
class TextElement:
    """
    One text layer placed in edit space.

    Records are immutable; the model replaces them on every change.
    """

    id: str
    text: str = "Behind Text"
    x: float = 50.0
    y: float = 50.0
    font_size: float = 48.0
    font_family: str = DEFAULT_FONT_FAMILY
    color: str = "#000000"
    stroke: str = "#ffffff"
    stroke_width: float = 2.0
    opacity: float = 1.0
    rotation: float = 0.0  # degrees, clockwise
    visible: bool = True
    shadow: Shadow = field(default_factory=Shadow)
    letter_spacing: float = 0.0
    line_height: float = 1.2
    text_transform: str = "none"
    gradient: Gradient = field(default_factory=Gradient)


def new_element_id() -> str:
    return uuid.uuid4().hex


class Subscription:
    """Handle returned by TextLayerModel.subscribe; closing it detaches the listener."""

    def __init__(self, model: "TextLayerModel", callback: Callable[[], None]) -> None:
        self._model: Optional[TextLayerModel] = model
        self._callback = callback

    @property
    def active(self) -> bool:
        return self._model is not None

    def close(self) -> None:
        if self._model is None:
            return
        self._model._detach(self._callback)
        self._model = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class TextLayerModel:
    """
    Ordered text layers plus the current selection.

    List order is paint order: later elements are drawn over earlier ones.
    All mutations go through this object; each one bumps ``version`` and
    notifies subscribers. Unknown ids are ignored.
    """

    def __init__(self) -> None:
        self._elements: List[TextElement] = []
        self._selected_id: Optional[str] = None
        self._version: int = 0
        self._listeners: List[Callable[[], None]] = []

    # -------------------- queries --------------------
    @property
    def version(self) -> int:
        return self._version

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def snapshot(self) -> Tuple[TextElement, ...]:
        """Return a stable copy of the elements in paint order."""
        return tuple(self._elements)

    def get(self, element_id: Optional[str]) -> Optional[TextElement]:
        for element in self._elements:
            if element.id == element_id:
                return element
        return None

    def selected(self) -> Optional[TextElement]:
        return self.get(self._selected_id)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self):
        return iter(tuple(self._elements))

    # -------------------- subscriptions --------------------
    def subscribe(self, callback: Callable[[], None]) -> Subscription:
        """Register a change listener; close the returned subscription to detach it."""
        self._listeners.append(callback)
        return Subscription(self, callback)

    def _detach(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _commit(self) -> None:
        self._version += 1
        for callback in list(self._listeners):
            callback()

    # -------------------- mutations --------------------
    def add_element(self, **overrides: Any) -> str:
        """Append a new element with default styling and select it."""
        element = TextElement(id=new_element_id())
        if overrides:
            element = replace(element, **_validated_changes(element, overrides))
        self._elements.append(element)
        self._selected_id = element.id
        self._commit()
        return element.id

    def update_element(self, element_id: str, **changes: Any) -> None:
        """Apply a partial update; invalid field values are dropped with a warning."""
        index = self._index_of(element_id)
        if index is None:
            return
        current = self._elements[index]
        accepted = _validated_changes(current, changes)
        if not accepted:
            return
        updated = replace(current, **accepted)
        if updated == current:
            return
        self._elements[index] = updated
        self._commit()

    def move_element(self, element_id: str, x: float, y: float) -> None:
        self.update_element(element_id, x=x, y=y)

    def duplicate_element(self, element_id: str) -> Optional[str]:
        """Copy an element, offset it and append the copy on top of the stack."""
        source = self.get(element_id)
        if source is None:
            return None
        copy = replace(
            source,
            id=new_element_id(),
            x=source.x + DUPLICATE_OFFSET,
            y=source.y + DUPLICATE_OFFSET,
        )
        self._elements.append(copy)
        self._selected_id = copy.id
        self._commit()
        return copy.id

    def remove_element(self, element_id: str) -> None:
        index = self._index_of(element_id)
        if index is None:
            return
        del self._elements[index]
        if self._selected_id == element_id:
            self._selected_id = None
        self._commit()

    def set_visible(self, element_id: str, visible: bool) -> None:
        self.update_element(element_id, visible=bool(visible))

    def select(self, element_id: Optional[str]) -> None:
        """Select an element by id, or clear the selection with None."""
        if element_id is not None and self._index_of(element_id) is None:
            return
        if element_id == self._selected_id:
            return
        self._selected_id = element_id
        self._commit()

    def clear(self) -> None:
        """Drop every element and the selection."""
        if not self._elements and self._selected_id is None:
            return
        self._elements = []
        self._selected_id = None
        self._commit()

    def _index_of(self, element_id: Optional[str]) -> Optional[int]:
        for index, element in enumerate(self._elements):
            if element.id == element_id:
                return index
        return None


def _validated_changes(current: TextElement, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Filter and normalise a partial update against the current record."""
    accepted: Dict[str, Any] = {}
    for name, value in changes.items():
        if name == "id":
            logger.warning("Element id cannot be changed (%s)", current.id)
            continue
        if name == "shadow":
            shadow = _merge_shadow(current.shadow, value)
            if shadow is not None:
                accepted[name] = shadow
            continue
        if name == "gradient":
            gradient = _merge_gradient(current.gradient, value)
            if gradient is not None:
                accepted[name] = gradient
            continue
        if name not in _SCALAR_FIELDS:
            logger.warning("Unknown text element field %r ignored", name)
            continue
        normalized = _normalize_scalar(name, value)
        if normalized is _REJECTED:
            continue
        accepted[name] = normalized
    return accepted


_REJECTED = object()

_SCALAR_FIELDS = {
    "text",
    "x",
    "y",
    "font_size",
    "font_family",
    "color",
    "stroke",
    "stroke_width",
    "opacity",
    "rotation",
    "visible",
    "letter_spacing",
    "line_height",
    "text_transform",
}


def _normalize_scalar(name: str, value: Any) -> Any:
    if name == "text":
        return "" if value is None else str(value)
    if name == "visible":
        return bool(value)
    if name in ("color", "stroke"):
        return str(value)
    if name == "font_family":
        if value not in FONT_OPTIONS and not has_font_family(value):
            logger.warning("Unsupported font family %r ignored", value)
            return _REJECTED
        return value
    if name == "text_transform":
        if value not in TEXT_TRANSFORMS:
            logger.warning("Unknown text transform %r ignored", value)
            return _REJECTED
        return value

    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid value %r for %s ignored", value, name)
        return _REJECTED
    if name == "font_size" and number <= 0:
        logger.warning("Non-positive font size %s ignored", number)
        return _REJECTED
    if name == "stroke_width" and number < 0:
        logger.warning("Negative stroke width %s ignored", number)
        return _REJECTED
    if name == "line_height" and number <= 0:
        logger.warning("Non-positive line height %s ignored", number)
        return _REJECTED
    if name == "opacity":
        return max(0.0, min(1.0, number))
    return number


def _merge_shadow(current: Shadow, value: Any) -> Optional[Shadow]:
    if isinstance(value, Shadow):
        candidate = value
    elif isinstance(value, Mapping):
        unknown = set(value) - {"enabled", "color", "blur", "offset_x", "offset_y"}
        if unknown:
            logger.warning("Unknown shadow fields %s ignored", sorted(unknown))
        try:
            candidate = replace(
                current,
                **{k: (bool(v) if k == "enabled" else str(v) if k == "color" else float(v))
                   for k, v in value.items() if k not in unknown},
            )
        except (TypeError, ValueError):
            logger.warning("Invalid shadow update %r ignored", value)
            return None
    else:
        logger.warning("Invalid shadow value %r ignored", value)
        return None
    if candidate.blur < 0:
        logger.warning("Negative shadow blur %s ignored", candidate.blur)
        return None
    return candidate


def _merge_gradient(current: Gradient, value: Any) -> Optional[Gradient]:
    if isinstance(value, Gradient):
        candidate = value
    elif isinstance(value, Mapping):
        enabled = bool(value.get("enabled", current.enabled))
        colors = value.get("colors", current.colors)
        candidate = Gradient(enabled=enabled, colors=tuple(str(c) for c in colors))  # type: ignore[arg-type]
    else:
        logger.warning("Invalid gradient value %r ignored", value)
        return None
    if len(candidate.colors) != 2:
        logger.warning("Gradient needs exactly two colors, got %r", candidate.colors)
        return None
    return candidate
