"""Editing surface: letterboxed live preview with draggable text layers."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from PySide6 import QtCore, QtGui, QtWidgets
from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QColor, QPainter, QPen, QPolygonF, QTransform

from core.drag_controller import DragController
from core.errors import InvalidTransform
from core.raster import Raster, raster_to_qimage
from core.text_layers import Subscription, TextElement, TextLayerModel
from core.viewport import ViewportTransform, fit
from export.compositor import RENDER_HINTS, measure_text, paint_order, paint_text_element

logger = logging.getLogger(__name__)

# Smallest hit box edge so empty or tiny layers stay grabbable.
MIN_HIT_SIZE = 8.0


class EditorCanvas(QtWidgets.QWidget):
    """
    Widget whose own rectangle is edit space.

    Paints background, visible text layers and the foreground cutout in the
    same order as the exporter, and routes mouse input to a DragController.
    """

    transformChanged = QtCore.Signal(object)

    BACKGROUND_COLOR = QColor(24, 24, 28)
    SELECTION_COLOR = QColor(96, 165, 250)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._model: Optional[TextLayerModel] = None
        self._subscription: Optional[Subscription] = None
        self._drag: Optional[DragController] = None
        self._background: Optional[Raster] = None
        self._background_pixmap: Optional[QtGui.QPixmap] = None
        self._foreground_pixmap: Optional[QtGui.QPixmap] = None
        self._transform: Optional[ViewportTransform] = None

        self.setMinimumSize(320, 240)
        self.setFocusPolicy(QtCore.Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QtWidgets.QSizePolicy.Policy.Expanding, QtWidgets.QSizePolicy.Policy.Expanding)

    # -------------------- public API --------------------
    def set_model(self, model: Optional[TextLayerModel]) -> None:
        """Attach the layer model; the previous subscription is released."""
        self.detach()
        self._model = model
        if model is None:
            self._drag = None
            return
        self._subscription = model.subscribe(self.update)
        self._drag = DragController(model, size_provider=self.element_size)
        self._drag.set_container((0.0, 0.0), (float(self.width()), float(self.height())))
        self.update()

    def detach(self) -> None:
        """Release the model subscription."""
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def set_images(self, background: Optional[Raster], foreground: Optional[Raster] = None) -> None:
        """Show a new background (and optional cutout); recomputes the transform."""
        self._background = background
        self._background_pixmap = (
            QtGui.QPixmap.fromImage(raster_to_qimage(background)) if background is not None else None
        )
        self.set_foreground(foreground)
        self._recompute_transform()

    def set_foreground(self, foreground: Optional[Raster]) -> None:
        self._foreground_pixmap = (
            QtGui.QPixmap.fromImage(raster_to_qimage(foreground)) if foreground is not None else None
        )
        self.update()

    def current_transform(self) -> Optional[ViewportTransform]:
        """Transform for the current widget size, or None while it has no area."""
        return self._transform

    def drag_controller(self) -> Optional[DragController]:
        return self._drag

    def element_size(self, element: TextElement) -> Tuple[float, float]:
        """Live rendered size of an element in edit space."""
        return measure_text(element)

    def element_at(self, pos: QPointF) -> Optional[str]:
        """Topmost visible element under an edit-space point."""
        if self._model is None:
            return None
        for element in reversed(paint_order(self._model.snapshot())):
            if self._element_outline(element).containsPoint(pos, QtCore.Qt.FillRule.OddEvenFill):
                return element.id
        return None

    # -------------------- geometry --------------------
    def _element_outline(self, element: TextElement) -> QPolygonF:
        width, height = self.element_size(element)
        rect = QRectF(element.x, element.y, max(width, MIN_HIT_SIZE), max(height, MIN_HIT_SIZE))
        polygon = QPolygonF(rect)
        if not element.rotation:
            return polygon
        cx = element.x + width / 2
        cy = element.y + element.font_size / 2
        rotation = QTransform()
        rotation.translate(cx, cy)
        rotation.rotate(element.rotation)
        rotation.translate(-cx, -cy)
        return rotation.map(polygon)

    def _recompute_transform(self) -> None:
        transform: Optional[ViewportTransform] = None
        if self._background is not None:
            try:
                transform = fit(self._background.width, self._background.height, self.width(), self.height())
            except InvalidTransform as exc:
                logger.debug("Viewport transform deferred: %s", exc)
        if transform != self._transform:
            self._transform = transform
            self.transformChanged.emit(transform)
        self.update()

    # -------------------- Qt events --------------------
    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        if self._drag is not None:
            self._drag.set_container((0.0, 0.0), (float(self.width()), float(self.height())))
        self._recompute_transform()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        painter = QPainter(self)
        try:
            painter.setRenderHints(RENDER_HINTS)
            painter.fillRect(self.rect(), self.BACKGROUND_COLOR)
            if self._transform is None or self._background_pixmap is None:
                painter.setPen(QColor(160, 160, 170))
                painter.drawText(self.rect(), QtCore.Qt.AlignmentFlag.AlignCenter, "Upload an image to start")
                return

            target = QRectF(*self._transform.displayed_rect())
            painter.drawPixmap(target, self._background_pixmap, QRectF(self._background_pixmap.rect()))

            painter.save()
            painter.setClipRect(target)
            if self._model is not None:
                for element in paint_order(self._model.snapshot()):
                    paint_text_element(painter, element, (element.x, element.y))
            if self._foreground_pixmap is not None:
                painter.drawPixmap(target, self._foreground_pixmap, QRectF(self._foreground_pixmap.rect()))
            painter.restore()

            self._paint_selection(painter)
        finally:
            painter.end()

    def _paint_selection(self, painter: QPainter) -> None:
        if self._model is None:
            return
        element = self._model.selected()
        if element is None or not element.visible:
            return
        pen = QPen(self.SELECTION_COLOR)
        pen.setStyle(QtCore.Qt.PenStyle.DashLine)
        pen.setWidthF(1.5)
        painter.setPen(pen)
        painter.setBrush(QtCore.Qt.BrushStyle.NoBrush)
        painter.drawPolygon(self._element_outline(element))

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self.setFocus(QtCore.Qt.FocusReason.MouseFocusReason)
        if self._drag is None or event.button() != QtCore.Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        self._drag.on_pointer_down((pos.x(), pos.y()), self.element_at(pos))
        event.accept()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        if self._drag is None:
            super().mouseMoveEvent(event)
            return
        pos = event.position()
        if self._drag.on_pointer_move((pos.x(), pos.y())):
            self.setCursor(QtGui.QCursor(QtCore.Qt.CursorShape.ClosedHandCursor))
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        if self._drag is not None and event.button() == QtCore.Qt.MouseButton.LeftButton:
            self._drag.on_pointer_up()
            self.unsetCursor()
            event.accept()
            return
        super().mouseReleaseEvent(event)
