"""
Layered rendering of background, text layers and foreground cutout.

The same text painting routine serves the export (intrinsic pixels, scaled by
the viewport transform) and the live preview (edit space, scale 1), so both
show identical geometry and paint order.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QFontMetricsF,
    QImage,
    QLinearGradient,
    QPainter,
    QPainterPath,
    QPen,
    QTransform,
)

from core.errors import InvalidTransform
from core.raster import Raster, check_dimensions, raster_from_qimage, raster_to_qimage
from core.text_layers import Shadow, TextElement
from core.viewport import ViewportTransform

logger = logging.getLogger(__name__)

RENDER_HINTS = (
    QPainter.RenderHint.Antialiasing
    | QPainter.RenderHint.TextAntialiasing
    | QPainter.RenderHint.SmoothPixmapTransform
)

# First letter of each whitespace-delimited word, after any leading punctuation.
_WORD_START = re.compile(r"(^|\s)([^\w\s]*)([^\W\d_])")


@dataclass
class TextGeometry:
    text: str
    font: QFont
    font_size: float
    origin: QPointF
    width: float
    height: float
    path: QPainterPath

    @property
    def center(self) -> QPointF:
        """Rotation pivot: middle of the measured advance, half a font size down."""
        return QPointF(self.origin.x() + self.width / 2, self.origin.y() + self.font_size / 2)


def apply_text_transform(text: str, mode: str) -> str:
    """Return the text as it should be rendered; the stored text is never changed."""
    if mode == "uppercase":
        return text.upper()
    if mode == "lowercase":
        return text.lower()
    if mode == "capitalize":
        return _WORD_START.sub(lambda m: m.group(1) + m.group(2) + m.group(3).upper(), text)
    return text


def scaled_font_size(element: TextElement, transform: ViewportTransform) -> float:
    return element.font_size * transform.scale_y


def paint_order(elements: Iterable[TextElement]) -> List[TextElement]:
    """Visible elements in the order they are painted (first is bottom-most)."""
    return [element for element in elements if element.visible]


def build_font(family: str, pixel_size: float, letter_spacing: float = 0.0) -> QFont:
    font = QFont(family)
    font.setPixelSize(max(1, int(round(pixel_size))))
    if letter_spacing:
        font.setLetterSpacing(QFont.SpacingType.AbsoluteSpacing, letter_spacing)
    return font


def layout_text(
    element: TextElement,
    origin: Tuple[float, float],
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> TextGeometry:
    """
    Build the glyph outline of an element with its top-left corner at origin.

    Glyphs are laid out once at the element's own font size and the outline is
    scaled afterwards, so geometry is linear in scale_x/scale_y and the export
    matches the preview.
    """
    text = apply_text_transform(element.text, element.text_transform)
    base_size = max(1, int(round(element.font_size)))
    # Qt pixel sizes are whole numbers; this factor restores fractional sizes.
    size_factor = element.font_size / base_size
    spacing = element.letter_spacing / size_factor if size_factor else 0.0
    font = build_font(element.font_family, base_size, spacing)
    metrics = QFontMetricsF(font)
    x, y = float(origin[0]), float(origin[1])

    path = QPainterPath()
    if text:
        # Top-of-text baseline: glyphs hang below the origin.
        path.addText(QPointF(0.0, metrics.ascent()), font, text)
        placement = QTransform()
        placement.translate(x, y)
        placement.scale(size_factor * scale_x, size_factor * scale_y)
        path = placement.map(path)

    font_size = element.font_size * scale_y
    return TextGeometry(
        text=text,
        font=font,
        font_size=font_size,
        origin=QPointF(x, y),
        width=metrics.horizontalAdvance(text) * size_factor * scale_x,
        height=font_size * element.line_height,
        path=path,
    )


def measure_text(element: TextElement, scale_x: float = 1.0, scale_y: float = 1.0) -> Tuple[float, float]:
    """Rendered (width, height) of an element, unrotated."""
    geometry = layout_text(element, (0.0, 0.0), scale_x, scale_y)
    return geometry.width, geometry.height


def paint_text_element(
    painter: QPainter,
    element: TextElement,
    origin: Tuple[float, float],
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> TextGeometry:
    """
    Paint one text layer: optional rotation, fill (with shadow), then stroke (no shadow).

    The painter state is restored before returning.
    """
    geometry = layout_text(element, origin, scale_x, scale_y)
    painter.save()
    try:
        painter.setOpacity(element.opacity)
        if element.rotation:
            center = geometry.center
            painter.translate(center)
            painter.rotate(element.rotation)
            painter.translate(-center.x(), -center.y())

        if element.shadow.enabled:
            _paint_shadow(painter, geometry.path, element.shadow, scale_x, scale_y)
        painter.fillPath(geometry.path, _fill_brush(element, geometry))

        if element.stroke_width > 0:
            pen = QPen(QColor(element.stroke))
            pen.setWidthF(element.stroke_width * scale_y)
            pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
            pen.setMiterLimit(10.0)
            painter.strokePath(geometry.path, pen)
    finally:
        painter.restore()
    return geometry


def _fill_brush(element: TextElement, geometry: TextGeometry) -> QBrush:
    if not element.gradient.enabled:
        return QBrush(QColor(element.color))
    start = geometry.origin
    gradient = QLinearGradient(start, QPointF(start.x() + geometry.width, start.y()))
    gradient.setColorAt(0.0, QColor(element.gradient.colors[0]))
    gradient.setColorAt(1.0, QColor(element.gradient.colors[1]))
    return QBrush(gradient)


def _paint_shadow(
    painter: QPainter,
    path: QPainterPath,
    shadow: Shadow,
    scale_x: float,
    scale_y: float,
) -> None:
    """Draw a blurred silhouette of path under the fill, offset in device space."""
    color = QColor(shadow.color)
    if path.isEmpty() or color.alpha() == 0:
        return
    blur = shadow.blur * scale_y
    offset_x = shadow.offset_x * scale_x
    offset_y = shadow.offset_y * scale_y

    # Offsets ignore the painter's rotation, so render the silhouette in device space.
    device_path = painter.transform().map(path)
    margin = math.ceil(blur * 1.5) + 2
    bounds = device_path.boundingRect().adjusted(-margin, -margin, margin, margin).toAlignedRect()
    if bounds.width() < 1 or bounds.height() < 1:
        return

    layer = QImage(bounds.size(), QImage.Format.Format_ARGB32_Premultiplied)
    layer.fill(Qt.GlobalColor.transparent)
    layer_painter = QPainter(layer)
    try:
        layer_painter.setRenderHints(RENDER_HINTS)
        layer_painter.translate(-bounds.x(), -bounds.y())
        layer_painter.fillPath(device_path, QColor(0, 0, 0))
    finally:
        layer_painter.end()

    coverage = raster_from_qimage(layer).pixels[:, :, 3].astype(np.float32)
    if blur > 0:
        coverage = cv2.GaussianBlur(coverage, (0, 0), sigmaX=blur / 2)
    alpha = np.clip(coverage * color.alphaF(), 0, 255).astype(np.uint8)
    tinted = np.empty(alpha.shape + (4,), dtype=np.uint8)
    tinted[:, :, 0] = color.red()
    tinted[:, :, 1] = color.green()
    tinted[:, :, 2] = color.blue()
    tinted[:, :, 3] = alpha

    painter.save()
    try:
        painter.resetTransform()
        painter.drawImage(QPointF(bounds.x() + offset_x, bounds.y() + offset_y), raster_to_qimage(Raster(tinted)))
    finally:
        painter.restore()


def composite(
    background: Raster,
    foreground: Raster,
    elements: Sequence[TextElement],
    transform: Optional[ViewportTransform],
) -> Raster:
    """
    Render the final image at the background's intrinsic resolution.

    Paint order: background, visible text layers in list order, then the
    foreground cutout stretched over the whole canvas. Pass a snapshot of the
    element list; the inputs are not modified.

    :raises InvalidImage: if either raster has an empty dimension.
    :raises InvalidTransform: if no viewport transform is available.
    """
    check_dimensions(background.width, background.height)
    check_dimensions(foreground.width, foreground.height)
    if transform is None:
        raise InvalidTransform("No viewport transform; the display container has no area")

    canvas = raster_to_qimage(background).convertToFormat(QImage.Format.Format_ARGB32_Premultiplied)
    visible = paint_order(elements)
    painter = QPainter(canvas)
    try:
        painter.setRenderHints(RENDER_HINTS)
        for element in visible:
            origin = transform.to_intrinsic(element.x, element.y)
            paint_text_element(painter, element, origin, transform.scale_x, transform.scale_y)
        painter.setOpacity(1.0)
        painter.drawImage(QRectF(0, 0, canvas.width(), canvas.height()), raster_to_qimage(foreground))
    finally:
        painter.end()

    logger.debug(
        "Composited %d text layers onto %dx%d image", len(visible), background.width, background.height
    )
    return raster_from_qimage(canvas)
