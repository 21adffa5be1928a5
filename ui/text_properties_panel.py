from __future__ import annotations

from typing import Any, Dict, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from config import FONT_OPTIONS, MAX_UI_FONT_SIZE, MIN_UI_FONT_SIZE
from core.text_layers import TEXT_TRANSFORMS, TextElement


class ColorButton(QtWidgets.QPushButton):
    """Push button showing a swatch; opens a colour dialog when clicked."""

    colorChanged = QtCore.Signal(str)

    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self._color = "#000000"
        self.setFixedHeight(24)
        self.clicked.connect(self._pick)
        self._refresh()

    def color(self) -> str:
        return self._color

    def set_color(self, color: str) -> None:
        self._color = QtGui.QColor(color).name()
        self._refresh()

    def _refresh(self) -> None:
        self.setStyleSheet(f"background-color: {self._color}; border: 1px solid #555;")
        self.setToolTip(self._color)

    def _pick(self) -> None:
        picked = QtWidgets.QColorDialog.getColor(QtGui.QColor(self._color), self)
        if not picked.isValid():
            return
        self.set_color(picked.name())
        self.colorChanged.emit(self._color)


class TextPropertiesPanel(QtWidgets.QWidget):
    """
    Editors for every style field of the selected text layer.

    Emits ``changed`` with a partial update dict; nested shadow/gradient
    updates are sent as partial mappings.
    """

    changed = QtCore.Signal(dict)

    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self._element_id: Optional[str] = None
        layout = QtWidgets.QFormLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        self.text_edit = QtWidgets.QLineEdit(self)
        self.text_edit.textEdited.connect(lambda value: self._emit(text=value))
        layout.addRow("Text", self.text_edit)

        self.font_combo = QtWidgets.QComboBox(self)
        for family in FONT_OPTIONS:
            self.font_combo.addItem(family, family)
        self.font_combo.currentIndexChanged.connect(lambda _: self._emit(font_family=self.font_combo.currentData()))
        layout.addRow("Font", self.font_combo)

        self.size_spin = QtWidgets.QSpinBox(self)
        self.size_spin.setRange(MIN_UI_FONT_SIZE, MAX_UI_FONT_SIZE)
        self.size_spin.setSuffix(" px")
        self.size_spin.valueChanged.connect(lambda value: self._emit(font_size=float(value)))
        layout.addRow("Size", self.size_spin)

        self.color_button = ColorButton(self)
        self.color_button.colorChanged.connect(lambda value: self._emit(color=value))
        layout.addRow("Color", self.color_button)

        self.stroke_button = ColorButton(self)
        self.stroke_button.colorChanged.connect(lambda value: self._emit(stroke=value))
        layout.addRow("Outline", self.stroke_button)

        self.stroke_spin = QtWidgets.QSpinBox(self)
        self.stroke_spin.setRange(0, 20)
        self.stroke_spin.setSuffix(" px")
        self.stroke_spin.valueChanged.connect(lambda value: self._emit(stroke_width=float(value)))
        layout.addRow("Outline width", self.stroke_spin)

        self.opacity_slider = QtWidgets.QSlider(QtCore.Qt.Orientation.Horizontal, self)
        self.opacity_slider.setRange(0, 100)
        self.opacity_slider.valueChanged.connect(lambda value: self._emit(opacity=value / 100.0))
        layout.addRow("Opacity", self.opacity_slider)

        # Stored rotation is unconstrained; the editor offers one turn.
        self.rotation_spin = QtWidgets.QSpinBox(self)
        self.rotation_spin.setRange(-180, 180)
        self.rotation_spin.setSuffix("°")
        self.rotation_spin.valueChanged.connect(lambda value: self._emit(rotation=float(value)))
        layout.addRow("Rotation", self.rotation_spin)

        self.spacing_spin = QtWidgets.QDoubleSpinBox(self)
        self.spacing_spin.setRange(-20.0, 50.0)
        self.spacing_spin.setSingleStep(0.5)
        self.spacing_spin.setSuffix(" px")
        self.spacing_spin.valueChanged.connect(lambda value: self._emit(letter_spacing=value))
        layout.addRow("Letter spacing", self.spacing_spin)

        self.line_height_spin = QtWidgets.QDoubleSpinBox(self)
        self.line_height_spin.setRange(0.5, 3.0)
        self.line_height_spin.setSingleStep(0.1)
        self.line_height_spin.valueChanged.connect(lambda value: self._emit(line_height=value))
        layout.addRow("Line height", self.line_height_spin)

        self.transform_combo = QtWidgets.QComboBox(self)
        for mode in TEXT_TRANSFORMS:
            self.transform_combo.addItem(mode.capitalize(), mode)
        self.transform_combo.currentIndexChanged.connect(
            lambda _: self._emit(text_transform=self.transform_combo.currentData())
        )
        layout.addRow("Transform", self.transform_combo)

        layout.addRow(self._build_shadow_group())
        layout.addRow(self._build_gradient_group())

        layout.addItem(QtWidgets.QSpacerItem(0, 0, QtWidgets.QSizePolicy.Policy.Minimum, QtWidgets.QSizePolicy.Policy.Expanding))
        self.setEnabled(False)

    def _build_shadow_group(self) -> QtWidgets.QGroupBox:
        group = QtWidgets.QGroupBox("Shadow", self)
        group.setCheckable(True)
        group.toggled.connect(lambda on: self._emit(shadow={"enabled": on}))
        form = QtWidgets.QFormLayout(group)

        self.shadow_color_button = ColorButton(group)
        self.shadow_color_button.colorChanged.connect(lambda value: self._emit(shadow={"color": value}))
        form.addRow("Color", self.shadow_color_button)

        self.shadow_blur_spin = QtWidgets.QSpinBox(group)
        self.shadow_blur_spin.setRange(0, 50)
        self.shadow_blur_spin.valueChanged.connect(lambda value: self._emit(shadow={"blur": float(value)}))
        form.addRow("Blur", self.shadow_blur_spin)

        self.shadow_x_spin = QtWidgets.QSpinBox(group)
        self.shadow_x_spin.setRange(-50, 50)
        self.shadow_x_spin.valueChanged.connect(lambda value: self._emit(shadow={"offset_x": float(value)}))
        form.addRow("Offset X", self.shadow_x_spin)

        self.shadow_y_spin = QtWidgets.QSpinBox(group)
        self.shadow_y_spin.setRange(-50, 50)
        self.shadow_y_spin.valueChanged.connect(lambda value: self._emit(shadow={"offset_y": float(value)}))
        form.addRow("Offset Y", self.shadow_y_spin)

        self.shadow_group = group
        return group

    def _build_gradient_group(self) -> QtWidgets.QGroupBox:
        group = QtWidgets.QGroupBox("Gradient", self)
        group.setCheckable(True)
        group.toggled.connect(lambda on: self._emit(gradient={"enabled": on}))
        form = QtWidgets.QFormLayout(group)

        self.gradient_start_button = ColorButton(group)
        self.gradient_end_button = ColorButton(group)
        self.gradient_start_button.colorChanged.connect(lambda _: self._emit_gradient_colors())
        self.gradient_end_button.colorChanged.connect(lambda _: self._emit_gradient_colors())
        form.addRow("From", self.gradient_start_button)
        form.addRow("To", self.gradient_end_button)

        self.gradient_group = group
        return group

    # -------------------- public API --------------------
    def element_id(self) -> Optional[str]:
        return self._element_id

    def set_element(self, element: Optional[TextElement]) -> None:
        """Show an element's values without emitting change signals."""
        self._element_id = element.id if element is not None else None
        self.setEnabled(element is not None)
        if element is None:
            return

        widgets = self.findChildren(QtCore.QObject)
        blocked = [(w, w.blockSignals(True)) for w in widgets]
        try:
            self._set_text(element.text)
            self.font_combo.setCurrentIndex(max(0, self.font_combo.findData(element.font_family)))
            self.size_spin.setValue(int(round(element.font_size)))
            self.color_button.set_color(element.color)
            self.stroke_button.set_color(element.stroke)
            self.stroke_spin.setValue(int(round(element.stroke_width)))
            self.opacity_slider.setValue(int(round(element.opacity * 100)))
            self.rotation_spin.setValue(int(round(element.rotation)))
            self.spacing_spin.setValue(element.letter_spacing)
            self.line_height_spin.setValue(element.line_height)
            self.transform_combo.setCurrentIndex(max(0, self.transform_combo.findData(element.text_transform)))

            self.shadow_group.setChecked(element.shadow.enabled)
            self.shadow_color_button.set_color(element.shadow.color)
            self.shadow_blur_spin.setValue(int(round(element.shadow.blur)))
            self.shadow_x_spin.setValue(int(round(element.shadow.offset_x)))
            self.shadow_y_spin.setValue(int(round(element.shadow.offset_y)))

            self.gradient_group.setChecked(element.gradient.enabled)
            self.gradient_start_button.set_color(element.gradient.colors[0])
            self.gradient_end_button.set_color(element.gradient.colors[1])
        finally:
            for widget, was_blocked in blocked:
                widget.blockSignals(was_blocked)

    def _set_text(self, text: str) -> None:
        # Keep the caret at the same offset into the text when the content changes.
        if self.text_edit.text() == text:
            return
        cursor = self.text_edit.cursorPosition()
        self.text_edit.setText(text)
        self.text_edit.setCursorPosition(min(cursor, len(text)))

    def _emit(self, **changes: Any) -> None:
        if self._element_id is None:
            return
        self.changed.emit(dict(changes))

    def _emit_gradient_colors(self) -> None:
        colors = [self.gradient_start_button.color(), self.gradient_end_button.color()]
        self._emit(gradient={"colors": colors})
