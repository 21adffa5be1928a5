from __future__ import annotations

from typing import Dict, Optional, Sequence

from PySide6 import QtCore, QtWidgets

from core.text_layers import TextElement

# Characters shown for a layer label before eliding.
LABEL_LENGTH = 24


class LayersPanel(QtWidgets.QWidget):
    """List of text layers in paint order with visibility, duplicate and delete controls."""

    layerSelected = QtCore.Signal(str)
    visibilityChanged = QtCore.Signal(str, bool)
    duplicateRequested = QtCore.Signal(str)
    deleteRequested = QtCore.Signal(str)

    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self._rows: Dict[str, QtWidgets.QWidget] = {}
        self._select_buttons: Dict[str, QtWidgets.QRadioButton] = {}
        self._group = QtWidgets.QButtonGroup(self)
        self._group.setExclusive(True)

        outer = QtWidgets.QVBoxLayout(self)
        outer.setContentsMargins(6, 6, 6, 6)
        outer.setSpacing(4)

        title = QtWidgets.QLabel("Layers", self)
        title.setStyleSheet("font-weight: bold;")
        outer.addWidget(title)

        self._rows_layout = QtWidgets.QVBoxLayout()
        self._rows_layout.setContentsMargins(0, 0, 0, 0)
        self._rows_layout.setSpacing(2)
        outer.addLayout(self._rows_layout)

        self._empty_label = QtWidgets.QLabel("No text layers yet", self)
        self._empty_label.setEnabled(False)
        outer.addWidget(self._empty_label)
        outer.addStretch(1)

    def set_elements(self, elements: Sequence[TextElement], selected_id: Optional[str]) -> None:
        """Rebuild the rows; topmost layer is listed first."""
        self._clear_rows()
        for element in reversed(list(elements)):
            self._add_row(element, element.id == selected_id)
        self._empty_label.setVisible(not elements)

    def _clear_rows(self) -> None:
        for radio in self._select_buttons.values():
            self._group.removeButton(radio)
        for row in self._rows.values():
            self._rows_layout.removeWidget(row)
            row.deleteLater()
        self._rows.clear()
        self._select_buttons.clear()

    def _add_row(self, element: TextElement, selected: bool) -> None:
        row_widget = QtWidgets.QWidget(self)
        row = QtWidgets.QHBoxLayout(row_widget)
        row.setContentsMargins(0, 0, 0, 0)
        row.setSpacing(6)

        eye_btn = QtWidgets.QToolButton(row_widget)
        eye_btn.setCheckable(True)
        eye_btn.setChecked(element.visible)
        eye_btn.setAutoRaise(True)
        eye_btn.setText("👁" if element.visible else "–")
        eye_btn.setToolTip("Toggle layer visibility")
        eye_btn.toggled.connect(lambda checked, k=element.id: self.visibilityChanged.emit(k, checked))

        label = element.text if len(element.text) <= LABEL_LENGTH else element.text[: LABEL_LENGTH - 1] + "…"
        radio = QtWidgets.QRadioButton(label or "(empty)", row_widget)
        radio.setChecked(selected)
        radio.toggled.connect(lambda checked, k=element.id: checked and self.layerSelected.emit(k))
        self._group.addButton(radio)

        dup_btn = QtWidgets.QToolButton(row_widget)
        dup_btn.setAutoRaise(True)
        dup_btn.setText("⧉")
        dup_btn.setToolTip("Duplicate layer")
        dup_btn.clicked.connect(lambda _=False, k=element.id: self.duplicateRequested.emit(k))

        del_btn = QtWidgets.QToolButton(row_widget)
        del_btn.setAutoRaise(True)
        del_btn.setIcon(self.style().standardIcon(QtWidgets.QStyle.StandardPixmap.SP_TrashIcon))
        del_btn.setToolTip("Delete layer")
        del_btn.clicked.connect(lambda _=False, k=element.id: self.deleteRequested.emit(k))

        row.addWidget(eye_btn)
        row.addWidget(radio, 1)
        row.addWidget(dup_btn)
        row.addWidget(del_btn)
        self._rows_layout.addWidget(row_widget)
        self._rows[element.id] = row_widget
        self._select_buttons[element.id] = radio
