"""Main application window for Behind Text Editor."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from PySide6 import QtCore, QtGui, QtWidgets

from config import APP_NAME, app_config
from core.errors import InvalidImage, InvalidTransform
from core.raster import Raster, load_raster
from core.text_layers import Subscription, TextLayerModel
from export.image_export import default_export_path, export_image
from settings_manager import update_settings
from ui.editor_canvas import EditorCanvas
from ui.layers_panel import LayersPanel
from ui.text_properties_panel import TextPropertiesPanel
from ui.workers import SegmentationWorker

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.webp *.tif *.tiff)"


class MainWindow(QtWidgets.QMainWindow):
    """Upload a photo, place text behind its subject and export the result."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(APP_NAME)
        self.resize(1280, 800)

        self.model = TextLayerModel()
        self.background: Optional[Raster] = None
        self.foreground: Optional[Raster] = None
        self._worker: Optional[SegmentationWorker] = None
        self._layers_signature: Optional[Tuple[Any, ...]] = None

        self.canvas = EditorCanvas(self)
        self.canvas.set_model(self.model)
        self.layers_panel = LayersPanel(self)
        self.properties_panel = TextPropertiesPanel(self)

        side = QtWidgets.QWidget(self)
        side_layout = QtWidgets.QVBoxLayout(side)
        side_layout.setContentsMargins(0, 0, 0, 0)
        side_layout.addWidget(self.layers_panel)
        scroll = QtWidgets.QScrollArea(side)
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.properties_panel)
        side_layout.addWidget(scroll, 1)

        splitter = QtWidgets.QSplitter(QtCore.Qt.Orientation.Horizontal, self)
        splitter.addWidget(self.canvas)
        splitter.addWidget(side)
        splitter.setStretchFactor(0, 1)
        splitter.setSizes([900, 360])
        self.setCentralWidget(splitter)

        self._create_actions()
        self._connect_signals()
        self._subscription: Optional[Subscription] = self.model.subscribe(self._refresh_panels)
        self._update_actions()
        self.statusBar().showMessage("Upload an image to begin")

    # -------------------- setup --------------------
    def _create_actions(self) -> None:
        toolbar = self.addToolBar("Main")
        toolbar.setMovable(False)

        self.upload_action = QtGui.QAction("Upload", self)
        self.upload_action.setShortcut(QtGui.QKeySequence.StandardKey.Open)
        self.upload_action.triggered.connect(self.upload_image)
        toolbar.addAction(self.upload_action)

        self.add_text_action = QtGui.QAction("Add Text", self)
        self.add_text_action.setShortcut(QtGui.QKeySequence("Ctrl+T"))
        self.add_text_action.triggered.connect(self.add_text)
        toolbar.addAction(self.add_text_action)

        self.duplicate_action = QtGui.QAction("Duplicate", self)
        self.duplicate_action.setShortcut(QtGui.QKeySequence("Ctrl+D"))
        self.duplicate_action.triggered.connect(self.duplicate_selected)
        toolbar.addAction(self.duplicate_action)

        self.delete_action = QtGui.QAction("Delete", self)
        self.delete_action.setShortcut(QtGui.QKeySequence.StandardKey.Delete)
        self.delete_action.triggered.connect(self.delete_selected)
        toolbar.addAction(self.delete_action)

        toolbar.addSeparator()
        self.download_action = QtGui.QAction("Download", self)
        self.download_action.setShortcut(QtGui.QKeySequence.StandardKey.Save)
        self.download_action.triggered.connect(self.download_image)
        toolbar.addAction(self.download_action)

    def _connect_signals(self) -> None:
        self.layers_panel.layerSelected.connect(self.model.select)
        self.layers_panel.visibilityChanged.connect(self.model.set_visible)
        self.layers_panel.duplicateRequested.connect(self.model.duplicate_element)
        self.layers_panel.deleteRequested.connect(self.model.remove_element)
        self.properties_panel.changed.connect(self._apply_properties)

    # -------------------- state sync --------------------
    def _is_processing(self) -> bool:
        return self._worker is not None

    def _update_actions(self) -> None:
        ready = self.background is not None and self.foreground is not None and not self._is_processing()
        has_selection = self.model.selected() is not None
        self.upload_action.setEnabled(not self._is_processing())
        self.add_text_action.setEnabled(ready)
        self.download_action.setEnabled(ready)
        self.duplicate_action.setEnabled(ready and has_selection)
        self.delete_action.setEnabled(ready and has_selection)

    def _refresh_panels(self) -> None:
        elements = self.model.snapshot()
        signature = (
            tuple((e.id, e.text, e.visible) for e in elements),
            self.model.selected_id,
        )
        # Drag moves only change positions; skip rebuilding the layer rows for them.
        if signature != self._layers_signature:
            self._layers_signature = signature
            self.layers_panel.set_elements(elements, self.model.selected_id)
        self.properties_panel.set_element(self.model.selected())
        self._update_actions()

    def _apply_properties(self, changes: Dict[str, Any]) -> None:
        element_id = self.properties_panel.element_id()
        if element_id is not None:
            self.model.update_element(element_id, **changes)

    # -------------------- actions --------------------
    def upload_image(self) -> None:
        start_dir = str(app_config.last_export_dir or Path.home())
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Upload image", start_dir, IMAGE_FILTER)
        if not path:
            return
        self.load_image(Path(path))

    def load_image(self, path: Path) -> None:
        """Decode an image, reset the layers and start background removal."""
        try:
            raster = load_raster(path)
        except (FileNotFoundError, InvalidImage) as exc:
            logger.warning("Failed to load image %s: %s", path, exc)
            QtWidgets.QMessageBox.critical(self, "Error", f"Failed to load image:\n{exc}")
            return

        self.background = raster
        self.foreground = None
        self.model.clear()
        self.canvas.set_images(raster, None)
        self._start_segmentation(raster)

    def _start_segmentation(self, raster: Raster) -> None:
        worker = SegmentationWorker(raster, self)
        worker.phaseChanged.connect(self.statusBar().showMessage)
        worker.finishedWithRaster.connect(self._on_segmented)
        worker.failed.connect(self._on_segmentation_failed)
        worker.finished.connect(self._on_worker_finished)
        self._worker = worker
        self._update_actions()
        worker.start()

    def _on_segmented(self, foreground: Raster) -> None:
        if self._worker is None or self._worker.raster is not self.background:
            return
        self.foreground = foreground
        self.canvas.set_foreground(foreground)
        self.statusBar().showMessage("Ready", 3000)

    def _on_segmentation_failed(self, message: str) -> None:
        logger.error("Background removal failed: %s", message)
        QtWidgets.QMessageBox.critical(self, "Error", f"Background removal failed:\n{message}")
        self.statusBar().clearMessage()

    def _on_worker_finished(self) -> None:
        worker = self.sender()
        if worker is not None:
            worker.deleteLater()
        # A stale worker finishing must not release the one still running.
        if worker is None or worker is not self._worker:
            return
        self._worker = None
        self._update_actions()

    def add_text(self) -> None:
        if self.foreground is None:
            return
        self.model.add_element(
            font_family=app_config.default_font_family,
            font_size=app_config.default_font_size,
        )

    def duplicate_selected(self) -> None:
        selected = self.model.selected_id
        if selected is not None:
            self.model.duplicate_element(selected)

    def delete_selected(self) -> None:
        selected = self.model.selected_id
        if selected is not None:
            self.model.remove_element(selected)

    def download_image(self) -> None:
        if self.background is None or self.foreground is None:
            return
        transform = self.canvas.current_transform()
        if transform is None:
            self.statusBar().showMessage("The canvas has no visible area; export deferred", 5000)
            return

        suggested = default_export_path(app_config.last_export_dir, app_config.export_filename)
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Download image", str(suggested), "PNG image (*.png)")
        if not path:
            return
        try:
            written = export_image(Path(path), self.background, self.foreground, self.model.snapshot(), transform)
        except InvalidTransform as exc:
            self.statusBar().showMessage(f"Export deferred: {exc}", 5000)
            return
        except (InvalidImage, OSError) as exc:
            logger.error("Export failed: %s", exc)
            QtWidgets.QMessageBox.critical(self, "Error", f"Failed to export image:\n{exc}")
            return

        app_config.last_export_dir = written.parent
        try:
            update_settings({"export": {"last_directory": str(written.parent)}})
        except OSError as exc:
            logger.warning("Could not remember export directory: %s", exc)
        self.statusBar().showMessage(f"Saved {written}", 5000)

    # -------------------- Qt events --------------------
    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        if self._worker is not None:
            self._worker.wait()
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        self.canvas.detach()
        super().closeEvent(event)
