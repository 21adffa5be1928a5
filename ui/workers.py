"""Background threads for long-running image work."""
from __future__ import annotations

from PySide6 import QtCore

from core.errors import InvalidImage
from core.raster import Raster
from core.segmenter import remove_background


class SegmentationWorker(QtCore.QThread):
    """Runs background removal off the UI thread and reports its phases."""

    phaseChanged = QtCore.Signal(str)
    finishedWithRaster = QtCore.Signal(object)
    failed = QtCore.Signal(str)

    def __init__(self, raster: Raster, parent: QtCore.QObject | None = None) -> None:
        super().__init__(parent)
        self.raster = raster

    def run(self) -> None:  # noqa: D401 - Qt thread
        try:
            foreground = remove_background(self.raster, on_phase=self.phaseChanged.emit)
        except InvalidImage as exc:
            self.failed.emit(str(exc))
            return
        self.finishedWithRaster.emit(foreground)
