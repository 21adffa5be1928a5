"""Shared fixtures: offscreen Qt application and small synthetic rasters."""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest
from PySide6 import QtGui, QtWidgets

from core.raster import Raster


@pytest.fixture(scope="session")
def qapp():
    """One QApplication for the whole run (fonts and painting need it)."""
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture
def has_fonts(qapp):
    """Skip glyph-dependent tests when the platform exposes no fonts."""
    if not QtGui.QFontDatabase.families():
        pytest.skip("no fonts available to render text")


def solid_raster(width, height, rgba):
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :] = rgba
    return Raster(pixels)


@pytest.fixture
def white_background():
    return solid_raster(100, 50, (255, 255, 255, 255))


@pytest.fixture
def transparent_foreground():
    return solid_raster(100, 50, (255, 255, 255, 0))
