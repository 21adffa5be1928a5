"""Tests for worker bookkeeping in the main window."""

import pytest
from PySide6 import QtCore

from ui.main_window import MainWindow


class StubWorker(QtCore.QObject):
    finished = QtCore.Signal()


@pytest.fixture
def window(qapp):
    win = MainWindow()
    yield win
    win._worker = None
    win.close()


class TestWorkerFinished:
    def test_stale_worker_keeps_running_one(self, window):
        running = StubWorker()
        stale = StubWorker()
        running.finished.connect(window._on_worker_finished)
        stale.finished.connect(window._on_worker_finished)
        window._worker = running
        window._update_actions()

        stale.finished.emit()
        assert window._worker is running
        assert not window.upload_action.isEnabled()

        running.finished.emit()
        assert window._worker is None
        assert window.upload_action.isEnabled()
