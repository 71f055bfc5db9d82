"""
Shared fixtures.

Qt runs on the offscreen platform so the suite works on headless CI.
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from thoughtmap.config import AppConfig
from thoughtmap.model.state import MindMapViewModel


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def config():
    """Animations off so removals are immediate and sprites are full size."""
    return AppConfig(animations_enabled=False)


@pytest.fixture
def view_model():
    return MindMapViewModel()


class SignalRecorder:
    """Collects the arguments of every emission of a Qt signal."""

    def __init__(self, signal):
        self.calls = []
        signal.connect(self._record)

    def _record(self, *args):
        self.calls.append(args)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def recorder():
    return SignalRecorder
