"""Shared fixtures. Widgets render offscreen so the suite runs headless."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from circular_ranges.models.editor import RingEditor
from circular_ranges.utils.config import EditorConfig


@pytest.fixture(scope="session")
def qapp():
    """One QApplication for the whole session."""
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def clock_config():
    """24 hour clock with a 10 minute separation, as the collision examples use."""
    return EditorConfig.from_dict({"min_separation": 600})


@pytest.fixture
def editor(qapp):
    return RingEditor()


@pytest.fixture
def signal_log():
    """Connect editor signals to a list of event names."""

    def _attach(editor):
        events = []
        editor.valueChanged.connect(lambda: events.append("changed"))
        editor.editingBegan.connect(lambda: events.append("began"))
        editor.editingEnded.connect(lambda: events.append("ended"))
        return events

    return _attach
