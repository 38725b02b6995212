"""Clock demo: a 24 hour circular slider next to the list of selected ranges."""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from PySide6.QtCore import QTime, QTimer, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from circular_ranges.models.editor import RingEditor
from circular_ranges.ui.circular_range_slider import CircularRangeSlider
from circular_ranges.utils.config import EditorConfig

ROUNDING_MINUTES = 5


def round_up_to_minutes(value: float, step: int = ROUNDING_MINUTES) -> float:
    """Round a value in seconds up to the next ``step`` minute mark."""
    minutes = value / 60.0
    return math.ceil(minutes / step) * step * 60.0


def format_time_of_day(value: float) -> str:
    return QTime(0, 0).addSecs(int(round_up_to_minutes(value))).toString("hh:mm AP")


class RangeRow(QWidget):
    """One list row: the formatted range and a delete button."""

    deleteRequested = Signal(object)

    def __init__(self, value_range: Tuple[float, float], parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.value_range = value_range
        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 2, 6, 2)
        start, end = value_range
        self.label = QLabel(f"{format_time_of_day(start)} - {format_time_of_day(end)}")
        self.delete_button = QPushButton("Delete")
        self.delete_button.clicked.connect(lambda: self.deleteRequested.emit(self.value_range))
        layout.addWidget(self.label)
        layout.addStretch()
        layout.addWidget(self.delete_button)


class ClockWindow(QWidget):
    def __init__(self, config: Optional[EditorConfig] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setWindowTitle("Circular Ranges")
        self.editor = RingEditor(config, parent=self)
        self.slider = CircularRangeSlider(self.editor, parent=self)
        self.range_list = QListWidget()
        self.summary_label = QLabel()

        side = QVBoxLayout()
        side.addWidget(self.summary_label)
        side.addWidget(self.range_list)

        layout = QHBoxLayout(self)
        layout.addWidget(self.slider, 3)
        layout.addLayout(side, 2)

        self.slider.rangesChanged.connect(self.refresh)
        self.refresh(self.editor.current_ranges())

    def refresh(self, ranges: List[Tuple[float, float]]):
        self.range_list.clear()
        explicit = not self.editor.ring.is_empty
        for value_range in ranges:
            item = QListWidgetItem(self.range_list)
            row = RangeRow(value_range)
            # The implicit range is the fallback and cannot be deleted
            row.delete_button.setEnabled(explicit)
            row.deleteRequested.connect(self._on_delete_requested)
            item.setSizeHint(row.sizeHint())
            self.range_list.setItemWidget(item, row)
        self.summary_label.setText(f"{len(ranges)} range(s) - long press an arc to split it")

    def _on_delete_requested(self, value_range):
        # Defer: the refresh that follows removal deletes the row whose button fired
        target = (float(value_range[0]), float(value_range[1]))
        QTimer.singleShot(0, lambda: self.editor.remove_range(target))
