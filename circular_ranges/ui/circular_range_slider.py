"""Circular range slider widget drawing a RingEditor and feeding it gestures."""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF, QSize, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from circular_ranges.models.editor import RingEditor, SelectedEndpoint, Thumb
from circular_ranges.models.interval_ring import Endpoint, NodeHandle

ThumbKey = Tuple[SelectedEndpoint, Optional[NodeHandle]]


class CircularRangeSlider(QWidget):
    """Draws every range as an arc with a start and an end thumb.

    The widget owns only screen geometry: thumb centres from the last paint, the
    press position and the long-press timer. Values live in the editor.
    """

    rangesChanged = Signal(object)  # list of (start, end)
    interactionFinished = Signal(object)

    def __init__(self, editor: Optional[RingEditor] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.editor = editor or RingEditor(parent=self)
        self._line_width: float = 26.0
        self._track_width: float = 36.0
        self._thumb_radius: float = 13.0
        self._thumb_centers: Dict[ThumbKey, QPointF] = {}
        self._press_pos: Optional[QPointF] = None

        self._long_press_timer = QTimer(self)
        self._long_press_timer.setSingleShot(True)
        self._long_press_timer.setInterval(int(self.editor.config.long_press_ms))
        self._long_press_timer.timeout.connect(self._on_long_press)

        self.editor.valueChanged.connect(self._on_value_changed)
        self.setMinimumSize(160, 160)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMouseTracking(False)

    def ranges(self) -> List[Tuple[float, float]]:
        return self.editor.current_ranges()

    def sizeHint(self):
        return QSize(320, 320)

    # --------------- Geometry ---------------
    def _center(self) -> QPointF:
        return QRectF(self.contentsRect()).center()

    def _radius(self) -> float:
        rect = self.contentsRect()
        margin = max(self._track_width, self._thumb_radius * 2) / 2.0 + 2.0
        return max(1.0, min(rect.width(), rect.height()) / 2.0 - margin)

    def _point_for_value(self, value: float) -> QPointF:
        angle = self.editor.space.to_angle(value)
        center = self._center()
        radius = self._radius()
        return QPointF(center.x() + radius * math.cos(angle), center.y() + radius * math.sin(angle))

    def _value_for_point(self, pos: QPointF, reference: Optional[float] = None) -> float:
        center = self._center()
        angle = math.atan2(pos.y() - center.y(), pos.x() - center.x())
        return self.editor.space.value_for_angle(angle, reference)

    def _thumb_key(self, thumb: Thumb) -> ThumbKey:
        return (thumb.selection, thumb.handle)

    def _thumb_contains(self, thumb: Thumb, pos: QPointF) -> bool:
        """The touch hits a thumb inside its rect, or within the angular tolerance of its centre."""
        thumb_center = self._thumb_centers.get(self._thumb_key(thumb))
        if thumb_center is None:
            thumb_center = self._point_for_value(thumb.value)
        r = self._thumb_radius
        rect = QRectF(thumb_center.x() - r, thumb_center.y() - r, r * 2, r * 2)
        if rect.contains(pos):
            return True
        center = self._center()
        a1 = math.atan2(thumb_center.y() - center.y(), thumb_center.x() - center.x())
        a2 = math.atan2(pos.y() - center.y(), pos.x() - center.x())
        diff = abs(math.degrees(a1 - a2)) % 360.0
        return min(diff, 360.0 - diff) < self.editor.config.thumb_tolerance_degrees

    def _is_in_arc_band(self, pos: QPointF) -> bool:
        center = self._center()
        distance = math.hypot(pos.x() - center.x(), pos.y() - center.y())
        radius = self._radius()
        return radius - self._line_width / 2.0 <= distance <= radius + self._line_width / 2.0

    # --------------- Painting ---------------
    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        center = self._center()
        radius = self._radius()
        circle = QRectF(center.x() - radius, center.y() - radius, radius * 2, radius * 2)
        space = self.editor.space
        round_span = space.span / int(space.rounds)

        # Track
        painter.setPen(QPen(QColor("#444444"), self._track_width))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawEllipse(circle)

        # Arcs: Qt angles run counter-clockwise from 3 o'clock in 1/16th degrees
        arc_pen = QPen(QColor(54, 171, 59, 115), self._line_width)
        arc_pen.setCapStyle(Qt.PenCapStyle.FlatCap)
        painter.setPen(arc_pen)
        for start, end in self.editor.current_ranges():
            start_deg = -space.to_degrees(start)
            span_deg = -space.forward_distance(start, end) / round_span * 360.0
            painter.drawArc(circle, int(start_deg * 16), int(span_deg * 16))

        # Thumbs
        self._thumb_centers.clear()
        selected = (self.editor.selected_endpoint, self.editor.selected_interval)
        for thumb in self.editor.thumbs():
            key = self._thumb_key(thumb)
            point = self._point_for_value(thumb.value)
            self._thumb_centers[key] = point
            is_start = thumb.selection.endpoint is Endpoint.START
            stroke = QColor("#15c915") if is_start else QColor("#2a82da")
            if key == selected:
                stroke = QColor("#a020f0")
            painter.setPen(QPen(stroke, 2))
            painter.setBrush(QColor("#dddddd"))
            painter.drawEllipse(point, self._thumb_radius, self._thumb_radius)
        painter.end()

    # --------------- Interaction ---------------
    def mousePressEvent(self, event):
        pos = event.position()
        self._press_pos = QPointF(pos)
        touch_value = self._value_for_point(pos)
        selection = self.editor.begin_drag(
            touch_value, hit_test=lambda thumb: self._thumb_contains(thumb, pos)
        )
        if selection is SelectedEndpoint.NONE and self._is_in_arc_band(pos):
            self._long_press_timer.start()
        event.accept()

    def mouseMoveEvent(self, event):
        pos = event.position()
        if self._long_press_timer.isActive() and self._press_pos is not None:
            moved = math.hypot(pos.x() - self._press_pos.x(), pos.y() - self._press_pos.y())
            if moved > self._thumb_radius:
                self._long_press_timer.stop()
        if self.editor.selected_endpoint is SelectedEndpoint.NONE:
            return
        value = self._value_for_point(pos, reference=self.editor.selected_value())
        self.editor.continue_drag(value)
        event.accept()

    def mouseReleaseEvent(self, event):
        self._long_press_timer.stop()
        self._press_pos = None
        was_dragging = self.editor.selected_endpoint is not SelectedEndpoint.NONE
        self.editor.end_drag()
        if was_dragging:
            self.interactionFinished.emit(self.editor.current_ranges())
        self.update()
        event.accept()

    def _on_long_press(self):
        if self._press_pos is None:
            return
        self.editor.try_split(self._value_for_point(self._press_pos))

    def _on_value_changed(self):
        self.update()
        self.rangesChanged.emit(self.editor.current_ranges())
