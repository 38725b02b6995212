"""Interactive editing of a ring of ranges: drag, split and remove."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from circular_ranges.models.collision import CollisionResolver, Direction, Resolution, can_split
from circular_ranges.models.interval_ring import Endpoint, Interval, IntervalRing, NodeHandle
from circular_ranges.utils.config import EditorConfig

logger = logging.getLogger(__name__)


class SelectedEndpoint(Enum):
    """Thumb picked up by the current drag."""

    RING_START = "ring_start"  # start of the implicit range
    RING_END = "ring_end"  # end of the implicit range
    INTERVAL_START = "interval_start"
    INTERVAL_END = "interval_end"
    NONE = "none"

    @property
    def endpoint(self) -> Optional[Endpoint]:
        if self in (SelectedEndpoint.RING_START, SelectedEndpoint.INTERVAL_START):
            return Endpoint.START
        if self in (SelectedEndpoint.RING_END, SelectedEndpoint.INTERVAL_END):
            return Endpoint.END
        return None

    @property
    def is_implicit(self) -> bool:
        return self in (SelectedEndpoint.RING_START, SelectedEndpoint.RING_END)


@dataclass(frozen=True)
class Thumb:
    """A draggable boundary as offered to the renderer for drawing and hit-testing."""

    selection: SelectedEndpoint
    value: float
    handle: Optional[NodeHandle] = None


HitTest = Callable[[Thumb], bool]


class RingEditor(QObject):
    """Owns the ring and turns gesture events into ring mutations.

    Falls back to a single implicit range while the ring holds no intervals.
    """

    valueChanged = Signal()
    editingBegan = Signal()
    editingEnded = Signal()

    def __init__(self, config: Optional[EditorConfig] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.config = config or EditorConfig()
        self.space = self.config.value_space()
        self.resolver = CollisionResolver(self.space, self.config.min_separation)
        self.ring = IntervalRing()
        self._implicit = Interval(
            self.space.normalize(self.config.implicit_start),
            self.space.normalize(self.config.implicit_end),
        )
        self._selected_interval: Optional[NodeHandle] = None
        self._selected_endpoint = SelectedEndpoint.NONE
        self.last_resolution: Optional[Resolution] = None

    # --------------- State ---------------
    @property
    def selected_endpoint(self) -> SelectedEndpoint:
        return self._selected_endpoint

    @property
    def selected_interval(self) -> Optional[NodeHandle]:
        return self._selected_interval

    @property
    def implicit_range(self) -> Tuple[float, float]:
        return self._implicit.as_tuple()

    def selected_value(self) -> Optional[float]:
        """Current value of the thumb being dragged, if any."""
        endpoint = self._selected_endpoint.endpoint
        if endpoint is None:
            return None
        if self._selected_endpoint.is_implicit:
            return self._implicit.value_at(endpoint)
        if self._selected_interval is None or self._selected_interval not in self.ring:
            return None
        return self.ring.interval(self._selected_interval).value_at(endpoint)

    def current_ranges(self) -> List[Tuple[float, float]]:
        """Ranges in ring order, or the implicit range when the ring is empty."""
        if self.ring.is_empty:
            return [self._implicit.as_tuple()]
        return [interval.as_tuple() for interval in self.ring.intervals()]

    def thumbs(self) -> List[Thumb]:
        """Candidate thumbs in hit-test order (start before end, ring order)."""
        if self.ring.is_empty:
            return [
                Thumb(SelectedEndpoint.RING_START, self._implicit.start),
                Thumb(SelectedEndpoint.RING_END, self._implicit.end),
            ]
        result = []
        for handle in self.ring.handles():
            interval = self.ring.interval(handle)
            result.append(Thumb(SelectedEndpoint.INTERVAL_START, interval.start, handle))
            result.append(Thumb(SelectedEndpoint.INTERVAL_END, interval.end, handle))
        return result

    # --------------- Programmatic edits ---------------
    def set_implicit_range(self, start: float, end: float) -> None:
        self._implicit.start = self.space.normalize(start)
        self._implicit.end = self.space.normalize(end)
        self.valueChanged.emit()

    def reset(self, ranges: Iterable[Tuple[float, float]]) -> None:
        """Replace every interval. Ranges are put in clockwise order of their starts."""
        self._clear_selection()
        self.ring.clear()
        normalized = sorted(
            (self.space.normalize(start), self.space.normalize(end)) for start, end in ranges
        )
        for start, end in normalized:
            self.ring.append(Interval(start, end))
        logger.info(f"Ring reset with {len(self.ring)} interval(s)")
        self.valueChanged.emit()

    # --------------- Drag lifecycle ---------------
    def _default_hit_test(self, touch_value: float) -> HitTest:
        tolerance = self.config.thumb_tolerance_degrees

        def _hit(thumb: Thumb) -> bool:
            return self.space.angular_distance(thumb.value, touch_value) < tolerance

        return _hit

    def begin_drag(self, touch_value: float, hit_test: Optional[HitTest] = None) -> SelectedEndpoint:
        """Pick the first thumb under the touch. Returns NONE when nothing was hit."""
        self._clear_selection()
        hit = hit_test or self._default_hit_test(touch_value)
        for thumb in self.thumbs():
            if hit(thumb):
                self._selected_endpoint = thumb.selection
                self._selected_interval = thumb.handle
                break
        if self._selected_endpoint is SelectedEndpoint.NONE:
            logger.debug(f"No thumb under {touch_value}")
            return SelectedEndpoint.NONE
        logger.debug(f"Drag began on {self._selected_endpoint.value} ({self._selected_interval})")
        self.editingBegan.emit()
        return self._selected_endpoint

    def continue_drag(self, touch_value: float) -> bool:
        """Move the selected boundary to ``touch_value`` and restore separation.

        Returns True when the ring changed. Ignored when nothing is selected.
        """
        selection = self._selected_endpoint
        endpoint = selection.endpoint
        if endpoint is None:
            return False
        if selection.is_implicit:
            ring = IntervalRing()
            pivot = ring.append(self._implicit)
        else:
            ring = self.ring
            pivot = self._selected_interval
            if pivot is None or pivot not in ring:
                logger.debug("Selected interval no longer exists; drag ignored")
                self._clear_selection()
                return False
        old_value = ring.interval(pivot).value_at(endpoint)
        new_value = self.space.normalize(touch_value)
        resolution = self.resolver.resolve(ring, pivot, endpoint, old_value, new_value)
        if resolution.direction is Direction.STATIONARY:
            return False
        self.last_resolution = resolution
        logger.debug(
            f"{selection.value} {old_value} -> {new_value} ({resolution.direction.value}), "
            f"{len(resolution.pushes)} push(es)"
        )
        self.valueChanged.emit()
        return True

    def end_drag(self) -> None:
        was_dragging = self._selected_endpoint is not SelectedEndpoint.NONE
        self._clear_selection()
        if was_dragging:
            self.editingEnded.emit()

    def _clear_selection(self) -> None:
        self._selected_interval = None
        self._selected_endpoint = SelectedEndpoint.NONE

    # --------------- Split & remove ---------------
    def try_split(self, touch_value: float) -> bool:
        """Carve an empty gap around the middle of the arc under ``touch_value``.

        Arcs narrower than the split threshold are left alone.
        """
        value = self.space.normalize(touch_value)
        threshold = self.config.split_threshold
        half_width = self.config.split_half_width

        if self.ring.is_empty:
            source = self._implicit
            if not self.space.contains(source.start, source.end, value):
                return False
            if not can_split(self.space, source.start, source.end, threshold):
                logger.debug(f"Implicit range {source.as_tuple()} too narrow to split")
                return False
            middle = self.space.midpoint(source.start, source.end)
            self.ring.append(Interval(source.start, self.space.wrap_subtract(middle, half_width)))
            self.ring.append(Interval(self.space.wrap_add(middle, half_width), source.end))
        else:
            handle = self.ring.find(
                lambda interval: self.space.contains(interval.start, interval.end, value)
            )
            if handle is None:
                return False
            interval = self.ring.interval(handle)
            if not can_split(self.space, interval.start, interval.end, threshold):
                logger.debug(f"Range {interval.as_tuple()} too narrow to split")
                return False
            middle = self.space.midpoint(interval.start, interval.end)
            tail = Interval(self.space.wrap_add(middle, half_width), interval.end)
            interval.end = self.space.wrap_subtract(middle, half_width)
            self.ring.insert_after(tail, handle)
        logger.info(f"Split at {value}; ring now holds {len(self.ring)} interval(s)")
        self.valueChanged.emit()
        return True

    def remove_range(self, target: Tuple[float, float]) -> bool:
        """Remove the ranges inside ``target``. An emptied ring falls back to the implicit range."""
        if self.ring.is_empty:
            return False
        start, end = target
        removed = self.ring.remove_range(start, end)
        if not removed:
            return False
        if self._selected_interval is not None and self._selected_interval not in self.ring:
            self._clear_selection()
        if self.ring.is_empty:
            logger.info("Last range removed; back to the implicit range")
        else:
            logger.info(f"Removed {len(removed)} range(s); {len(self.ring)} left")
        self.valueChanged.emit()
        return True
