"""Flat ring of boundary markers used to push a run of intervals as one sequence."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from circular_ranges.models.errors import RingInvariantError
from circular_ranges.models.interval_ring import Endpoint, IntervalRing, NodeHandle


class MarkerRole(Enum):
    """Outer boundary tags of a flattened run."""

    START = "start"  # first start of the run
    END = "end"  # last end of the run
    NONE = "none"  # interior boundary


@dataclass
class PointMarker:
    value: float
    role: MarkerRole = MarkerRole.NONE
    # Where the marker came from, so the run can be written back
    handle: Optional[NodeHandle] = None
    endpoint: Optional[Endpoint] = None


class PointRing:
    """Ordered circular sequence of plain values. Built per resolution pass, then discarded."""

    def __init__(self):
        self._markers: List[PointMarker] = []

    @classmethod
    def from_run(cls, ring: IntervalRing, pivot: NodeHandle) -> "PointRing":
        """Flatten the whole ring clockwise from ``pivot``: start, end, start, end, ..."""
        points = cls()

        def _flatten(handle: NodeHandle) -> bool:
            interval = ring.interval(handle)
            points.append(interval.start, handle=handle, endpoint=Endpoint.START)
            points.append(interval.end, handle=handle, endpoint=Endpoint.END)
            return True

        ring.traverse(_flatten, start=pivot, forward=True)
        if points._markers:
            points._markers[0].role = MarkerRole.START
            points._markers[-1].role = MarkerRole.END
        return points

    def __len__(self) -> int:
        return len(self._markers)

    def __getitem__(self, index: int) -> PointMarker:
        return self._markers[index]

    @property
    def values(self) -> List[float]:
        return [marker.value for marker in self._markers]

    def append(
        self,
        value: float,
        role: MarkerRole = MarkerRole.NONE,
        handle: Optional[NodeHandle] = None,
        endpoint: Optional[Endpoint] = None,
    ) -> int:
        self._markers.append(PointMarker(value, role, handle, endpoint))
        return len(self._markers) - 1

    def index_of(self, handle: NodeHandle, endpoint: Endpoint) -> int:
        for index, marker in enumerate(self._markers):
            if marker.handle == handle and marker.endpoint is endpoint:
                return index
        raise RingInvariantError(f"no marker for {endpoint.value} of node {handle}")

    def next_index(self, index: int) -> int:
        return (index + 1) % len(self._markers)

    def previous_index(self, index: int) -> int:
        return (index - 1) % len(self._markers)

    def walk(self, start: int, forward: bool = True) -> Iterator[int]:
        """Yield marker indices after ``start`` in the given direction, nearest first.

        The walk ends just before it would come back to ``start``.
        """
        if not self._markers:
            return
        step = self.next_index if forward else self.previous_index
        current = step(start)
        while current != start:
            yield current
            current = step(current)

    def pairs(self) -> List[Tuple[PointMarker, PointMarker]]:
        """Re-pair the flat sequence into (start, end) boundaries in original order."""
        count = len(self._markers)
        if count % 2:
            raise RingInvariantError(f"cannot pair an odd number of boundary markers ({count})")
        if count and (
            self._markers[0].role is not MarkerRole.START
            or self._markers[-1].role is not MarkerRole.END
        ):
            raise RingInvariantError("run must open with a start marker and close with an end marker")
        result = []
        for i in range(0, count, 2):
            start, end = self._markers[i], self._markers[i + 1]
            if start.handle != end.handle:
                raise RingInvariantError(f"markers {i} and {i + 1} belong to different intervals")
            result.append((start, end))
        return result

    def commit(self, ring: IntervalRing) -> int:
        """Write marker values back onto the originating ring nodes. Returns intervals touched."""
        touched = 0
        for start, end in self.pairs():
            if start.handle is None:
                raise RingInvariantError("marker has no originating node")
            interval = ring.interval(start.handle)
            if interval.start != start.value or interval.end != end.value:
                interval.start = start.value
                interval.end = end.value
                touched += 1
        return touched
