"""Minimum-separation propagation around an interval ring.

Dragging one boundary can only be blocked by the nearest boundary in the direction
of motion. When that neighbour is pushed, the boundary beyond it may need pushing
too, alternating between the gap separating two intervals and the span of one
interval, until a gap absorbs the push or the wave gets back to the moved boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

from circular_ranges.models.errors import ConfigurationError, RingInvariantError
from circular_ranges.models.interval_ring import Endpoint, IntervalRing, NodeHandle
from circular_ranges.models.point_ring import PointRing
from circular_ranges.models.value_space import ValueSpace

logger = logging.getLogger(__name__)


class Direction(Enum):
    CLOCKWISE = "clockwise"
    COUNTERCLOCKWISE = "counterclockwise"
    STATIONARY = "stationary"


class Strategy(Enum):
    """How the boundaries beyond the moved one are walked."""

    INTERVALS = "intervals"  # node by node on the IntervalRing
    POINTS = "points"  # flattened into a PointRing, then written back


class StepKind(Enum):
    GAP = "gap"  # between two neighbouring intervals
    SPAN = "span"  # inside one interval


@dataclass
class Push:
    handle: NodeHandle
    endpoint: Endpoint
    kind: StepKind
    old_value: float
    new_value: float


@dataclass
class Resolution:
    direction: Direction
    pushes: List[Push] = field(default_factory=list)
    # Intervals inspected by the pass, pivot included
    visited: int = 0
    # The wave came back to the moved boundary with no slack left
    packed: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.pushes)


def can_split(space: ValueSpace, start: float, end: float, threshold: float) -> bool:
    """Whether the arc from ``start`` to ``end`` is wide enough to be subdivided."""
    return space.forward_distance(start, end) >= threshold


class _Front:
    """Leading boundary of a propagation wave: where it was and where it is now."""

    def __init__(self, resolver: "CollisionResolver", old: float, new: float, forward: bool):
        self.resolver = resolver
        self.old = old
        self.new = new
        self.forward = forward

    def advance(self, target: float) -> Optional[float]:
        """Return the pushed value for ``target``, or None when it is out of reach."""
        if not self.resolver.collides(self.old, self.new, target, self.forward):
            return None
        pushed = self.resolver.push_value(self.new, self.forward)
        self.old, self.new = target, pushed
        return pushed


class CollisionResolver:
    def __init__(self, space: ValueSpace, min_separation: float):
        min_separation = float(min_separation)
        if min_separation <= 0:
            raise ConfigurationError(f"min_separation must be positive, got {min_separation}")
        if min_separation > space.span:
            raise ConfigurationError(
                f"min_separation ({min_separation}) exceeds the value span ({space.span})"
            )
        self.space = space
        self.min_separation = min_separation

    # --------------- Primitives ---------------
    def direction(self, old_value: float, new_value: float) -> Direction:
        delta = self.space.signed_delta(old_value, new_value)
        if abs(delta) <= self.space.epsilon:
            return Direction.STATIONARY
        return Direction.CLOCKWISE if delta > 0 else Direction.COUNTERCLOCKWISE

    def collides(self, leader_old: float, leader_new: float, target: float, forward: bool) -> bool:
        """Whether ``target`` is within the minimum separation of the leading boundary.

        A target the leader swept over during its move collides as well, so a coarse
        drag step cannot tunnel through a neighbour.
        """
        if forward:
            swept = self.space.contains(leader_old, leader_new, target)
        else:
            swept = self.space.contains(leader_new, leader_old, target)
        distance = self.space.distance(leader_new, target)
        return swept or distance <= self.min_separation + self.space.epsilon

    def push_value(self, leader: float, forward: bool) -> float:
        if forward:
            return self.space.wrap_add(leader, self.min_separation)
        return self.space.wrap_subtract(leader, self.min_separation)

    def _slack(self, last: float, moved: float, forward: bool) -> float:
        """Room left between the last pushed boundary and the moved one, ahead of the wave."""
        if forward:
            return self.space.forward_distance(last, moved)
        return self.space.forward_distance(moved, last)

    # --------------- Resolution ---------------
    def resolve(
        self,
        ring: IntervalRing,
        pivot: NodeHandle,
        endpoint: Endpoint,
        old_value: float,
        new_value: float,
        strategy: Optional[Strategy] = None,
    ) -> Resolution:
        """Write ``new_value`` onto the pivot boundary and restore separation around the ring.

        START boundaries are walked node by node, END boundaries through a flattened
        PointRing unless ``strategy`` says otherwise. Both walks visit the same
        boundaries in the same order and leave the ring in the same state.
        """
        direction = self.direction(old_value, new_value)
        result = Resolution(direction)
        if direction is Direction.STATIONARY:
            return result

        new_value = self.space.normalize(new_value)
        ring.interval(pivot).set_value(endpoint, new_value)
        forward = direction is Direction.CLOCKWISE
        front = _Front(self, old_value, new_value, forward)
        if strategy is None:
            strategy = Strategy.INTERVALS if endpoint is Endpoint.START else Strategy.POINTS

        if strategy is Strategy.INTERVALS:
            exhausted = self._walk_intervals(ring, pivot, endpoint, front, result)
        else:
            exhausted = self._walk_points(ring, pivot, endpoint, front, result)

        if exhausted and self._slack(front.new, new_value, forward) < self.min_separation:
            result.packed = True
            logger.warning(
                f"Ring of {len(ring)} interval(s) is fully packed; "
                f"stopped at the dragged {endpoint.value} boundary"
            )
        return result

    def _walk_intervals(
        self,
        ring: IntervalRing,
        pivot: NodeHandle,
        endpoint: Endpoint,
        front: _Front,
        result: Resolution,
    ) -> bool:
        """Propagate node by node. Returns True when every other boundary got pushed."""
        # Boundary order of one interval as met in the direction of motion
        order = (Endpoint.START, Endpoint.END) if front.forward else (Endpoint.END, Endpoint.START)
        moved_at = order.index(endpoint)
        stopped = False

        def _push(handle: NodeHandle, target: Endpoint) -> bool:
            interval = ring.interval(handle)
            old = interval.value_at(target)
            pushed = front.advance(old)
            if pushed is None:
                logger.debug(f"{target.value} of {handle} at {old} is clear; propagation stops")
                return False
            interval.set_value(target, pushed)
            kind = StepKind.GAP if target is order[0] else StepKind.SPAN
            result.pushes.append(Push(handle, target, kind, old, pushed))
            logger.debug(f"Pushed {target.value} of {handle} ({kind.value}) {old} -> {pushed}")
            return True

        def _visit(handle: NodeHandle) -> bool:
            nonlocal stopped
            targets = order[moved_at + 1 :] if handle == pivot else order
            for target in targets:
                if not _push(handle, target):
                    stopped = True
                    return False
            return True

        result.visited = ring.traverse(_visit, start=pivot, forward=front.forward)
        if stopped:
            return False
        # Back at the pivot: its boundaries that sit behind the moved one
        for target in order[:moved_at]:
            if not _push(pivot, target):
                return False
        return True

    def _walk_points(
        self,
        ring: IntervalRing,
        pivot: NodeHandle,
        endpoint: Endpoint,
        front: _Front,
        result: Resolution,
    ) -> bool:
        """Propagate over a flattened copy of the ring, then re-pair it onto the nodes."""
        points = PointRing.from_run(ring, pivot)
        touched: Set[NodeHandle] = {pivot}
        exhausted = True
        for index in points.walk(points.index_of(pivot, endpoint), forward=front.forward):
            marker = points[index]
            if marker.handle is None or marker.endpoint is None:
                raise RingInvariantError(f"marker {index} has no originating boundary")
            touched.add(marker.handle)
            pushed = front.advance(marker.value)
            if pushed is None:
                logger.debug(f"Marker {index} at {marker.value} is clear; propagation stops")
                exhausted = False
                break
            crosses_gap = (marker.endpoint is Endpoint.START) == front.forward
            kind = StepKind.GAP if crosses_gap else StepKind.SPAN
            result.pushes.append(Push(marker.handle, marker.endpoint, kind, marker.value, pushed))
            logger.debug(f"Pushed marker {index} ({kind.value}) {marker.value} -> {pushed}")
            marker.value = pushed
        points.commit(ring)
        result.visited = len(touched)
        return exhausted
