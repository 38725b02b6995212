from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple

from circular_ranges.models.errors import RingInvariantError

logger = logging.getLogger(__name__)


class Endpoint(Enum):
    """Which boundary of an interval."""

    START = "start"
    END = "end"


@dataclass(eq=False)
class Interval:
    """One arc ``[start, end)`` of the value space.

    Two intervals are only ever the same arc by identity: neighbours may share a
    boundary value while a drag is in flight.
    """

    start: float
    end: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.start, self.end)

    def value_at(self, endpoint: Endpoint) -> float:
        return self.start if endpoint is Endpoint.START else self.end

    def set_value(self, endpoint: Endpoint, value: float) -> None:
        if endpoint is Endpoint.START:
            self.start = value
        else:
            self.end = value


class NodeHandle(NamedTuple):
    """Stable reference to a ring slot. The generation detects use after removal."""

    index: int
    generation: int


@dataclass
class _Slot:
    interval: Optional[Interval] = None
    next: int = -1
    previous: int = -1
    generation: int = 0


def _range_contains(outer_start: float, outer_end: float, start: float, end: float) -> bool:
    """Whether ``[start, end]`` sits inside ``[outer_start, outer_end]`` (bounds inclusive).

    A range whose start is greater than its end straddles the max->min seam.
    """
    inner_wraps = start > end
    if outer_start <= outer_end:
        return not inner_wraps and start >= outer_start and end <= outer_end
    if inner_wraps:
        return start >= outer_start and end <= outer_end
    return start >= outer_start or end <= outer_end


class IntervalRing:
    """Circular doubly linked list of intervals, kept in clockwise order.

    Nodes live in an arena of slots addressed by :class:`NodeHandle`. The ring owns
    every interval; removed slots go back to a free list.
    """

    def __init__(self, intervals: Optional[List[Interval]] = None):
        self._slots: List[_Slot] = []
        self._free: List[int] = []
        self._head: Optional[int] = None
        self._count = 0
        for interval in intervals or []:
            self.append(interval)

    # --------------- Introspection ---------------
    def __len__(self) -> int:
        return self._count

    def __contains__(self, handle: object) -> bool:
        if not isinstance(handle, NodeHandle):
            return False
        if not (0 <= handle.index < len(self._slots)):
            return False
        slot = self._slots[handle.index]
        return slot.interval is not None and slot.generation == handle.generation

    @property
    def is_empty(self) -> bool:
        return self._head is None

    @property
    def head(self) -> Optional[NodeHandle]:
        if self._head is None:
            return None
        return self._handle(self._head)

    def interval(self, handle: NodeHandle) -> Interval:
        interval = self._slot(handle).interval
        if interval is None:
            raise RingInvariantError(f"node {handle} holds no interval")
        return interval

    def next(self, handle: NodeHandle) -> NodeHandle:
        slot = self._slot(handle)
        if slot.next < 0:
            raise RingInvariantError(f"node {handle} has no successor")
        return self._handle(slot.next)

    def previous(self, handle: NodeHandle) -> NodeHandle:
        slot = self._slot(handle)
        if slot.previous < 0:
            raise RingInvariantError(f"node {handle} has no predecessor")
        return self._handle(slot.previous)

    def handles(self) -> List[NodeHandle]:
        result: List[NodeHandle] = []

        def _collect(handle: NodeHandle) -> bool:
            result.append(handle)
            return True

        self.traverse(_collect)
        return result

    def intervals(self) -> List[Interval]:
        return [self.interval(handle) for handle in self.handles()]

    def __iter__(self) -> Iterator[Interval]:
        return iter(self.intervals())

    # --------------- Mutation ---------------
    def append(self, interval: Interval) -> NodeHandle:
        """Insert ``interval`` just before the head, i.e. at the tail of the ring."""
        index = self._allocate(interval)
        if self._head is None:
            slot = self._slots[index]
            slot.next = index
            slot.previous = index
            self._head = index
        else:
            head = self._slots[self._head]
            tail_index = head.previous
            self._link(index, tail_index, self._head)
        self._count += 1
        return self._handle(index)

    def insert_after(self, interval: Interval, after: NodeHandle) -> NodeHandle:
        """Splice ``interval`` in immediately clockwise of ``after``."""
        after_slot = self._slot(after)
        index = self._allocate(interval)
        self._link(index, after.index, after_slot.next)
        self._count += 1
        return self._handle(index)

    def remove(self, handle: NodeHandle) -> Interval:
        """Unlink a node and return its interval. The slot returns to the free list."""
        slot = self._slot(handle)
        interval = slot.interval
        if interval is None:
            raise RingInvariantError(f"node {handle} holds no interval")
        if slot.next == handle.index:
            self._head = None
        else:
            if self._head == handle.index:
                self._head = slot.next
            self._slots[slot.next].previous = slot.previous
            self._slots[slot.previous].next = slot.next
        slot.interval = None
        slot.next = -1
        slot.previous = -1
        slot.generation += 1
        self._free.append(handle.index)
        self._count -= 1
        return interval

    def remove_range(self, start: float, end: float) -> List[Interval]:
        """Remove every interval fully contained in ``[start, end]``; return them in ring order."""
        doomed = [
            handle
            for handle in self.handles()
            if _range_contains(start, end, self.interval(handle).start, self.interval(handle).end)
        ]
        removed = [self.remove(handle) for handle in doomed]
        if removed:
            logger.debug(f"Removed {len(removed)} interval(s) inside [{start}, {end}]")
        return removed

    def clear(self) -> None:
        for handle in self.handles():
            self.remove(handle)

    # --------------- Lookup & traversal ---------------
    def find_by_start(self, value: float) -> Optional[NodeHandle]:
        return self.find(lambda interval: interval.start == value)

    def find_by_end(self, value: float) -> Optional[NodeHandle]:
        return self.find(lambda interval: interval.end == value)

    def find(self, predicate: Callable[[Interval], bool]) -> Optional[NodeHandle]:
        """First node from the head whose interval satisfies ``predicate``."""
        found: List[NodeHandle] = []

        def _match(handle: NodeHandle) -> bool:
            if predicate(self.interval(handle)):
                found.append(handle)
                return False
            return True

        self.traverse(_match)
        return found[0] if found else None

    def traverse(
        self,
        visit: Callable[[NodeHandle], bool],
        start: Optional[NodeHandle] = None,
        forward: bool = True,
    ) -> int:
        """Visit nodes from ``start`` (default: head) following successor or predecessor links.

        Stops when ``visit`` returns False or after one full circuit. Returns the
        number of nodes visited, which never exceeds ``len(self)``.
        """
        if start is None:
            if self._head is None:
                return 0
            start = self._handle(self._head)
        current = start
        visited = 0
        while True:
            visited += 1
            if visited > self._count:
                raise RingInvariantError("traversal exceeded ring size; ring is not circular")
            if not visit(current):
                break
            current = self.next(current) if forward else self.previous(current)
            if current == start:
                break
        return visited

    # --------------- Internals ---------------
    def _handle(self, index: int) -> NodeHandle:
        return NodeHandle(index, self._slots[index].generation)

    def _slot(self, handle: NodeHandle) -> _Slot:
        if handle not in self:
            raise RingInvariantError(f"stale or foreign node handle {handle}")
        return self._slots[handle.index]

    def _allocate(self, interval: Interval) -> int:
        if self._free:
            index = self._free.pop()
            self._slots[index].interval = interval
        else:
            index = len(self._slots)
            self._slots.append(_Slot(interval=interval))
        return index

    def _link(self, index: int, previous: int, following: int) -> None:
        slot = self._slots[index]
        slot.previous = previous
        slot.next = following
        self._slots[previous].next = index
        self._slots[following].previous = index
