"""
Tests for minimum-separation propagation.

Both walking strategies are run over the same scenarios and must agree on the
final ring, the pushes made and the number of intervals visited.
"""

import random

import pytest

from circular_ranges.models.collision import (
    CollisionResolver,
    Direction,
    StepKind,
    Strategy,
    can_split,
)
from circular_ranges.models.errors import ConfigurationError, RingInvariantError
from circular_ranges.models.interval_ring import Endpoint, Interval, IntervalRing
from circular_ranges.models.point_ring import MarkerRole, PointRing
from circular_ranges.models.value_space import ValueSpace

DAY = ValueSpace(0.0, 86400.0)


def build(*pairs):
    return IntervalRing([Interval(start, end) for start, end in pairs])


def nth(ring, index):
    handle = ring.head
    for _ in range(index):
        handle = ring.next(handle)
    return handle


def ranges(ring):
    return [interval.as_tuple() for interval in ring]


def drag(resolver, ring, index, endpoint, new_value, strategy=None):
    pivot = nth(ring, index)
    old_value = ring.interval(pivot).value_at(endpoint)
    return resolver.resolve(ring, pivot, endpoint, old_value, new_value, strategy)


class TestResolverSetup:
    def test_rejects_non_positive_separation(self):
        with pytest.raises(ConfigurationError):
            CollisionResolver(DAY, 0)

    def test_rejects_separation_wider_than_space(self):
        with pytest.raises(ConfigurationError):
            CollisionResolver(DAY, 90000)

    def test_direction(self):
        resolver = CollisionResolver(DAY, 600)
        assert resolver.direction(3600, 4000) is Direction.CLOCKWISE
        assert resolver.direction(4000, 3600) is Direction.COUNTERCLOCKWISE
        assert resolver.direction(3600, 3600) is Direction.STATIONARY
        assert resolver.direction(86000, 400) is Direction.CLOCKWISE

    def test_can_split(self):
        assert can_split(DAY, 3600, 28800, 10800)
        assert can_split(DAY, 0, 10800, 10800)
        assert not can_split(DAY, 0, 3600, 10800)
        assert can_split(DAY, 79200, 14400, 10800)


class TestScenarios:
    @pytest.fixture
    def resolver(self):
        return CollisionResolver(DAY, 600)

    def test_collision_push(self, resolver):
        """Dragging an end to 200 from the next start pushes that start to 4600."""
        ring = build((0, 3600), (4200, 7200))
        result = drag(resolver, ring, 0, Endpoint.END, 4000)
        assert result.direction is Direction.CLOCKWISE
        assert ranges(ring) == [(0, 4000), (4600, 7200)]
        assert len(result.pushes) == 1
        push = result.pushes[0]
        assert push.endpoint is Endpoint.START
        assert push.kind is StepKind.GAP
        assert (push.old_value, push.new_value) == (4200, 4600)
        assert not result.packed

    def test_no_collision_leaves_neighbours(self, resolver):
        ring = build((0, 3600), (7200, 10800))
        result = drag(resolver, ring, 0, Endpoint.END, 4000)
        assert ranges(ring) == [(0, 4000), (7200, 10800)]
        assert not result.changed

    def test_stationary_drag_is_a_no_op(self, resolver):
        ring = build((0, 3600), (4200, 7200))
        result = drag(resolver, ring, 0, Endpoint.END, 3600)
        assert result.direction is Direction.STATIONARY
        assert result.visited == 0
        assert ranges(ring) == [(0, 3600), (4200, 7200)]

    def test_wrapped_value_is_stationary(self, resolver):
        ring = build((3600, 28800))
        result = drag(resolver, ring, 0, Endpoint.START, 90000)
        assert result.direction is Direction.STATIONARY
        assert ranges(ring) == [(3600, 28800)]

    def test_counterclockwise_start_push(self, resolver):
        ring = build((0, 3600), (4200, 7200))
        result = drag(resolver, ring, 1, Endpoint.START, 3800)
        assert result.direction is Direction.COUNTERCLOCKWISE
        assert ranges(ring) == [(0, 3200), (3800, 7200)]
        assert result.pushes[0].kind is StepKind.GAP

    def test_fast_drag_cannot_jump_a_neighbour(self, resolver):
        """A boundary swept over in one step is still pushed ahead of the drag."""
        ring = build((0, 3600), (4200, 7200))
        drag(resolver, ring, 0, Endpoint.END, 5000)
        assert ranges(ring) == [(0, 5000), (5600, 7200)]

    def test_push_crosses_own_span(self, resolver):
        """Dragging an end back past its own start drags the start along."""
        ring = build((0, 3600), (4200, 7200))
        result = drag(resolver, ring, 1, Endpoint.END, 3900)
        assert ranges(ring) == [(0, 2700), (3300, 3900)]
        assert [p.kind for p in result.pushes] == [StepKind.SPAN, StepKind.GAP]

    def test_push_across_the_seam(self, resolver):
        ring = build((3600, 86000), (200, 1800))
        drag(resolver, ring, 0, Endpoint.END, 86300)
        assert ranges(ring) == [(3600, 86300), (500, 1800)]


class TestPropagationBounds:
    @pytest.fixture
    def resolver(self):
        return CollisionResolver(ValueSpace(0.0, 1000.0), 10)

    @pytest.mark.parametrize("strategy", [Strategy.INTERVALS, Strategy.POINTS])
    def test_chain_push_visits_each_interval_once(self, resolver, strategy):
        ring = build((0, 10), (20, 30), (40, 50), (60, 70), (80, 90))
        result = drag(resolver, ring, 0, Endpoint.END, 15, strategy)
        assert ranges(ring) == [(0, 15), (25, 35), (45, 55), (65, 75), (85, 95)]
        assert result.visited <= len(ring)
        assert len(result.pushes) == 8
        assert not result.packed
        # Every boundary keeps its distance to the next one
        values = [v for pair in ranges(ring) for v in pair]
        for previous, following in zip(values, values[1:]):
            assert resolver.space.forward_distance(previous, following) >= 10

    @pytest.mark.parametrize("strategy", [Strategy.INTERVALS, Strategy.POINTS])
    def test_packed_ring_stops_at_the_dragged_boundary(self, strategy):
        space = ValueSpace(0.0, 100.0)
        resolver = CollisionResolver(space, 30)
        ring = build((0, 30), (60, 90))
        result = drag(resolver, ring, 0, Endpoint.END, 35, strategy)
        assert result.packed
        assert result.visited <= 2
        # The dragged boundary keeps the value it was dragged to
        assert ring.interval(ring.head).end == 35
        assert ranges(ring) == [(25, 35), (65, 95)]


EQUIVALENCE_CASES = [
    # (ring, pivot index, endpoint, new value)
    ([(0, 3600), (4200, 7200)], 0, Endpoint.END, 4000),
    ([(0, 3600), (4200, 7200)], 0, Endpoint.END, 3500),
    ([(0, 3600), (4200, 7200)], 1, Endpoint.START, 3800),
    ([(0, 3600), (4200, 7200)], 1, Endpoint.END, 3900),
    ([(0, 3600), (4200, 7200), (7500, 9000)], 0, Endpoint.END, 5000),
    ([(0, 3600), (4200, 7200), (7500, 9000)], 2, Endpoint.START, 6900),
    ([(3600, 86000), (200, 1800)], 0, Endpoint.END, 86300),
]


@pytest.mark.parametrize("pairs, index, endpoint, new_value", EQUIVALENCE_CASES)
def test_strategies_agree(pairs, index, endpoint, new_value):
    resolver = CollisionResolver(DAY, 600)
    by_intervals = build(*pairs)
    by_points = build(*pairs)

    first = drag(resolver, by_intervals, index, endpoint, new_value, Strategy.INTERVALS)
    second = drag(resolver, by_points, index, endpoint, new_value, Strategy.POINTS)

    assert ranges(by_intervals) == ranges(by_points)
    assert [(p.endpoint, p.kind, p.old_value, p.new_value) for p in first.pushes] == [
        (p.endpoint, p.kind, p.old_value, p.new_value) for p in second.pushes
    ]
    assert first.visited == second.visited
    assert first.packed == second.packed


class TestSeveralRounds:
    """Separation is measured along the values, not around the drawn circle."""

    @pytest.fixture
    def resolver(self):
        return CollisionResolver(ValueSpace(0.0, 86400.0, rounds=2), 600)

    def test_boundary_a_turn_away_is_not_pushed(self, resolver):
        ring = build((0, 3600), (47000, 50000))
        result = drag(resolver, ring, 0, Endpoint.END, 3700)
        assert ranges(ring) == [(0, 3700), (47000, 50000)]
        assert not result.changed

    def test_near_neighbour_is_still_pushed(self, resolver):
        ring = build((0, 3600), (4200, 7200))
        drag(resolver, ring, 0, Endpoint.END, 4000)
        assert ranges(ring) == [(0, 4000), (4600, 7200)]

    def test_direction_uses_value_delta(self, resolver):
        assert resolver.direction(3600, 3700) is Direction.CLOCKWISE
        assert resolver.direction(3700, 3600) is Direction.COUNTERCLOCKWISE
        assert resolver.direction(3600, 3600 + 43200) is Direction.CLOCKWISE


def test_marker_without_origin_is_rejected(monkeypatch):
    ring = build((0, 3600), (4200, 7200))
    pivot = ring.head
    points = PointRing()
    points.append(4000, role=MarkerRole.START, handle=pivot, endpoint=Endpoint.END)
    points.append(4200, role=MarkerRole.END)
    monkeypatch.setattr(PointRing, "from_run", lambda ring, pivot: points)
    with pytest.raises(RingInvariantError):
        drag(CollisionResolver(DAY, 600), ring, 0, Endpoint.END, 4000, Strategy.POINTS)


SEQUENCE_RING = [(80000, 5000), (12000, 25000), (33000, 47000), (55000, 70000)]


def boundary_gaps(space, ring):
    """Clockwise distances between consecutive boundaries, seam included."""
    values = [value for interval in ring for value in interval.as_tuple()]
    return [space.forward_distance(a, b) for a, b in zip(values, values[1:] + values[:1])]


@pytest.mark.parametrize("rounds", [1, 2])
@pytest.mark.parametrize("seed", range(5))
def test_random_drag_sequences_keep_ring_separated(rounds, seed):
    """Boundaries stay in clockwise order and min_separation apart over many drags."""
    space = ValueSpace(0.0, 86400.0, rounds=rounds)
    resolver = CollisionResolver(space, 600)
    by_intervals = build(*SEQUENCE_RING)
    by_points = build(*SEQUENCE_RING)
    rng = random.Random(seed)

    for _ in range(60):
        index = rng.randrange(len(SEQUENCE_RING))
        endpoint = rng.choice([Endpoint.START, Endpoint.END])
        old_value = by_intervals.interval(nth(by_intervals, index)).value_at(endpoint)
        new_value = space.wrap_add(old_value, rng.uniform(-20000, 20000))

        result = drag(resolver, by_intervals, index, endpoint, new_value, Strategy.INTERVALS)
        drag(resolver, by_points, index, endpoint, new_value, Strategy.POINTS)

        assert ranges(by_intervals) == ranges(by_points)
        assert not result.packed
        gaps = boundary_gaps(space, by_intervals)
        # One clockwise lap: nothing overlaps or changed order
        assert sum(gaps) == pytest.approx(space.span)
        assert min(gaps) >= 600 - 1e-6

        forward = result.direction is Direction.CLOCKWISE
        leader = space.normalize(new_value)
        for push in result.pushes:
            if forward:
                gap = space.forward_distance(leader, push.new_value)
            else:
                gap = space.forward_distance(push.new_value, leader)
            assert gap == pytest.approx(600)
            leader = push.new_value
