from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from circular_ranges.models.errors import ConfigurationError

# Angle of the minimum value: 12 o'clock, angles grow clockwise on screen.
CIRCLE_INITIAL_ANGLE = -math.pi / 2.0

# Values closer than span * VALUE_EPSILON_RATIO count as equal
VALUE_EPSILON_RATIO = 1e-12


@dataclass(frozen=True)
class ValueSpace:
    """A cyclic value range ``[minimum, maximum)`` drawn as ``rounds`` turns of a circle.

    Every value handled by the ring lives modulo ``maximum - minimum`` offset by
    ``minimum``. Angles are radians measured from ``CIRCLE_INITIAL_ANGLE``.
    """

    minimum: float = 0.0
    maximum: float = 1.0
    rounds: int = 1

    def __post_init__(self):
        if not (float(self.minimum) < float(self.maximum)):
            raise ConfigurationError(
                f"minimum ({self.minimum}) must be lower than maximum ({self.maximum})"
            )
        if int(self.rounds) < 1:
            raise ConfigurationError(f"rounds must be >= 1, got {self.rounds}")

    @property
    def span(self) -> float:
        return float(self.maximum) - float(self.minimum)

    # --------------- Wraparound arithmetic ---------------
    def normalize(self, value: float) -> float:
        """Fold ``value`` into ``[minimum, maximum)``."""
        span = self.span
        offset = (float(value) - self.minimum) % span
        if offset >= span:
            # float modulo of a tiny negative number can round up to the span itself
            offset = 0.0
        return self.minimum + offset

    def wrap_add(self, value: float, delta: float) -> float:
        return self.normalize(float(value) + float(delta))

    def wrap_subtract(self, value: float, delta: float) -> float:
        return self.normalize(float(value) - float(delta))

    def forward_distance(self, start: float, end: float) -> float:
        """Clockwise value distance travelled from ``start`` to ``end``, in ``[0, span)``."""
        return self.normalize(self.minimum + float(end) - float(start)) - self.minimum

    def contains(self, start: float, end: float, value: float) -> bool:
        """True if ``value`` lies on the clockwise arc from ``start`` to ``end`` (inclusive)."""
        return self.forward_distance(start, value) <= self.forward_distance(start, end)

    def midpoint(self, start: float, end: float) -> float:
        """Middle of the clockwise arc from ``start`` to ``end``, across the seam if needed."""
        return self.wrap_add(start, self.forward_distance(start, end) / 2.0)

    # --------------- Angular positions ---------------
    def to_angle(self, value: float) -> float:
        """Scale ``value`` onto ``[0, 2π·rounds)`` and offset by the circle's initial angle."""
        ratio = (float(value) - self.minimum) / self.span
        return ratio * 2.0 * math.pi * int(self.rounds) + CIRCLE_INITIAL_ANGLE

    def to_degrees(self, value: float) -> float:
        return math.degrees(self.to_angle(value))

    def value_for_angle(self, angle: float, reference: Optional[float] = None) -> float:
        """Inverse of :meth:`to_angle`.

        An angle only identifies a value within one round. With several rounds the
        round closest to ``reference`` is picked, otherwise the first one.
        """
        round_span = self.span / int(self.rounds)
        turn = (float(angle) - CIRCLE_INITIAL_ANGLE) % (2.0 * math.pi)
        base = self.minimum + turn / (2.0 * math.pi) * round_span
        if int(self.rounds) == 1 or reference is None:
            return self.normalize(base)
        best = base
        best_gap = None
        for index in range(int(self.rounds)):
            candidate = base + index * round_span
            gap = min(
                self.forward_distance(reference, candidate),
                self.forward_distance(candidate, reference),
            )
            if best_gap is None or gap < best_gap:
                best, best_gap = candidate, gap
        return self.normalize(best)

    def angular_distance(self, first: float, second: float) -> float:
        """Smallest on-screen angle in degrees (``[0, 180]``) between two values.

        With several rounds, values a whole turn apart sit on top of each other.
        Use :meth:`distance` to compare positions in the value space.
        """
        diff = abs(self.to_degrees(first) - self.to_degrees(second)) % 360.0
        return min(diff, 360.0 - diff)

    def separation_angle(self, distance: float) -> float:
        """Express a value distance as an angle in degrees."""
        return self.to_degrees(self.minimum + float(distance)) - self.to_degrees(self.minimum)

    # --------------- Distances in value space ---------------
    @property
    def epsilon(self) -> float:
        """Tolerance for comparing values of this space."""
        return self.span * VALUE_EPSILON_RATIO

    def distance(self, first: float, second: float) -> float:
        """Shortest value distance between two values, either way round, in ``[0, span / 2]``."""
        return min(self.forward_distance(first, second), self.forward_distance(second, first))

    def signed_delta(self, old: float, new: float) -> float:
        """Shortest signed move from ``old`` to ``new``; positive is clockwise."""
        delta = self.forward_distance(old, new)
        if delta > self.span / 2.0:
            delta -= self.span
        return delta
