"""Circular interval models: value space, rings and collision propagation."""

# Re-export key types for convenience when importing the package directly.
from .errors import ConfigurationError, RingInvariantError
from .value_space import ValueSpace
from .interval_ring import Endpoint, Interval, IntervalRing, NodeHandle
from .point_ring import MarkerRole, PointMarker, PointRing
from .collision import CollisionResolver, Direction, Push, Resolution, StepKind, Strategy

__all__ = [
    "ConfigurationError",
    "RingInvariantError",
    "ValueSpace",
    "Endpoint",
    "Interval",
    "IntervalRing",
    "NodeHandle",
    "MarkerRole",
    "PointMarker",
    "PointRing",
    "CollisionResolver",
    "Direction",
    "Push",
    "Resolution",
    "StepKind",
    "Strategy",
]
