"""Exception types raised by the circular range models."""


class ConfigurationError(ValueError):
    """Invalid value space, separation or editor settings. Raised at set-up time."""


class RingInvariantError(RuntimeError):
    """A ring structure is in a state correct operation can never produce.

    Stale node handles, missing links and unpaired point markers all land here.
    """
