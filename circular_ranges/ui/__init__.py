"""Qt renderer and demo window for the circular range editor."""

from .circular_range_slider import CircularRangeSlider
from .clock_window import ClockWindow, format_time_of_day

__all__ = ["CircularRangeSlider", "ClockWindow", "format_time_of_day"]
