from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from circular_ranges.models.errors import ConfigurationError
from circular_ranges.models.value_space import ValueSpace

logger = logging.getLogger(__name__)

HOUR_SECONDS = 60 * 60

# Defaults describe the 24 hour clock the editor was first built for (values in seconds)
DEFAULT_CONFIG: Dict[str, float] = {
    "minimum_value": 0.0,
    "maximum_value": 24.0 * HOUR_SECONDS,
    "number_of_rounds": 1,
    "min_separation": 1.0 * HOUR_SECONDS,
    # A long press only subdivides arcs at least this wide
    "split_threshold": 3.0 * HOUR_SECONDS,
    # The carved gap is split_half_width_units * split_unit on each side of the midpoint
    "split_unit": 60.0,
    "split_half_width_units": 30.0,
    "thumb_tolerance_degrees": 15.0,
    "implicit_start": 1.0 * HOUR_SECONDS,
    "implicit_end": 8.0 * HOUR_SECONDS,
    "long_press_ms": 500,
}


@dataclass
class EditorConfig:
    minimum_value: float = DEFAULT_CONFIG["minimum_value"]
    maximum_value: float = DEFAULT_CONFIG["maximum_value"]
    number_of_rounds: int = int(DEFAULT_CONFIG["number_of_rounds"])
    min_separation: float = DEFAULT_CONFIG["min_separation"]
    split_threshold: float = DEFAULT_CONFIG["split_threshold"]
    split_unit: float = DEFAULT_CONFIG["split_unit"]
    split_half_width_units: float = DEFAULT_CONFIG["split_half_width_units"]
    thumb_tolerance_degrees: float = DEFAULT_CONFIG["thumb_tolerance_degrees"]
    implicit_start: float = DEFAULT_CONFIG["implicit_start"]
    implicit_end: float = DEFAULT_CONFIG["implicit_end"]
    long_press_ms: int = int(DEFAULT_CONFIG["long_press_ms"])

    def __post_init__(self):
        self.validate()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]] = None) -> "EditorConfig":
        """Merge ``data`` onto the defaults so missing keys get defaults. Unknown keys are ignored."""
        merged: Dict[str, Any] = DEFAULT_CONFIG.copy()
        known = {f.name for f in fields(cls)}
        for key, value in (data or {}).items():
            if key in known:
                merged[key] = value
            else:
                logger.warning(f"Ignoring unknown config key '{key}'")
        try:
            merged["number_of_rounds"] = int(merged["number_of_rounds"])
            merged["long_press_ms"] = int(merged["long_press_ms"])
            for key in known - {"number_of_rounds", "long_press_ms"}:
                merged[key] = float(merged[key])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid config value: {e}") from e
        return cls(**merged)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def split_half_width(self) -> float:
        return self.split_unit * self.split_half_width_units

    def value_space(self) -> ValueSpace:
        return ValueSpace(self.minimum_value, self.maximum_value, self.number_of_rounds)

    def validate(self) -> None:
        space = self.value_space()
        if self.min_separation <= 0:
            raise ConfigurationError(f"min_separation must be positive, got {self.min_separation}")
        if self.min_separation > space.span:
            raise ConfigurationError(
                f"min_separation ({self.min_separation}) exceeds the value span ({space.span})"
            )
        if self.split_threshold <= 0:
            raise ConfigurationError("split_threshold must be positive")
        if self.split_unit <= 0:
            raise ConfigurationError("split_unit must be positive")
        if self.split_half_width_units < 0:
            raise ConfigurationError("split_half_width_units cannot be negative")
        # A split carves a gap of 2 * half width and leaves two halves, all >= min_separation
        gap = 2.0 * self.split_half_width
        if gap < self.min_separation:
            raise ConfigurationError(
                f"split gap ({gap}) is narrower than min_separation ({self.min_separation})"
            )
        if self.split_threshold < gap + 2.0 * self.min_separation:
            raise ConfigurationError(
                f"split_threshold ({self.split_threshold}) must be at least the split gap "
                f"plus two min_separation wide halves ({gap + 2.0 * self.min_separation})"
            )
        if self.thumb_tolerance_degrees <= 0:
            raise ConfigurationError("thumb_tolerance_degrees must be positive")
        if self.long_press_ms < 0:
            raise ConfigurationError("long_press_ms cannot be negative")


def load_config(path: str) -> EditorConfig:
    """Read a JSON config file. A missing file yields the defaults."""
    if not os.path.exists(path):
        logger.info(f"No config at {path}; using defaults")
        return EditorConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must hold a JSON object")
    return EditorConfig.from_dict(data)


def save_config(config: EditorConfig, path: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
