"""Detection configuration: an immutable option set merged once per call."""

from __future__ import annotations

import dataclasses
import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cached_property
from typing import Any

import numpy as np
from numpy.typing import NDArray

from textsight.errors import InputError
from textsight.engine.spatial_constants import DEFAULT_NOISE_FLOOR, DIRECTIONS

STRATEGIES = ("ray", "window")

# Option names accepted by from_options() in place of a field name.
OPTION_ALIASES = {"ray_length": "ray_steps"}


@dataclass(frozen=True)
class DetectionConfig:
    """Controls grid layout, ray geometry and the growth/normalization thresholds."""

    # Detector variant: "ray" or "window"
    strategy: str = "ray"

    # Grid lattice step
    horizontal_spacing: int = 4
    vertical_spacing: int = 3

    # Ray geometry
    ray_interval: int = 1
    ray_steps: int = 6
    ray_aspect: float = 1.5  # horizontal stretch, the grid is denser vertically

    # Classification and growth bias terms
    interior_bias: float = 1.0
    left_edge_bias: float = 0.0
    right_edge_bias: float = 0.0

    # Thresholds
    minimum_interior: float = 0.5
    minimum_confidence: float = 0.1
    noise_floor: float = DEFAULT_NOISE_FLOOR

    # Sliding-window strategy
    radius: int = 16
    depth: int = 4
    window_size: int = 5

    # Optional post-processing
    overlap_threshold: float | None = None
    include_color: bool = False

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise InputError(f"Unknown strategy {self.strategy!r}; expected one of {STRATEGIES}")
        for name in ("horizontal_spacing", "vertical_spacing", "ray_interval", "window_size"):
            _require_int(name, getattr(self, name), minimum=1)
        _require_int("ray_steps", self.ray_steps, minimum=2)
        _require_int("radius", self.radius, minimum=0)
        _require_int("depth", self.depth, minimum=2)
        for name in (
            "interior_bias",
            "left_edge_bias",
            "right_edge_bias",
            "minimum_interior",
            "minimum_confidence",
            "ray_aspect",
            "noise_floor",
        ):
            _require_number(name, getattr(self, name))
        if not self.ray_aspect > 0:
            raise InputError(f"ray_aspect must be positive, got {self.ray_aspect!r}")
        if self.noise_floor < 0:
            raise InputError(f"noise_floor must be non-negative, got {self.noise_floor!r}")
        if self.overlap_threshold is not None:
            _require_number("overlap_threshold", self.overlap_threshold)
            if not 0.0 <= self.overlap_threshold <= 1.0:
                raise InputError(
                    f"overlap_threshold must lie in [0, 1], got {self.overlap_threshold!r}"
                )
        if not isinstance(self.include_color, bool):
            raise InputError(f"include_color must be a boolean, got {self.include_color!r}")

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None) -> DetectionConfig:
        """Merge caller options over the defaults."""
        if isinstance(options, DetectionConfig):
            return options
        known = {f.name for f in dataclasses.fields(cls)}
        values: dict[str, Any] = {}
        given: dict[str, str] = {}
        for key, value in (options or {}).items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise InputError(f"Unknown detection option: {key!r}")
            if name in given:
                raise InputError(f"Options {given[name]!r} and {key!r} both set {name}")
            given[name] = key
            values[name] = value
        try:
            return cls(**values)
        except TypeError as e:
            raise InputError(str(e)) from e

    def with_options(self, **overrides: Any) -> DetectionConfig:
        return DetectionConfig.from_options({**dataclasses.asdict(self), **overrides})

    @cached_property
    def ray_offsets(self) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
        """(dx, dy) pixel offsets, each shaped (8, ray_steps), one row per direction."""
        steps = np.arange(1, self.ray_steps + 1) * self.ray_interval
        units = np.array(DIRECTIONS, dtype=np.float64)
        dx = np.rint(units[:, :1] * self.ray_aspect * steps).astype(np.int64)
        dy = (units[:, 1:] * steps).astype(np.int64)
        return dx, dy

    @property
    def window_reach(self) -> int:
        """Farthest pixel a centred window chain touches from its origin point."""
        return (self.depth - 1) * self.window_size + self.window_size // 2

    @property
    def margin(self) -> int:
        """Distance kept between grid points and the image border."""
        if self.strategy == "window":
            return max(self.radius, self.window_reach)
        dx, dy = self.ray_offsets
        return int(max(np.abs(dx).max(), np.abs(dy).max()))


def _require_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InputError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InputError(f"{name} must be >= {minimum}, got {value!r}")


def _require_number(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InputError(f"{name} must be finite, got {value!r}")
