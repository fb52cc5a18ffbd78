"""DetectionContext: the single mutable state object flowing through all transforms.

Per-point results → SamplePoint (arena entry, neighbours stored as indices)
Cross-point results → DetectionContext.* (candidates, rectangles, diagnostics)

A context is created for one detection call and never shared.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from textsight.engine.config import DetectionConfig

if TYPE_CHECKING:
    from textsight.utils.pixels import PixelBuffer


@dataclass(frozen=True)
class Moment:
    """A closed run of same-signed deviation from a ray's mean."""

    value: float
    position: int
    length: int


@dataclass(frozen=True)
class RaySummary:
    magnitude: float = 0.0
    distance: float = 0.0


@dataclass(frozen=True)
class Classification:
    interior: float = 0.0
    left_edge: float = 0.0
    right_edge: float = 0.0
    top_edge: float = 0.0
    bottom_edge: float = 0.0
    nw_corner: float = 0.0
    se_corner: float = 0.0

    def as_array(self) -> NDArray[np.float64]:
        return np.array(
            [
                self.interior,
                self.left_edge,
                self.right_edge,
                self.top_edge,
                self.bottom_edge,
                self.nw_corner,
                self.se_corner,
            ]
        )


EMPTY_CLASSIFICATION = Classification()


@dataclass
class SamplePoint:
    """One lattice point of the sparse sampling grid."""

    index: int
    row: int
    col: int
    x: int
    y: int
    # Per-direction moment lists, compass order (see spatial_constants.DIRECTIONS)
    moments: list[list[Moment]] = field(default_factory=lambda: [[] for _ in range(8)])
    summaries: list[RaySummary] = field(default_factory=list)
    classification: Classification = EMPTY_CLASSIFICATION
    # Neighbour indices into DetectionContext.points; None at the grid boundary
    up: int | None = None
    down: int | None = None
    left: int | None = None
    right: int | None = None

    @property
    def fully_linked(self) -> bool:
        return None not in (self.up, self.down, self.left, self.right)

    @property
    def interior(self) -> float:
        return self.classification.interior


@dataclass
class Candidate:
    """A grown rectangle before normalization, bounds as grid rows/columns."""

    seed: int
    top: int
    bottom: int
    left: int
    right: int
    x: int
    y: int
    width: int
    height: int
    confidence: float


@dataclass(frozen=True)
class Rectangle:
    x: int
    y: int
    width: int
    height: int
    confidence: float
    color: tuple[int, int, int] | None = None

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "confidence": self.confidence,
        }
        if self.color is not None:
            data["color"] = list(self.color)
        return data


@dataclass
class DetectionContext:
    """Shared state flowing through the entire pipeline."""

    buffer: PixelBuffer
    config: DetectionConfig = field(default_factory=DetectionConfig)

    # --- Grid (populated by Layer 0) ---
    points: list[SamplePoint] = field(default_factory=list)
    grid_rows: int = 0
    grid_cols: int = 0

    # --- Growth output (Layer 3) ---
    candidates: list[Candidate] = field(default_factory=list)
    max_confidence: float = 0.0

    # --- Final output (Layer 4) ---
    rectangles: list[Rectangle] = field(default_factory=list)

    # Call-local accumulators (per-ray magnitudes, counts, timings)
    diagnostics: dict[str, Any] = field(default_factory=dict)

    # --- Pipeline metadata ---
    completed_transforms: set[str] = field(default_factory=set)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def num_points(self) -> int:
        return len(self.points)

    @property
    def strategy(self) -> str:
        return self.config.strategy

    @property
    def is_degenerate(self) -> bool:
        """True when the image cannot hold a single grid row or column."""
        margin = self.config.margin
        return self.buffer.width <= 2 * margin or self.buffer.height <= 2 * margin

    def point_at(self, row: int, col: int) -> SamplePoint:
        return self.points[row * self.grid_cols + col]
