"""T1.03: Point Classification.

Reduce each point's 8 moment lists to ray summaries, then to a 7-way
classification: interior, left/right/top/bottom edge, nw/se corner.

Collisions on horizontal rays mean "between glyphs" (interior), on
vertical rays "between lines" (edge), on the NW/SE diagonal "corner".
Biases are half the signed difference of opposite rays, so every edge and
corner score is the magnitude seen on one side.
"""

from __future__ import annotations

import math

from textsight.engine.config import DetectionConfig
from textsight.engine.context import Classification, DetectionContext, Moment, RaySummary
from textsight.engine.registry import Layer, transform
from textsight.engine.spatial_constants import DIRECTIONS, E, N, NW, S, SE, W


def summarize(moments: list[Moment]) -> RaySummary:
    """magnitude = Σ value/length, distance = length-weighted mean position."""
    if not moments:
        return RaySummary()
    magnitude = sum(m.value / m.length for m in moments)
    total_length = sum(m.length for m in moments)
    distance = sum(m.position * m.length for m in moments) / total_length
    return RaySummary(magnitude=magnitude, distance=distance)


def _diagonal_weights() -> list[float]:
    """Each direction's dot product with the unit SE axis; non-zero only for SE/NW."""
    axis = 1 / math.sqrt(2)
    weights = []
    for ux, uy in DIRECTIONS:
        if ux == 0 or uy == 0:
            weights.append(0.0)
            continue
        norm = math.hypot(ux, uy)
        weights.append(round((ux * axis + uy * axis) / norm, 12))
    return weights


DIAGONAL_WEIGHTS = _diagonal_weights()


def classify(summaries: list[RaySummary], config: DetectionConfig) -> Classification:
    m = [s.magnitude for s in summaries]

    h_total = m[E] + m[W]
    h_bias = (m[W] - m[E]) / 2
    v_total = m[N] + m[S]
    v_bias = (m[S] - m[N]) / 2
    d_total = sum(abs(w) * mag for w, mag in zip(DIAGONAL_WEIGHTS, m))
    d_bias = sum(w * mag for w, mag in zip(DIAGONAL_WEIGHTS, m)) / 2

    interior = config.interior_bias * h_total + v_total + d_total
    left_edge = max(0.0, -h_bias)
    right_edge = max(0.0, h_bias)
    top_edge = max(0.0, v_bias + v_total / 2)
    bottom_edge = max(0.0, v_total - top_edge)
    nw_corner = max(0.0, d_bias + d_total / 2)
    se_corner = max(0.0, d_total - nw_corner)

    scores = [max(0.0, interior), left_edge, right_edge, top_edge, bottom_edge, nw_corner, se_corner]
    # Clamped at 1 so weak points are never amplified
    norm = max(1.0, math.sqrt(sum(s * s for s in scores)))
    return Classification(*(s / norm for s in scores))


@transform(
    id="T1.03",
    layer=Layer.ANALYSIS,
    dependencies=["T1.01", "T1.02"],
    tags={"ray", "window"},
    description="Classify points as interior, edge or corner from ray summaries",
)
def point_classification(ctx: DetectionContext) -> None:
    magnitudes: list[float] = []
    for point in ctx.points:
        point.summaries = [summarize(moments) for moments in point.moments]
        point.classification = classify(point.summaries, ctx.config)
        magnitudes.extend(s.magnitude for s in point.summaries)

    ctx.diagnostics["magnitudes"] = magnitudes
