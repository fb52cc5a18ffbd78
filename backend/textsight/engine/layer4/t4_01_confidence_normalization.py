"""T4.01: Confidence Normalization.

Log-dampen raw candidate confidences, rescale by the maximum so the best
candidate scores 1, and drop everything under minimum_confidence.
Generation order is preserved.
"""

from __future__ import annotations

import numpy as np

from textsight.engine.context import DetectionContext, Rectangle
from textsight.engine.registry import Layer, transform
from textsight.utils.math_helpers import log_transform


def normalize_confidences(values: list[float]) -> list[float]:
    """log10(1 + c) / max, left unscaled when nothing is positive."""
    if not values:
        return []
    damped = log_transform(np.asarray(values, dtype=np.float64))
    peak = float(damped.max())
    if peak <= 0:
        return [float(v) for v in damped]
    return [min(1.0, float(v) / peak) for v in damped]


def clip_confidences(rectangles: list[Rectangle], minimum: float) -> list[Rectangle]:
    normalized = normalize_confidences([r.confidence for r in rectangles])
    return [
        Rectangle(x=r.x, y=r.y, width=r.width, height=r.height, confidence=conf, color=r.color)
        for r, conf in zip(rectangles, normalized)
        if conf >= minimum
    ]


@transform(
    id="T4.01",
    layer=Layer.NORMALIZATION,
    dependencies=["T3.01"],
    tags={"ray", "window"},
    description="Rescale confidences into [0, 1] and apply the minimum cutoff",
)
def confidence_normalization(ctx: DetectionContext) -> None:
    raw = [
        Rectangle(x=c.x, y=c.y, width=c.width, height=c.height, confidence=c.confidence)
        for c in ctx.candidates
    ]
    ctx.rectangles = clip_confidences(raw, ctx.config.minimum_confidence)
    ctx.diagnostics["rectangles"] = len(ctx.rectangles)
