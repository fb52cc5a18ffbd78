"""T4.02: Overlap Suppression (opt-in via overlap_threshold).

Greedy: visit rectangles by descending confidence and drop any whose IoU
with an already kept rectangle exceeds the threshold. Survivors keep
their generation order.
"""

from __future__ import annotations

import logging

from textsight.engine.context import DetectionContext, Rectangle
from textsight.engine.registry import Layer, transform
from textsight.utils.geometry import iou, rect_polygon

logger = logging.getLogger(__name__)


def suppress_overlaps(rectangles: list[Rectangle], threshold: float) -> list[Rectangle]:
    shapes = [rect_polygon(r.x, r.y, r.width, r.height) for r in rectangles]
    order = sorted(range(len(rectangles)), key=lambda i: (-rectangles[i].confidence, i))

    kept: list[int] = []
    for i in order:
        if all(iou(shapes[i], shapes[k]) <= threshold for k in kept):
            kept.append(i)

    return [rectangles[i] for i in sorted(kept)]


@transform(
    id="T4.02",
    layer=Layer.NORMALIZATION,
    dependencies=["T4.01"],
    tags={"ray", "window"},
    description="Drop rectangles overlapping a stronger one",
)
def overlap_suppression(ctx: DetectionContext) -> None:
    threshold = ctx.config.overlap_threshold
    if threshold is None:
        return
    before = len(ctx.rectangles)
    ctx.rectangles = suppress_overlaps(ctx.rectangles, threshold)
    logger.debug("Overlap suppression kept %d/%d rectangles", len(ctx.rectangles), before)
