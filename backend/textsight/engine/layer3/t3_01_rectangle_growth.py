"""T3.01: Rectangle Growth.

Seed on the most interior points and walk outward along the grid links:
vertically with a greedy stopping rule on the running rate of interior
margin, horizontally while interior evidence outweighs side-edge and
corner evidence along the border rows found vertically. The first point
that stops a walk is the border of the rectangle on that side.

Confidence is the classification mass over the rectangle (interior inside,
edge scores along the borders, corner scores at the NW/SE corners) divided
by area * height, in grid-point units.
"""

from __future__ import annotations

import logging

from textsight.engine.context import Candidate, DetectionContext, SamplePoint
from textsight.engine.registry import Layer, transform

logger = logging.getLogger(__name__)


def walk_vertical(points: list[SamplePoint], seed: SamplePoint, step: str, edge: str) -> SamplePoint:
    """Walk up or down from the seed and return the border point.

    A neighbour is taken while its margin (interior minus the edge score)
    is positive and adding it raises total_margin / (rows + 1).
    """
    current = seed
    total = seed.interior - getattr(seed.classification, edge)
    rows = 1
    while True:
        nxt = getattr(current, step)
        if nxt is None:
            return current
        neighbour = points[nxt]
        margin = neighbour.interior - getattr(neighbour.classification, edge)
        if margin <= 0 or (total + margin) / (rows + 2) <= total / (rows + 1):
            return neighbour
        total += margin
        rows += 1
        current = neighbour


def walk_horizontal(
    points: list[SamplePoint],
    seed: SamplePoint,
    corner: SamplePoint,
    step: str,
    border_edge: str,
    side_edge: str,
    corner_score: str,
    bias: float,
) -> SamplePoint:
    """Walk left or right, moving a corner pointer in lock-step along the border row."""
    current = seed
    while True:
        nxt = getattr(current, step)
        nxt_corner = getattr(corner, step)
        if nxt is None or nxt_corner is None:
            return current
        neighbour = points[nxt]
        c = points[nxt_corner].classification
        n = neighbour.classification
        keep = n.interior + getattr(c, border_edge) + bias
        stop = getattr(n, side_edge) + getattr(c, corner_score)
        if keep <= stop:
            return neighbour
        current = neighbour
        corner = points[nxt_corner]


def rectangle_confidence(ctx: DetectionContext, top: int, bottom: int, left: int, right: int) -> float:
    total = 0.0
    for r in range(top + 1, bottom):
        for c in range(left + 1, right):
            total += ctx.point_at(r, c).classification.interior
    for c in range(left + 1, right):
        total += ctx.point_at(top, c).classification.top_edge
        total += ctx.point_at(bottom, c).classification.bottom_edge
    for r in range(top + 1, bottom):
        total += ctx.point_at(r, left).classification.left_edge
        total += ctx.point_at(r, right).classification.right_edge
    total += ctx.point_at(top, left).classification.nw_corner
    total += ctx.point_at(bottom, right).classification.se_corner

    height = bottom - top + 1
    area = height * (right - left + 1)
    return total / (area * height)


def grow(ctx: DetectionContext, seed: SamplePoint) -> Candidate:
    config = ctx.config
    points = ctx.points

    top = walk_vertical(points, seed, "up", "top_edge")
    bottom = walk_vertical(points, seed, "down", "bottom_edge")
    left = walk_horizontal(
        points, seed, top, "left", "top_edge", "left_edge", "nw_corner", config.left_edge_bias
    )
    right = walk_horizontal(
        points, seed, bottom, "right", "bottom_edge", "right_edge", "se_corner", config.right_edge_bias
    )

    x = left.x
    y = top.y
    width = min(right.x - x + config.horizontal_spacing, ctx.buffer.width - x)
    height = min(bottom.y - y + config.vertical_spacing, ctx.buffer.height - y)

    return Candidate(
        seed=seed.index,
        top=top.row,
        bottom=bottom.row,
        left=left.col,
        right=right.col,
        x=x,
        y=y,
        width=width,
        height=height,
        confidence=rectangle_confidence(ctx, top.row, bottom.row, left.col, right.col),
    )


@transform(
    id="T3.01",
    layer=Layer.GROWTH,
    dependencies=["T2.01"],
    tags={"ray", "window"},
    description="Grow rectangles from interior seed points and score them",
)
def rectangle_growth(ctx: DetectionContext) -> None:
    minimum = ctx.config.minimum_interior
    seeds = sorted(ctx.points, key=lambda p: (-p.interior, p.index))

    candidates: list[Candidate] = []
    max_confidence = 0.0
    for seed in seeds:
        if seed.interior <= minimum:
            break
        if not seed.fully_linked:
            continue
        candidate = grow(ctx, seed)
        candidates.append(candidate)
        max_confidence = max(max_confidence, candidate.confidence)

    ctx.candidates = candidates
    ctx.max_confidence = max_confidence
    ctx.diagnostics["candidates"] = len(candidates)
    ctx.diagnostics["max_confidence"] = max_confidence
    logger.debug("Grew %d candidates, max confidence %.4f", len(candidates), max_confidence)
