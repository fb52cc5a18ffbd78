"""T0.01: Ray Grid.

Lay sample points on an evenly spaced lattice, clipped by the margin so
that every ray (or window chain) from every point stays inside the image.
"""

from __future__ import annotations

from textsight.engine.context import DetectionContext, SamplePoint
from textsight.engine.registry import Layer, transform


def lattice(width: int, height: int, margin: int, h_spacing: int, v_spacing: int) -> tuple[range, range]:
    """Column x-coordinates and row y-coordinates of the grid."""
    return range(margin, width - margin, h_spacing), range(margin, height - margin, v_spacing)


@transform(
    id="T0.01",
    layer=Layer.SAMPLING,
    tags={"ray", "window"},
    description="Lay out margin-clipped sample points on a regular lattice",
)
def ray_grid(ctx: DetectionContext) -> None:
    config = ctx.config
    xs, ys = lattice(
        ctx.buffer.width,
        ctx.buffer.height,
        config.margin,
        config.horizontal_spacing,
        config.vertical_spacing,
    )

    points: list[SamplePoint] = []
    for row, y in enumerate(ys):
        for col, x in enumerate(xs):
            points.append(SamplePoint(index=len(points), row=row, col=col, x=x, y=y))

    ctx.points = points
    ctx.grid_rows = len(ys) if len(xs) else 0
    ctx.grid_cols = len(xs) if len(ys) else 0
    ctx.diagnostics["points"] = len(points)
    ctx.diagnostics["margin"] = config.margin
