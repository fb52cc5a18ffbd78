"""T2.01: Grid Linking.

Build up/down/left/right adjacency over the sparse lattice. Points are
bucketed by their y (row) and x (column) in grid-index order; each point's
up/left neighbour is the previous point in its column/row.
"""

from __future__ import annotations

from collections import defaultdict

from textsight.engine.context import DetectionContext
from textsight.engine.registry import Layer, transform


@transform(
    id="T2.01",
    layer=Layer.LINKING,
    dependencies=["T1.03"],
    tags={"ray", "window"},
    description="Link every point to its 4 grid neighbours",
)
def grid_linking(ctx: DetectionContext) -> None:
    rows: dict[int, list[int]] = defaultdict(list)
    columns: dict[int, list[int]] = defaultdict(list)

    for point in sorted(ctx.points, key=lambda p: p.index):
        row = rows[point.y]
        column = columns[point.x]
        if row:
            point.left = row[-1]
            ctx.points[row[-1]].right = point.index
        if column:
            point.up = column[-1]
            ctx.points[column[-1]].down = point.index
        row.append(point.index)
        column.append(point.index)

    ctx.diagnostics["linked"] = sum(1 for p in ctx.points if p.fully_linked)
