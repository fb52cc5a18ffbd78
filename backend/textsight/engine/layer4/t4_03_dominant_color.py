"""T4.03: Dominant Color (opt-in via include_color).

Attach the rounded mean RGB of each rectangle's pixels.
"""

from __future__ import annotations

import dataclasses

import numpy as np

from textsight.engine.context import DetectionContext
from textsight.engine.registry import Layer, transform


@transform(
    id="T4.03",
    layer=Layer.NORMALIZATION,
    dependencies=["T4.01"],
    tags={"ray", "window"},
    description="Attach the mean colour of each rectangle",
)
def dominant_color(ctx: DetectionContext) -> None:
    rgb = ctx.buffer.rgb
    colored = []
    for rect in ctx.rectangles:
        region = rgb[rect.y : rect.y + rect.height, rect.x : rect.x + rect.width].reshape(-1, 3)
        mean = np.rint(region.mean(axis=0)).astype(int)
        color = (int(mean[0]), int(mean[1]), int(mean[2]))
        colored.append(dataclasses.replace(rect, color=color))
    ctx.rectangles = colored
