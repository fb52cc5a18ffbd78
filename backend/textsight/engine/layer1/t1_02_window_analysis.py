"""T1.02: Sliding Window Analysis.

Alternate to T1.01. Chains of windows step away from each grid point in
the 8 compass directions; consecutive windows are differenced on their
average and variance colour vectors, and each pair of consecutive deltas
is scored. The scores are stored as per-direction moments so that T1.03
onwards treat them exactly like ray moments. They are rescaled by the
call's peak, but never by less than WINDOW_SCORE_FLOOR, so a near-uniform
image stays near zero.
"""

from __future__ import annotations

import logging

from textsight.engine.context import DetectionContext, Moment, Rectangle
from textsight.engine.registry import Layer, transform
from textsight.engine.spatial_constants import (
    DIRECTIONS,
    FIELD_ORIGIN,
    FIELD_STRIDE,
    FIELD_WINDOW,
    WINDOW_SCORE_FLOOR,
)
from textsight.utils.math_helpers import dot, luminosity
from textsight.utils.pixels import PixelBuffer
from textsight.utils.windows import Window, WindowStatistics, d_window

logger = logging.getLogger(__name__)


def likelihood(w1: Window, w2: Window, w3: Window) -> float:
    """Variance-delta correlation over average-delta divergence for three windows."""
    d1 = d_window(w2, w1)
    d2 = d_window(w3, w2)
    variance_numerator = abs(dot(d1.d_variance, d2.d_variance))
    variance_denominator = 1 + abs(luminosity(d1.d_variance) * luminosity(d2.d_variance))
    average_numerator = abs(luminosity(d1.d_average) - luminosity(d2.d_average))
    average_denominator = 1 + dot(d1.d_average, d2.d_average) ** 2
    return (variance_numerator / variance_denominator) * (average_numerator / average_denominator)


def simple_likelihood(w1: Window, w2: Window) -> float:
    """Two-window variant: strong variance change, weak average change."""
    d = d_window(w2, w1)
    variance_fraction = dot(d.d_variance, d.d_variance) / (1 + luminosity(d.d_variance) ** 2)
    return variance_fraction / (1 + abs(luminosity(d.d_average)))


def chain_moments(
    stats: WindowStatistics,
    x: int,
    y: int,
    direction: tuple[int, int],
    size: int,
    depth: int,
) -> list[Moment]:
    ux, uy = direction
    windows = [stats.centred(x + ux * k * size, y + uy * k * size, size) for k in range(depth)]
    if depth == 2:
        return [Moment(value=simple_likelihood(windows[0], windows[1]), position=1, length=1)]
    return [
        Moment(value=likelihood(windows[k], windows[k + 1], windows[k + 2]), position=k + 1, length=1)
        for k in range(depth - 2)
    ]


def likelihood_field(buffer: PixelBuffer, radius: int) -> list[Rectangle]:
    """Raw per-pixel horizontal likelihood as 1x1 rectangles (unnormalized).

    Three 5x5 windows at x-5, x, x+5, sampled every other pixel.
    """
    stats = WindowStatistics(buffer)
    x0, y0 = FIELD_ORIGIN
    limit = max(radius, 2 * FIELD_WINDOW)
    field: list[Rectangle] = []
    for x in range(x0, buffer.width - limit, FIELD_STRIDE):
        for y in range(y0, buffer.height - limit, FIELD_STRIDE):
            score = likelihood(
                stats.window(x - FIELD_WINDOW, y, FIELD_WINDOW, FIELD_WINDOW),
                stats.window(x, y, FIELD_WINDOW, FIELD_WINDOW),
                stats.window(x + FIELD_WINDOW, y, FIELD_WINDOW, FIELD_WINDOW),
            )
            field.append(Rectangle(x=x, y=y, width=1, height=1, confidence=score))
    return field


@transform(
    id="T1.02",
    layer=Layer.ANALYSIS,
    dependencies=["T0.01"],
    tags={"window"},
    description="Score variance/average changes along window chains per direction",
)
def window_analysis(ctx: DetectionContext) -> None:
    if not ctx.points:
        return

    config = ctx.config
    stats = WindowStatistics(ctx.buffer)

    for point in ctx.points:
        point.moments = [
            chain_moments(stats, point.x, point.y, direction, config.window_size, config.depth)
            for direction in DIRECTIONS
        ]

    # Rescale by the call-local peak so that classification sees [0, 1] moments.
    # Peaks under the floor are not stretched to full scale.
    peak = max(
        (m.value for point in ctx.points for ray in point.moments for m in ray),
        default=0.0,
    )
    scale = max(peak, WINDOW_SCORE_FLOOR)
    for point in ctx.points:
        point.moments = [
            [Moment(value=m.value / scale, position=m.position, length=m.length) for m in ray]
            for ray in point.moments
        ]

    ctx.diagnostics["window_peak"] = peak
    ctx.diagnostics["windows"] = stats.cached
    logger.debug("Window analysis: %d windows, peak score %.4g", stats.cached, peak)
