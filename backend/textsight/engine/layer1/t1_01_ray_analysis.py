"""T1.01: Ray Analysis.

Cast 8 fixed-direction rays from every grid point and turn each ray's
luminosity profile into moments: runs of same-signed deviation from the
ray's mean that are closed by a sign crossing. A stroke crossing the ray
shows up as a departure from, and return to, the local average.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from textsight.engine.context import DetectionContext, Moment
from textsight.engine.registry import Layer, transform


def _sign(v: float) -> int:
    return (v > 0) - (v < 0)


def extract_moments(samples: NDArray[np.float64], noise_floor: float) -> list[Moment]:
    """Split a ray profile into closed same-sign segments above the noise floor.

    The trailing segment is dropped: no second crossing confirms it.
    """
    if len(samples) < 2:
        return []
    mean = float(np.mean(samples))
    deviations = [float(s) - mean for s in samples]

    moments: list[Moment] = []
    subtotal = deviations[0]
    count = 1
    for i in range(1, len(deviations)):
        d = deviations[i]
        if _sign(d) == _sign(subtotal):
            subtotal += d
            count += 1
            continue
        if abs(subtotal) > noise_floor:
            moments.append(Moment(value=abs(subtotal), position=i, length=count))
        subtotal = d
        count = 1
    return moments


def sample_rays(ctx: DetectionContext) -> NDArray[np.float64]:
    """Luminosity samples for every point, shaped (points, 8, ray_steps)."""
    dx, dy = ctx.config.ray_offsets
    xs = np.array([p.x for p in ctx.points], dtype=np.int64)
    ys = np.array([p.y for p in ctx.points], dtype=np.int64)
    return ctx.buffer.luminance[ys[:, None, None] + dy[None], xs[:, None, None] + dx[None]]


@transform(
    id="T1.01",
    layer=Layer.ANALYSIS,
    dependencies=["T0.01"],
    tags={"ray"},
    description="Cast 8 rays per point and extract luminosity moments",
)
def ray_analysis(ctx: DetectionContext) -> None:
    if not ctx.points:
        return

    samples = sample_rays(ctx)
    noise_floor = ctx.config.noise_floor
    total = 0

    for point, rays in zip(ctx.points, samples):
        point.moments = [extract_moments(ray, noise_floor) for ray in rays]
        total += sum(len(m) for m in point.moments)

    ctx.diagnostics["moments"] = total
