"""Window statistics: average and variance colour vectors over pixel rectangles."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from textsight.utils.math_helpers import MAX_CHANNEL, ColorVector, c_times, minus, times
from textsight.utils.pixels import PixelBuffer


@dataclass(frozen=True)
class Window:
    x: int
    y: int
    w: int
    h: int
    count: int
    average: ColorVector
    variance: ColorVector


@dataclass(frozen=True)
class WindowDelta:
    d_average: ColorVector
    d_variance: ColorVector


def d_window(w1: Window, w2: Window) -> WindowDelta:
    """Difference w1 - w2 on both statistics."""
    return WindowDelta(
        d_average=minus(w1.average, w2.average),
        d_variance=minus(w1.variance, w2.variance),
    )


class WindowStatistics:
    """Computes windows over one buffer, memoized by (x, y, w, h).

    Colours are scaled to [0, 1]. An instance belongs to a single detection
    call; the cache dies with it.
    """

    def __init__(self, buffer: PixelBuffer) -> None:
        self._rgb = buffer.rgb / MAX_CHANNEL
        self._cache: dict[tuple[int, int, int, int], Window] = {}

    def window(self, x: int, y: int, w: int, h: int) -> Window:
        key = (x, y, w, h)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        pixels = self._rgb[y : y + h, x : x + w].reshape(-1, 3)
        if len(pixels) != w * h:
            raise IndexError(f"Window {key} extends past the image")
        count = len(pixels)
        average = times(pixels.sum(axis=0), 1 / count)
        variance = minus(times(c_times(pixels, pixels).sum(axis=0), 1 / count), c_times(average, average))
        win = Window(x=x, y=y, w=w, h=h, count=count, average=average, variance=variance)
        self._cache[key] = win
        return win

    def centred(self, cx: int, cy: int, size: int) -> Window:
        half = size // 2
        return self.window(cx - half, cy - half, size, size)

    @property
    def cached(self) -> int:
        return len(self._cache)
