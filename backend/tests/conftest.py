"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from textsight.engine.config import DetectionConfig
from textsight.engine.context import DetectionContext
from textsight.engine.pipeline import load_transforms
from textsight.utils.pixels import PixelBuffer

load_transforms()

GRAY = 128

# 8x8 text-like block on a 64x64 gray page
NOISE_BLOCK = (20, 20, 8, 8)
# 16x16 block on a 96x96 page, large enough for window chains
WINDOW_BLOCK = (40, 40, 16, 16)


def noise_page(size: int, block: tuple[int, int, int, int], seed: int = 0, contrast: float = 1.0) -> np.ndarray:
    """Uniform gray page with a block of black/white noise.

    ``contrast`` scales the block's deviation from the background gray.
    """
    page = np.full((size, size, 3), GRAY, dtype=np.float64)
    x, y, w, h = block
    rng = np.random.RandomState(seed)
    bits = rng.randint(0, 2, size=(h, w)).astype(np.float64)
    values = GRAY + contrast * (bits * 255.0 - GRAY)
    page[y : y + h, x : x + w] = values[:, :, None]
    return page.astype(np.uint8)


def make_context(buffer: PixelBuffer, **options) -> DetectionContext:
    return DetectionContext(buffer=buffer, config=DetectionConfig.from_options(options))


@pytest.fixture
def noise_buffer() -> PixelBuffer:
    return PixelBuffer.from_array(noise_page(64, NOISE_BLOCK))


@pytest.fixture
def window_buffer() -> PixelBuffer:
    return PixelBuffer.from_array(noise_page(96, WINDOW_BLOCK))


@pytest.fixture
def uniform_buffer() -> PixelBuffer:
    return PixelBuffer.from_array(np.full((64, 64, 3), GRAY, dtype=np.uint8))


@pytest.fixture
def context_factory():
    return make_context


@pytest.fixture
def page_factory():
    return noise_page
