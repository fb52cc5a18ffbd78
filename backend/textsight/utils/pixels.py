"""Pixel buffer and sampler: the leaf every detection stage reads from.

The buffer is row-major RGBA8. Sampling methods are not bounds-checked:
callers derive their coordinates from the configured margin, so an
out-of-range request is a programming error and fails loudly.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from textsight.errors import InputError
from textsight.utils.math_helpers import LUMINOSITY_WEIGHTS, MAX_CHANNEL

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True)
class PixelBuffer:
    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.width, int) or not isinstance(self.height, int):
            raise InputError("width and height must be integers")
        if self.width <= 0 or self.height <= 0:
            raise InputError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise InputError(
                f"Buffer holds {len(self.data)} bytes, expected {expected} "
                f"for a {self.width}x{self.height} RGBA8 image"
            )

    @classmethod
    def from_array(cls, pixels: NDArray) -> PixelBuffer:
        """Build from an (H, W), (H, W, 3) or (H, W, 4) uint8-compatible array."""
        arr = np.asarray(pixels)
        if arr.ndim == 2:
            arr = np.stack([arr] * 3, axis=-1)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise InputError(f"Unsupported pixel array shape {arr.shape}")
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        height, width = arr.shape[:2]
        return cls(width=int(width), height=int(height), data=np.ascontiguousarray(arr).tobytes())

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelBuffer:
        rgba = image.convert("RGBA")
        return cls(width=rgba.width, height=rgba.height, data=rgba.tobytes())

    @classmethod
    def from_encoded(cls, raw: bytes) -> PixelBuffer:
        """Decode image file bytes (PNG, JPEG, ...) with Pillow."""
        from PIL import Image, UnidentifiedImageError

        try:
            with Image.open(io.BytesIO(raw)) as image:
                return cls.from_image(image)
        except (UnidentifiedImageError, OSError) as e:
            raise InputError(f"Could not decode image: {e}") from e

    @cached_property
    def rgb(self) -> NDArray[np.float64]:
        """(H, W, 3) float array of raw channel values."""
        raw = np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)
        return raw[:, :, :3].astype(np.float64)

    @cached_property
    def luminance(self) -> NDArray[np.float64]:
        """(H, W) luminosity in [0, 1]."""
        return self.rgb @ (np.array(LUMINOSITY_WEIGHTS) / MAX_CHANNEL)

    def pixel_vector(self, x: int, y: int) -> NDArray[np.float64]:
        return self.rgb[y, x]

    def luminosity(self, x: int, y: int) -> float:
        return float(self.luminance[y, x])
