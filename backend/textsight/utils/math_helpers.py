"""Math helpers: colour-vector arithmetic, luminosity, log-transform. No engine imports."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

ColorVector = NDArray[np.float64]

# Rec. 709 luma weights for (R, G, B).
LUMINOSITY_WEIGHTS = (0.2126, 0.7152, 0.0722)

# Channel range of an RGBA8 buffer.
MAX_CHANNEL = 255.0

_WEIGHTS = np.array(LUMINOSITY_WEIGHTS)


def minus(v1: ColorVector, v2: ColorVector) -> ColorVector:
    return v1 - v2


def times(v: ColorVector, factor: float) -> ColorVector:
    return v * factor


def c_times(v1: ColorVector, v2: ColorVector) -> ColorVector:
    """Componentwise product. Works row-wise on (N, 3) stacks too."""
    return v1 * v2


def dot(v1: ColorVector, v2: ColorVector) -> float:
    return float(np.dot(v1, v2))


def luminosity(v: ColorVector) -> float:
    """Perceptual brightness of a colour vector (same units as the vector)."""
    return float(np.dot(v, _WEIGHTS))


def log_transform(values: NDArray[np.float64]) -> NDArray[np.float64]:
    """sign(v) * log10(1 + |v|). Used to dampen raw rectangle confidences."""
    return np.sign(values) * np.log10(1 + np.abs(values))
