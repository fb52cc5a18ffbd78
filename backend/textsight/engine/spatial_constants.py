"""Shared constants for the sampling and classification transforms.

Directions use image coordinates: x grows to the right, y grows downward.
"""

# Compass order used for every per-direction list on a sample point.
DIRECTIONS = (
    (0, -1),  # N
    (1, -1),  # NE
    (1, 0),  # E
    (1, 1),  # SE
    (0, 1),  # S
    (-1, 1),  # SW
    (-1, 0),  # W
    (-1, -1),  # NW
)

N, NE, E, SE, S, SW, W, NW = range(8)

# Minimum |subtotal| for a closed segment to count as a moment, in
# normalized luminosity units.
DEFAULT_NOISE_FLOOR = 0.025

# Sliding-window field scan (three 5x5 windows along x, stride 2).
FIELD_WINDOW = 5
FIELD_STRIDE = 2
FIELD_ORIGIN = (15, 10)

# Window scores are divided by max(call peak, floor). A full-contrast
# texture edge scores around 1e-2; a single-level change scores far below.
WINDOW_SCORE_FLOOR = 1e-4
