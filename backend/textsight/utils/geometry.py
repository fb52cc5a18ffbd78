"""Leaf-node rectangle geometry helpers. No engine imports."""

from __future__ import annotations

from shapely.geometry import Polygon, box


def rect_polygon(x: float, y: float, width: float, height: float) -> Polygon:
    """Axis-aligned rectangle as a shapely polygon (image coordinates)."""
    return box(x, y, x + width, y + height)


def overlap_area(a: Polygon, b: Polygon) -> float:
    if not a.intersects(b):
        return 0.0
    return float(a.intersection(b).area)


def iou(a: Polygon, b: Polygon) -> float:
    """Intersection over union; 0 for disjoint or degenerate shapes."""
    inter = overlap_area(a, b)
    union = a.area + b.area - inter
    if union <= 0:
        return 0.0
    return float(inter / union)
