"""TextSight text-region detection engine."""

from textsight.engine.registry import transform, Layer, get_registry
from textsight.engine.config import DetectionConfig
from textsight.engine.context import DetectionContext, SamplePoint, Rectangle
from textsight.engine.pipeline import Pipeline
from textsight.engine.detector import (
    DetectionResult,
    RayDetector,
    SlidingWindowDetector,
    detect,
    get_detector,
)
from textsight.errors import DetectionError, InputError
from textsight.utils.pixels import PixelBuffer

__all__ = [
    "transform",
    "Layer",
    "get_registry",
    "DetectionConfig",
    "DetectionContext",
    "SamplePoint",
    "Rectangle",
    "Pipeline",
    "DetectionResult",
    "RayDetector",
    "SlidingWindowDetector",
    "detect",
    "get_detector",
    "DetectionError",
    "InputError",
    "PixelBuffer",
]
