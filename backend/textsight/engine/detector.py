"""Detector capability: one entry point, two interchangeable strategies.

    detect(buffer, {"strategy": "window"})
    get_detector("ray").detect_with_diagnostics(buffer, config)

Options are merged over DetectionConfig defaults once per call; each call
builds its own DetectionContext, so detectors hold no state between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from textsight.engine.config import STRATEGIES, DetectionConfig
from textsight.engine.context import DetectionContext, Rectangle
from textsight.engine.layer1.t1_02_window_analysis import likelihood_field
from textsight.engine.layer4.t4_01_confidence_normalization import clip_confidences
from textsight.engine.pipeline import Pipeline, create_pipeline
from textsight.errors import DetectionError, InputError
from textsight.utils.pixels import PixelBuffer

logger = logging.getLogger(__name__)

Options = Mapping[str, Any] | DetectionConfig | None


@dataclass
class DetectionResult:
    rectangles: list[Rectangle] = field(default_factory=list)
    diagnostics: dict[str, Any] = field(default_factory=dict)


class Detector(Protocol):
    strategy: str

    def detect(self, buffer: PixelBuffer, config: Options = None) -> list[Rectangle]: ...


class PipelineDetector:
    """Runs the transform pipeline with the strategy fixed to this detector's."""

    strategy = "ray"

    def __init__(self, pipeline: Pipeline | None = None) -> None:
        self.pipeline = pipeline or create_pipeline()

    def configure(self, config: Options = None) -> DetectionConfig:
        merged = DetectionConfig.from_options(config)
        if merged.strategy != self.strategy:
            merged = merged.with_options(strategy=self.strategy)
        return merged

    def detect_with_diagnostics(self, buffer: PixelBuffer, config: Options = None) -> DetectionResult:
        if not isinstance(buffer, PixelBuffer):
            raise InputError(f"Expected a PixelBuffer, got {type(buffer).__name__}")

        ctx = DetectionContext(buffer=buffer, config=self.configure(config))
        self.pipeline.run(ctx)
        if ctx.errors:
            raise DetectionError(ctx.errors)

        ctx.diagnostics.setdefault("points", ctx.num_points)
        ctx.diagnostics.setdefault("candidates", len(ctx.candidates))
        ctx.diagnostics["strategy"] = ctx.strategy
        logger.info(
            "Detected %d rectangles in %dx%d image (%s)",
            len(ctx.rectangles),
            buffer.width,
            buffer.height,
            ctx.strategy,
        )
        return DetectionResult(rectangles=ctx.rectangles, diagnostics=ctx.diagnostics)

    def detect(self, buffer: PixelBuffer, config: Options = None) -> list[Rectangle]:
        return self.detect_with_diagnostics(buffer, config).rectangles


class RayDetector(PipelineDetector):
    strategy = "ray"


class SlidingWindowDetector(PipelineDetector):
    strategy = "window"

    def score_field(self, buffer: PixelBuffer, config: Options = None) -> list[Rectangle]:
        """Per-pixel horizontal likelihood, as normalized 1x1 rectangles."""
        merged = self.configure(config)
        return clip_confidences(likelihood_field(buffer, merged.radius), merged.minimum_confidence)


DETECTORS: dict[str, type[PipelineDetector]] = {
    "ray": RayDetector,
    "window": SlidingWindowDetector,
}


def get_detector(strategy: str = "ray") -> PipelineDetector:
    if strategy not in DETECTORS:
        raise InputError(f"Unknown strategy {strategy!r}; expected one of {STRATEGIES}")
    return DETECTORS[strategy]()


def detect(buffer: PixelBuffer, options: Options = None) -> list[Rectangle]:
    """Find text-like rectangles in an RGBA buffer."""
    config = DetectionConfig.from_options(options)
    return get_detector(config.strategy).detect(buffer, config)
