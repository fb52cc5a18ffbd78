"""End-to-end detection properties for both strategies."""

import numpy as np
import pytest

from textsight.engine import (
    DetectionConfig,
    DetectionError,
    InputError,
    PixelBuffer,
    RayDetector,
    SlidingWindowDetector,
    detect,
    get_detector,
)
from textsight.engine.context import DetectionContext
from textsight.engine.pipeline import Pipeline
from textsight.engine.registry import Layer, TransformRegistry, TransformSpec

NOISE_BLOCK = (20, 20, 8, 8)
WINDOW_BLOCK = (40, 40, 16, 16)


def _intersection(rect, block):
    x, y, w, h = block
    dx = min(rect.x + rect.width, x + w) - max(rect.x, x)
    dy = min(rect.y + rect.height, y + h) - max(rect.y, y)
    return max(0, dx) * max(0, dy)


def _grow(block, by):
    x, y, w, h = block
    return (x - by, y - by, w + 2 * by, h + 2 * by)


def test_get_detector():
    assert isinstance(get_detector("ray"), RayDetector)
    assert isinstance(get_detector("window"), SlidingWindowDetector)
    with pytest.raises(InputError):
        get_detector("neural")


def test_noise_block_scenario(noise_buffer):
    rects = detect(noise_buffer)
    assert rects
    block_area = NOISE_BLOCK[2] * NOISE_BLOCK[3]
    covering = [r for r in rects if _intersection(r, NOISE_BLOCK) / block_area >= 0.5]
    assert covering
    assert all(r.confidence >= 0.1 for r in covering)


def test_no_rectangle_in_the_background(noise_buffer):
    margin = DetectionConfig().margin
    for rect in detect(noise_buffer):
        assert _intersection(rect, _grow(NOISE_BLOCK, margin)) > 0


@pytest.mark.parametrize("strategy", ["ray", "window"])
def test_uniform_input_is_empty(uniform_buffer, strategy):
    assert detect(uniform_buffer, {"strategy": strategy}) == []


@pytest.mark.parametrize("strategy", ["ray", "window"])
def test_solid_color_is_empty(strategy):
    pixels = np.zeros((80, 80, 3), dtype=np.uint8)
    pixels[:] = (12, 200, 90)
    assert detect(PixelBuffer.from_array(pixels), {"strategy": strategy}) == []


@pytest.mark.parametrize("strategy", ["ray", "window"])
def test_faint_change_is_not_amplified(strategy):
    pixels = np.full((96, 96, 3), 128, dtype=np.uint8)
    pixels[50, 50] = 129
    assert detect(PixelBuffer.from_array(pixels), {"strategy": strategy}) == []


@pytest.mark.parametrize("strategy,size", [("ray", 18), ("window", 34)])
def test_degenerate_size_is_empty(page_factory, strategy, size):
    buffer = PixelBuffer.from_array(page_factory(size, (2, 2, 8, 8)))
    assert detect(buffer, {"strategy": strategy}) == []


@pytest.mark.parametrize("strategy", ["ray", "window"])
def test_detection_is_deterministic(window_buffer, strategy):
    first = detect(window_buffer, {"strategy": strategy})
    second = detect(window_buffer, {"strategy": strategy})
    assert first == second


@pytest.mark.parametrize("strategy", ["ray", "window"])
def test_output_confidence_bounds(window_buffer, strategy):
    for rect in detect(window_buffer, {"strategy": strategy}):
        assert 0.1 <= rect.confidence <= 1.0
        assert rect.width > 0 and rect.height > 0
        assert rect.x + rect.width <= window_buffer.width
        assert rect.y + rect.height <= window_buffer.height


def test_window_strategy_finds_the_block(window_buffer):
    rects = detect(window_buffer, {"strategy": "window"})
    assert rects
    margin = DetectionConfig(strategy="window").margin
    for rect in rects:
        assert _intersection(rect, _grow(WINDOW_BLOCK, margin)) > 0


def test_detector_forces_its_strategy(noise_buffer):
    result = RayDetector().detect_with_diagnostics(noise_buffer, {"strategy": "window"})
    assert result.diagnostics["strategy"] == "ray"
    assert result.diagnostics["points"] > 0
    assert "magnitudes" in result.diagnostics


def test_minimum_confidence_filters(noise_buffer):
    loose = detect(noise_buffer, {"minimum_confidence": 0.0})
    strict = detect(noise_buffer, {"minimum_confidence": 0.9})
    assert len(strict) <= len(loose)
    assert all(r.confidence >= 0.9 for r in strict)


def test_overlap_suppression_reduces_output(noise_buffer):
    plain = detect(noise_buffer)
    suppressed = detect(noise_buffer, {"overlap_threshold": 0.3})
    assert 0 < len(suppressed) <= len(plain)


def test_include_color(noise_buffer):
    rects = detect(noise_buffer, {"include_color": True})
    assert rects
    assert all(r.color is not None and len(r.color) == 3 for r in rects)


def test_score_field(window_buffer):
    field = SlidingWindowDetector().score_field(window_buffer)
    assert field
    assert max(r.confidence for r in field) == pytest.approx(1.0)
    assert all(r.confidence >= 0.1 for r in field)


def test_invalid_input_raises():
    with pytest.raises(InputError):
        detect(b"\x00" * 16)
    with pytest.raises(InputError):
        detect(PixelBuffer.from_array(np.zeros((40, 40), dtype=np.uint8)), {"bogus": 1})


@pytest.mark.parametrize(
    "options",
    [
        {"interior_bias": "x"},
        {"minimum_confidence": "high"},
        {"minimum_interior": "x"},
        {"left_edge_bias": "x"},
        {"right_edge_bias": float("nan")},
    ],
)
def test_bad_threshold_is_an_input_error(noise_buffer, options):
    with pytest.raises(InputError):
        detect(noise_buffer, options)
    with pytest.raises(InputError):
        RayDetector().detect_with_diagnostics(noise_buffer, options)


def test_transform_failure_raises_detection_error(noise_buffer):
    def _boom(ctx: DetectionContext) -> None:
        raise RuntimeError("boom")

    reg = TransformRegistry()
    reg.register(TransformSpec(id="T0.01", layer=Layer.SAMPLING, fn=_boom))
    detector = RayDetector(pipeline=Pipeline(registry=reg))
    with pytest.raises(DetectionError) as info:
        detector.detect(noise_buffer)
    assert info.value.errors == {"T0.01": "boom"}
