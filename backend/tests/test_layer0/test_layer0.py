"""Tests for Layer 0 (grid sampling) and the pixel buffer it reads."""

import io

import numpy as np
import pytest
from PIL import Image

from textsight.engine.layer0.t0_01_ray_grid import lattice, ray_grid
from textsight.engine.registry import Layer, get_registry
from textsight.errors import InputError
from textsight.utils.pixels import PixelBuffer


def test_layer0_registers_grid():
    ids = {s.id for s in get_registry().get_layer(Layer.SAMPLING)}
    assert ids == {"T0.01"}


def test_lattice_respects_margin():
    xs, ys = lattice(64, 64, 9, 4, 3)
    assert xs[0] == 9 and ys[0] == 9
    assert max(xs) < 64 - 9
    assert max(ys) < 64 - 9
    assert len(xs) == 12
    assert len(ys) == 16


def test_grid_points_row_major(noise_buffer, context_factory):
    ctx = context_factory(noise_buffer)
    ray_grid(ctx)
    assert ctx.num_points == ctx.grid_rows * ctx.grid_cols == 12 * 16
    assert [p.index for p in ctx.points] == list(range(ctx.num_points))
    p = ctx.point_at(2, 3)
    assert (p.row, p.col) == (2, 3)
    assert (p.x, p.y) == (9 + 3 * 4, 9 + 2 * 3)
    assert ctx.diagnostics["points"] == ctx.num_points


def test_every_ray_stays_inside_the_image(noise_buffer, context_factory):
    ctx = context_factory(noise_buffer)
    ray_grid(ctx)
    dx, dy = ctx.config.ray_offsets
    for p in ctx.points:
        assert 0 <= p.x + dx.min() and p.x + dx.max() < noise_buffer.width
        assert 0 <= p.y + dy.min() and p.y + dy.max() < noise_buffer.height


def test_grid_empty_when_image_too_small(context_factory):
    ctx = context_factory(PixelBuffer.from_array(np.zeros((10, 10), dtype=np.uint8)))
    ray_grid(ctx)
    assert ctx.points == []
    assert ctx.grid_rows == ctx.grid_cols == 0


def test_pixel_buffer_validates_length():
    with pytest.raises(InputError, match="expected 16"):
        PixelBuffer(width=2, height=2, data=b"\x00" * 15)


def test_pixel_buffer_rejects_bad_dimensions():
    with pytest.raises(InputError):
        PixelBuffer(width=0, height=4, data=b"")
    with pytest.raises(InputError):
        PixelBuffer(width=2.0, height=2, data=b"\x00" * 16)


def test_pixel_buffer_from_array_adds_alpha():
    buffer = PixelBuffer.from_array(np.full((3, 5, 3), 200, dtype=np.uint8))
    assert (buffer.width, buffer.height) == (5, 3)
    assert len(buffer.data) == 5 * 3 * 4
    assert buffer.data[3] == 255


def test_luminosity_uses_rec709_weights():
    pixels = np.zeros((1, 3, 3), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0)
    pixels[0, 1] = (0, 255, 0)
    pixels[0, 2] = (255, 255, 255)
    buffer = PixelBuffer.from_array(pixels)
    assert buffer.luminosity(0, 0) == pytest.approx(0.2126)
    assert buffer.luminosity(1, 0) == pytest.approx(0.7152)
    assert buffer.luminosity(2, 0) == pytest.approx(1.0)
    assert buffer.pixel_vector(1, 0).tolist() == [0.0, 255.0, 0.0]


def test_from_encoded_decodes_png():
    out = io.BytesIO()
    Image.new("RGB", (7, 4), (10, 20, 30)).save(out, format="PNG")
    buffer = PixelBuffer.from_encoded(out.getvalue())
    assert (buffer.width, buffer.height) == (7, 4)
    assert buffer.pixel_vector(6, 3).tolist() == [10.0, 20.0, 30.0]


def test_from_encoded_rejects_garbage():
    with pytest.raises(InputError, match="decode"):
        PixelBuffer.from_encoded(b"not an image")
