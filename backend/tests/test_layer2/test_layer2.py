"""Tests for Layer 2: grid linking."""

from textsight.engine.layer0.t0_01_ray_grid import ray_grid
from textsight.engine.layer2.t2_01_grid_linking import grid_linking
from textsight.engine.registry import Layer, get_registry


def test_layer2_registers_linking():
    specs = get_registry().get_layer(Layer.LINKING)
    assert [s.id for s in specs] == ["T2.01"]
    assert specs[0].dependencies == ["T1.03"]


def test_links_are_reciprocal(uniform_buffer, context_factory):
    ctx = context_factory(uniform_buffer)
    ray_grid(ctx)
    grid_linking(ctx)
    for p in ctx.points:
        if p.right is not None:
            assert ctx.points[p.right].left == p.index
        if p.down is not None:
            assert ctx.points[p.down].up == p.index


def test_links_follow_the_lattice(uniform_buffer, context_factory):
    ctx = context_factory(uniform_buffer)
    ray_grid(ctx)
    grid_linking(ctx)
    p = ctx.point_at(3, 4)
    assert p.up == ctx.point_at(2, 4).index
    assert p.down == ctx.point_at(4, 4).index
    assert p.left == ctx.point_at(3, 3).index
    assert p.right == ctx.point_at(3, 5).index


def test_boundary_points_are_not_fully_linked(uniform_buffer, context_factory):
    ctx = context_factory(uniform_buffer)
    ray_grid(ctx)
    grid_linking(ctx)
    first = ctx.point_at(0, 0)
    assert first.up is None and first.left is None
    last = ctx.point_at(ctx.grid_rows - 1, ctx.grid_cols - 1)
    assert last.down is None and last.right is None
    assert not first.fully_linked
    assert ctx.diagnostics["linked"] == (ctx.grid_rows - 2) * (ctx.grid_cols - 2)
