"""Tests for the transform registry."""

import pytest

from textsight.engine.context import DetectionContext
from textsight.engine.registry import Layer, TransformRegistry, TransformSpec, get_registry


def _noop(ctx: DetectionContext) -> None:
    pass


def test_register_and_get():
    reg = TransformRegistry()
    spec = TransformSpec(id="T0.01", layer=Layer.SAMPLING, fn=_noop)
    reg.register(spec)
    assert reg.get("T0.01") is spec
    assert reg.count == 1


def test_duplicate_id_rejected():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T0.01", layer=Layer.SAMPLING, fn=_noop))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(TransformSpec(id="T0.01", layer=Layer.SAMPLING, fn=_noop))


def test_get_layer():
    reg = TransformRegistry()
    s0 = TransformSpec(id="T0.01", layer=Layer.SAMPLING, fn=_noop)
    s1 = TransformSpec(id="T1.01", layer=Layer.ANALYSIS, fn=_noop)
    reg.register(s0)
    reg.register(s1)
    layer0 = reg.get_layer(Layer.SAMPLING)
    assert len(layer0) == 1
    assert layer0[0].id == "T0.01"


def test_resolve_order_with_deps():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T0.01", layer=Layer.SAMPLING, fn=_noop))
    reg.register(TransformSpec(id="T1.03", layer=Layer.ANALYSIS, fn=_noop, dependencies=["T0.01"]))
    order = reg.resolve_order({"T1.03"})
    ids = [s.id for s in order]
    assert ids.index("T0.01") < ids.index("T1.03")


def test_resolve_order_all():
    reg = TransformRegistry()
    for i in range(5):
        reg.register(TransformSpec(id=f"T0.0{i+1}", layer=Layer.SAMPLING, fn=_noop))
    order = reg.resolve_order(None)
    assert len(order) == 5


def test_resolve_order_excluded_dependency_is_dropped():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T0.01", layer=Layer.SAMPLING, fn=_noop))
    reg.register(TransformSpec(id="T1.01", layer=Layer.ANALYSIS, fn=_noop, dependencies=["T0.01"]))
    reg.register(TransformSpec(id="T1.02", layer=Layer.ANALYSIS, fn=_noop, dependencies=["T0.01"]))
    reg.register(
        TransformSpec(id="T1.03", layer=Layer.ANALYSIS, fn=_noop, dependencies=["T1.01", "T1.02"])
    )
    order = [s.id for s in reg.resolve_order({"T1.03"}, excluded_ids={"T1.02"})]
    assert order == ["T0.01", "T1.01", "T1.03"]


def test_resolve_order_detects_cycles():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T1.01", layer=Layer.ANALYSIS, fn=_noop, dependencies=["T1.02"]))
    reg.register(TransformSpec(id="T1.02", layer=Layer.ANALYSIS, fn=_noop, dependencies=["T1.01"]))
    with pytest.raises(ValueError, match="Circular"):
        reg.resolve_order(None)


def test_global_registry_holds_detection_transforms():
    ids = {s.id for s in get_registry().all()}
    assert ids == {"T0.01", "T1.01", "T1.02", "T1.03", "T2.01", "T3.01", "T4.01", "T4.02", "T4.03"}


def test_strategy_tags():
    reg = get_registry()
    assert reg.get("T1.01").tags == {"ray"}
    assert reg.get("T1.02").tags == {"window"}
    assert reg.get("T3.01").tags == {"ray", "window"}
