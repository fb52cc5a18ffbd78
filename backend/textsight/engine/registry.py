"""Transform registry: every detection stage is a standalone function registered via decorator.

Usage:
    @transform(id="T1.03", layer=Layer.ANALYSIS, dependencies=["T1.01"], tags={"ray", "window"})
    def point_classification(ctx: DetectionContext) -> None:
        for point in ctx.points:
            point.classification = classify(point.summaries, ctx.config)

Tags name the strategies a transform belongs to; the pipeline gates out
transforms whose tags do not include the configured strategy.
"""

from __future__ import annotations

import enum
import heapq
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from textsight.engine.context import DetectionContext

logger = logging.getLogger(__name__)


class Layer(enum.IntEnum):
    SAMPLING = 0
    ANALYSIS = 1
    LINKING = 2
    GROWTH = 3
    NORMALIZATION = 4


@dataclass
class TransformSpec:
    id: str
    layer: Layer
    fn: Callable[[DetectionContext], None]
    dependencies: list[str] = field(default_factory=list)
    tags: set[str] = field(default_factory=set)
    description: str = ""


class TransformRegistry:
    """Registry of detection transforms, keyed by transform ID."""

    def __init__(self) -> None:
        self._transforms: dict[str, TransformSpec] = {}

    def register(self, spec: TransformSpec) -> None:
        if spec.id in self._transforms:
            raise ValueError(f"Duplicate transform ID: {spec.id}")
        self._transforms[spec.id] = spec
        logger.debug("Registered transform %s (%s)", spec.id, spec.layer.name)

    def get(self, transform_id: str) -> TransformSpec:
        return self._transforms[transform_id]

    def get_layer(self, layer: Layer) -> list[TransformSpec]:
        return [s for s in self.all() if s.layer == layer]

    def all(self) -> list[TransformSpec]:
        return sorted(self._transforms.values(), key=lambda s: (s.layer, s.id))

    def outside_strategy(self, strategy: str) -> set[str]:
        """IDs of tagged transforms that do not serve ``strategy``."""
        return {s.id for s in self._transforms.values() if s.tags and strategy not in s.tags}

    def resolve_order(
        self,
        requested_ids: set[str] | None = None,
        excluded_ids: set[str] | None = None,
    ) -> list[TransformSpec]:
        """Topological order over the requested transforms and their dependencies.

        ``None`` requests everything. Excluded IDs are never scheduled, and
        a dependency on an excluded (or unregistered) transform is treated
        as already satisfied. Ties are broken by ID so the order is stable.
        """
        excluded = excluded_ids or set()
        wanted = set(self._transforms) if requested_ids is None else set(requested_ids)

        # Pull in transitive dependencies
        pending = list(wanted)
        while pending:
            spec = self._transforms.get(pending.pop())
            if spec is None or spec.id in excluded:
                continue
            for dep in spec.dependencies:
                if dep not in wanted:
                    wanted.add(dep)
                    pending.append(dep)

        pool = {tid: self._transforms[tid] for tid in wanted - excluded if tid in self._transforms}
        waiting = {tid: {d for d in spec.dependencies if d in pool} for tid, spec in pool.items()}
        dependents: dict[str, list[str]] = {tid: [] for tid in pool}
        for tid, deps in waiting.items():
            for dep in deps:
                dependents[dep].append(tid)

        ready = [tid for tid, deps in waiting.items() if not deps]
        heapq.heapify(ready)
        ordered: list[TransformSpec] = []
        while ready:
            tid = heapq.heappop(ready)
            ordered.append(pool[tid])
            for other in dependents[tid]:
                waiting[other].discard(tid)
                if not waiting[other]:
                    heapq.heappush(ready, other)

        if len(ordered) != len(pool):
            stuck = sorted(set(pool) - {s.id for s in ordered})
            raise ValueError(f"Circular dependency detected among: {stuck}")

        return ordered

    @property
    def count(self) -> int:
        return len(self._transforms)


# Module-level singleton
_registry = TransformRegistry()


def get_registry() -> TransformRegistry:
    return _registry


def transform(
    *,
    id: str,
    layer: Layer,
    dependencies: list[str] | None = None,
    tags: set[str] | None = None,
    description: str = "",
):
    """Register a detection stage on the module-level registry.

    ``tags`` lists the strategies the stage serves; untagged stages run for
    every strategy.
    """

    def decorator(fn: Callable[[DetectionContext], None]):
        _registry.register(
            TransformSpec(
                id=id,
                layer=layer,
                fn=fn,
                dependencies=list(dependencies or []),
                tags=set(tags or ()),
                description=description,
            )
        )
        return fn

    return decorator
