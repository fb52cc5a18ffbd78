"""Pipeline orchestrator: runs transforms in dependency order with strategy gating."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import time

from textsight.engine.context import DetectionContext
from textsight.engine.registry import Layer, TransformRegistry, get_registry

logger = logging.getLogger(__name__)

TRANSFORM_PACKAGES = ("layer0", "layer1", "layer2", "layer3", "layer4")

# Opt-in post-processing transforms, enabled by config.
OVERLAP_SUPPRESSION = "T4.02"
DOMINANT_COLOR = "T4.03"


class Pipeline:
    """Orchestrates the transform pipeline."""

    def __init__(self, registry: TransformRegistry | None = None) -> None:
        self.registry = registry or get_registry()

    def run(self, ctx: DetectionContext) -> DetectionContext:
        """Run the full pipeline on the given context."""
        start = time.perf_counter()

        # Determine which transforms to skip based on strategy and geometry
        skip_ids = self._adaptive_gate(ctx)

        # Get execution order
        all_specs = self.registry.all()
        requested = {s.id for s in all_specs} - skip_ids
        ordered = self.registry.resolve_order(requested, excluded_ids=skip_ids)

        logger.info(
            "Pipeline [%s]: %d transforms queued (%d skipped)",
            ctx.strategy,
            len(ordered),
            len(skip_ids),
        )

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                spec.fn(ctx)
                ctx.completed_transforms.add(spec.id)
                elapsed = (time.perf_counter() - t0) * 1000
                logger.debug("  %s completed in %.1fms", spec.id, elapsed)
            except Exception as e:
                ctx.errors[spec.id] = str(e)
                logger.warning("  %s FAILED: %s", spec.id, e)

        total = (time.perf_counter() - start) * 1000
        ctx.diagnostics["elapsed_ms"] = round(total, 1)
        logger.info(
            "Pipeline complete: %d/%d transforms in %.0fms",
            len(ctx.completed_transforms),
            len(ordered),
            total,
        )
        return ctx

    def run_layer(self, ctx: DetectionContext, layer: Layer) -> DetectionContext:
        """Run only the strategy's transforms in a specific layer."""
        skip_ids = self._adaptive_gate(ctx)
        for spec in self.registry.get_layer(layer):
            if spec.id in skip_ids:
                continue
            try:
                spec.fn(ctx)
                ctx.completed_transforms.add(spec.id)
            except Exception as e:
                ctx.errors[spec.id] = str(e)
                logger.warning("  %s FAILED: %s", spec.id, e)
        return ctx

    def _adaptive_gate(self, ctx: DetectionContext) -> set[str]:
        """Determine which transforms to skip for this call.

        - Transforms not tagged with the configured strategy are skipped
        - Opt-in post-processing runs only when its option is set
        - An image too small for one grid row/column skips everything past sampling
        """
        config = ctx.config
        skip: set[str] = self.registry.outside_strategy(ctx.strategy)

        if config.overlap_threshold is None:
            skip.add(OVERLAP_SUPPRESSION)
        if not config.include_color:
            skip.add(DOMINANT_COLOR)

        if ctx.is_degenerate:
            logger.debug(
                "Image %dx%d smaller than twice the %dpx margin; no grid",
                ctx.buffer.width,
                ctx.buffer.height,
                config.margin,
            )
            skip.update(s.id for s in self.registry.all() if s.layer > Layer.SAMPLING)

        return skip


def load_transforms() -> None:
    """Import all transform modules so @transform decorators fire."""
    for layer_name in TRANSFORM_PACKAGES:
        package_name = f"textsight.engine.{layer_name}"
        try:
            package = importlib.import_module(package_name)
        except ModuleNotFoundError as e:
            if e.name != package_name:
                raise
            continue
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package_name}.{module_name}")


def create_pipeline() -> Pipeline:
    """Factory function for creating a pipeline with every transform registered."""
    load_transforms()
    return Pipeline()
