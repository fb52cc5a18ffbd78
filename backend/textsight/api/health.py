"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from textsight import __version__
from textsight.engine.registry import get_registry
from textsight.models.responses import HealthResponse, TransformInfo

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        transforms_registered=len(get_registry().all()),
    )


@router.get("/transforms", response_model=list[TransformInfo])
async def transforms() -> list[TransformInfo]:
    return [
        TransformInfo(
            id=spec.id,
            layer=int(spec.layer),
            dependencies=list(spec.dependencies),
            tags=sorted(spec.tags),
            description=spec.description,
        )
        for spec in get_registry().all()
    ]
