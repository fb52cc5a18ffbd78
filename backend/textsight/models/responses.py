"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    transforms_registered: int = 0


class TransformInfo(BaseModel):
    id: str
    layer: int
    dependencies: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    description: str = ""


class RectangleModel(BaseModel):
    x: int
    y: int
    width: int
    height: int
    confidence: float = Field(..., ge=0.0, le=1.0)
    color: list[int] | None = Field(default=None, description="Mean RGB when include_color is set")


class DetectResponse(BaseModel):
    rectangles: list[RectangleModel] = Field(default_factory=list)
    strategy: str
    points: int = 0
    candidates: int = 0
    processing_time_ms: float = 0.0
