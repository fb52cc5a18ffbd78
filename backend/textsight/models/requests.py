"""API request models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DetectRequest(BaseModel):
    image: str = Field(..., description="Base64-encoded image file (PNG, JPEG, ...)")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Detection options merged over the defaults (e.g., strategy='window')",
    )


class DetectRgbaRequest(BaseModel):
    width: int = Field(..., gt=0, description="Image width in pixels")
    height: int = Field(..., gt=0, description="Image height in pixels")
    data: str = Field(..., description="Base64-encoded row-major RGBA8 pixels")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Detection options merged over the defaults",
    )
