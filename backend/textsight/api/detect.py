"""POST /api/detect: text-region detection on an uploaded image."""

from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from textsight.config import Settings
from textsight.dependencies import get_settings
from textsight.engine.detector import get_detector
from textsight.engine.config import DetectionConfig
from textsight.errors import InputError
from textsight.models.requests import DetectRequest, DetectRgbaRequest
from textsight.models.responses import DetectResponse, RectangleModel
from textsight.utils.pixels import PixelBuffer

logger = logging.getLogger(__name__)

router = APIRouter()


def _b64decode(payload: str, name: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputError(f"{name} is not valid base64: {e}") from e


def _run(buffer: PixelBuffer, options: dict[str, Any], settings: Settings) -> DetectResponse:
    start = time.perf_counter()

    if buffer.width * buffer.height > settings.max_image_pixels:
        raise InputError(
            f"Image has {buffer.width * buffer.height} pixels, limit is {settings.max_image_pixels}"
        )

    config = DetectionConfig.from_options({"strategy": settings.default_strategy, **options})
    result = get_detector(config.strategy).detect_with_diagnostics(buffer, config)

    elapsed = (time.perf_counter() - start) * 1000

    return DetectResponse(
        rectangles=[RectangleModel(**r.as_dict()) for r in result.rectangles],
        strategy=config.strategy,
        points=result.diagnostics.get("points", 0),
        candidates=result.diagnostics.get("candidates", 0),
        processing_time_ms=round(elapsed, 1),
    )


@router.post("/detect", response_model=DetectResponse)
def detect(req: DetectRequest, settings: Settings = Depends(get_settings)) -> DetectResponse:
    try:
        buffer = PixelBuffer.from_encoded(_b64decode(req.image, "image"))
        return _run(buffer, req.options, settings)
    except InputError as e:
        logger.info("Rejected detect request: %s", e)
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.post("/detect/rgba", response_model=DetectResponse)
def detect_rgba(req: DetectRgbaRequest, settings: Settings = Depends(get_settings)) -> DetectResponse:
    try:
        buffer = PixelBuffer(width=req.width, height=req.height, data=_b64decode(req.data, "data"))
        return _run(buffer, req.options, settings)
    except InputError as e:
        logger.info("Rejected detect request: %s", e)
        raise HTTPException(status_code=422, detail=str(e)) from e
