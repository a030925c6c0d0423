from __future__ import annotations
"""System API — generation service usage statistics and provider info."""

from fastapi import APIRouter

from storyforge.config import get_settings
from storyforge.services.image_gen import get_image_service

router = APIRouter()
settings = get_settings()


@router.get("/metrics")
async def generation_metrics():
    """Return usage statistics for the image generation service."""
    service = get_image_service()
    return {
        "services": [service.get_metrics()],
        "engine": service.engine_label(),
        "mock_mode": settings.USE_MOCK_API,
    }
