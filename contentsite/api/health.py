"""Health check endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from contentsite.api.deps import get_settings
from contentsite.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

VERSION = "0.1.0"


class HealthResponse(BaseModel):
    status: str
    version: str
    content: str


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Health check endpoint for monitoring and load balancers."""
    content_status = "ok"
    if not settings.content_dir.is_dir():
        logger.warning("Health check: content directory %s is missing", settings.content_dir)
        content_status = "missing"

    return HealthResponse(
        status="ok" if content_status == "ok" else "degraded",
        version=VERSION,
        content=content_status,
    )
