"""Health check endpoint — public, no auth required."""

from __future__ import annotations

from fastapi import APIRouter

from src.dependencies import AppSettings, EngineConfig
from src.models.base import utc_now

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(settings: AppSettings, config: EngineConfig) -> dict:
    """Liveness check. Returns 200 if the API process is up.

    Also reports which cycle config version the engine is running.
    """
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "cycle_config_version": config.version,
        "timestamp": utc_now().isoformat(),
    }
