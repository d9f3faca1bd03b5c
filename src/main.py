"""Cadence API — FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import get_settings
from src.cycles.config_loader import get_cycle_config, reload_cycle_config
from src.middleware.security import SecurityHeadersMiddleware
from src.routers import cycles, health

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cadence")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks.

    The cycle config is loaded eagerly so a bad YAML file fails the startup
    instead of the first request.
    """
    settings = get_settings()
    logger.info(
        "Starting Cadence API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    if settings.cycle_config_path is not None:
        reload_cycle_config(settings.cycle_config_path)
    else:
        get_cycle_config()
    yield
    logger.info("Cadence API shut down")


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Cadence API",
        description=(
            "Menstrual cycle statistics, period and ovulation forecasts, "
            "fertility windows and health insights."
        ),
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ---------- Middleware (order matters — outermost first) ----------

    # Security headers on every response
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS — must be the innermost middleware so it can handle preflight
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix — always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    app.include_router(cycles.router, prefix="/api/v1")

    return app


app = create_app()
