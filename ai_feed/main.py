"""
FastAPI application entry point.
"""

import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from ai_feed import deps
from ai_feed.api.router import router as v1_router
from ai_feed.config import get_settings, load_feed_settings
from ai_feed.core.feed.scheduler import PushScheduler
from ai_feed.schemas.common import HealthResponse


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the push scheduler on startup, stop it on shutdown."""
    scheduler = PushScheduler(
        settings_loader=load_feed_settings,
        client_factory=deps.create_woo_client,
        interval=settings.push_interval_seconds,
        timeout=settings.push_timeout_seconds
    )
    if settings.push_interval_seconds > 0:
        scheduler.start()
    app.state.push_scheduler = scheduler
    yield
    await scheduler.stop()


app = FastAPI(
    title="AI Product Feed API",
    description="WooCommerce product feed for AI shopping integrations",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(v1_router, prefix="/api/v1")


@app.get("/api/v1/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(ok=True)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "message": "AI Product Feed API",
        "version": "1.0.0",
        "docs": "/docs"
    }
