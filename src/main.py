"""FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import (
    data_router,
    health_router,
    insights_router,
    notifications_router,
    practice_router,
    review_router,
    settings_router,
    stats_router,
    users_router,
)
from src.config import get_app_config, get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def run_migrations() -> None:
    """Run alembic migrations on startup."""
    # Skip migrations during testing
    if os.environ.get("TESTING") == "1":
        logger.info("Skipping migrations in test mode")
        return

    try:
        alembic_cfg = Config("alembic.ini")
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Failed to run migrations: {e}")
        raise


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    run_migrations()
    yield


app = FastAPI(
    title="Clip & Review API",
    description="Capture short insights and review them on a spaced-repetition schedule",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for PWA access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router)
app.include_router(users_router)
app.include_router(insights_router)
app.include_router(review_router)
app.include_router(practice_router)
app.include_router(data_router)
app.include_router(settings_router)
app.include_router(stats_router)
app.include_router(notifications_router)


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": "Clip & Review API",
        "version": "0.1.0",
        "docs": "/docs",
    }


def run() -> None:
    """Serve the API on the host and port from config.yaml."""
    logging.basicConfig(level=logging.INFO)
    server = get_app_config().server
    uvicorn.run(
        "src.main:app",
        host=server.get("host", "0.0.0.0"),
        port=server.get("port", 8000),
        reload=settings.environment == "development",
    )


if __name__ == "__main__":
    run()
