"""FastAPI application factory (F9).

Main entry point for the Creative Journey Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from journey.config.app_config import load_app_config
from journey.templates.registry import TEMPLATES_DIR, list_templates
from journey.web.routes import (
    analytics_router,
    assessments_router,
    health_router,
    iterations_router,
    peer_reviews_router,
    phase_templates_router,
    reports_router,
    resources_router,
    rubrics_router,
    templates_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    templates = list_templates()
    logger.info(
        "api_startup",
        templates_found=len(templates),
        templates_dir=str(TEMPLATES_DIR.absolute()),
        passing_score=config.scoring.passing_score,
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Creative Journey API",
        description="Web API for rubrics, assessments, peer review and class analytics",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(rubrics_router)
    app.include_router(assessments_router)
    app.include_router(peer_reviews_router)
    app.include_router(iterations_router)
    app.include_router(analytics_router)
    app.include_router(reports_router)
    app.include_router(templates_router)
    app.include_router(resources_router)
    app.include_router(phase_templates_router)

    return app


# Default app instance for uvicorn
app = create_app()
