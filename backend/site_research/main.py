"""Site Research Backend - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from site_research.config import get_settings
from site_research.routers import research
from site_research.services.research.pipeline import reset_research_pipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    logger.info("Starting Site Research Backend...")

    settings = get_settings()
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY not configured - report generation disabled")

    logger.info("Site Research Backend started successfully")

    yield

    logger.info("Shutting down Site Research Backend...")
    reset_research_pipeline()
    logger.info("Site Research Backend shutdown complete")


app = FastAPI(
    title="Site Research Backend",
    description="Crawls a website and synthesizes a token-bounded research report",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in get_settings().cors_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(research.router)


@app.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint for monitoring.

    Reports whether the report backend is configured.
    """
    settings = get_settings()
    synthesizer_status = "configured" if settings.anthropic_api_key else "unconfigured"
    return {
        "status": "healthy" if settings.anthropic_api_key else "degraded",
        "services": {"synthesizer": {"status": synthesizer_status}},
    }
