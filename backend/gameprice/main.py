"""Game Price Scraper -- FastAPI Application Entry Point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gameprice.api.v1.router import api_v1_router
from gameprice.config import settings
from gameprice.core.logging import configure_logging
from gameprice.scrapers.registry import get_site_registry

configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info(
        "api_starting",
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
        webhook_url=settings.N8N_WEBHOOK_URL,
        flaresolverr_url=settings.FLARESOLVERR_URL,
    )

    # Fail fast on an inconsistent site configuration
    registry = get_site_registry()
    logger.info("site_profiles_ready", domains=len(registry.domains()))

    yield

    # Each scrape closes its own orchestrator and browser
    logger.info("api_shutting_down")


app = FastAPI(
    title="Game Price Scraper API",
    description="Scrapes game-currency prices from Turkish e-pin shops for n8n",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# n8n workflows call the endpoints without a version prefix
app.include_router(api_v1_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Game Price Scraper API",
        "version": "1.0.0",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health",
    }


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("gameprice.main:app", host="0.0.0.0", port=settings.PORT)
