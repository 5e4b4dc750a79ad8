"""Main FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fpl_dashboard.api.routes import router
from fpl_dashboard.config import get_settings
from fpl_dashboard.dependencies import close_fpl_proxy

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="FPL Dashboard Backend",
    description="Backend API for cached FPL data, live points, live league tables and differentials",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.on_event("startup")
async def startup_event() -> None:
    """Log startup information."""
    logger.info("Starting FPL Dashboard Backend")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"FPL API base: {settings.fpl_api_base_url}")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Cleanup on shutdown."""
    logger.info("Shutting down FPL Dashboard Backend")
    await close_fpl_proxy()
