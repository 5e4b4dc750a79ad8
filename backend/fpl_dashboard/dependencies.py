"""Shared FastAPI dependencies for API routes."""

import logging

from fastapi import Depends

from fpl_dashboard.config import get_settings
from fpl_dashboard.services.fpl_proxy import FPLProxyService
from fpl_dashboard.services.live import LiveService

logger = logging.getLogger(__name__)

# Global proxy; one HTTP client and one response cache per process
_proxy: FPLProxyService | None = None


def get_fpl_proxy() -> FPLProxyService:
    """Get the process-wide FPL proxy, creating it on first use."""
    global _proxy
    if _proxy is None:
        logger.info("Initializing FPL proxy service")
        _proxy = FPLProxyService(get_settings())
    return _proxy


async def close_fpl_proxy() -> None:
    """Close the FPL proxy's HTTP client."""
    global _proxy
    if _proxy is not None:
        logger.info("Closing FPL proxy service")
        await _proxy.close()
        _proxy = None


def get_live_service(proxy: FPLProxyService = Depends(get_fpl_proxy)) -> LiveService:
    """FastAPI dependency providing a LiveService bound to the shared proxy.

    Usage:
        @router.get("/endpoint")
        async def endpoint(service: LiveService = Depends(get_live_service)):
            ...
    """
    settings = get_settings()
    return LiveService(
        proxy,
        max_concurrent_picks=settings.max_concurrent_picks_requests,
        max_league_entries=settings.max_league_entries,
    )
