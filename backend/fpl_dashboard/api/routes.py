"""API route definitions - FPL proxy and live view endpoints."""

from fastapi import APIRouter

from fpl_dashboard.api.fpl import router as fpl_router
from fpl_dashboard.api.live import router as live_router

router = APIRouter()

# =============================================================================
# FPL API proxy (cached upstream documents)
# =============================================================================
router.include_router(fpl_router)

# =============================================================================
# Live views (calculated from proxied documents)
# =============================================================================
router.include_router(live_router)
