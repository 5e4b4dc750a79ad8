"""Service layer for business logic."""

from fpl_dashboard.services.fpl_proxy import FplApiError, FPLProxyService
from fpl_dashboard.services.live import LiveService

__all__ = ["FplApiError", "FPLProxyService", "LiveService"]
