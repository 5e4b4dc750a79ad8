"""FPL API proxy service with per-endpoint caching."""

import asyncio
import logging
import time
from typing import Any

import httpx
from cachetools import TLRUCache
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from fpl_dashboard.config import Settings, get_settings
from fpl_dashboard.services import cache_policies
from fpl_dashboard.services.cache_policies import CachePolicy
from fpl_dashboard.services.fpl_data import find_current_gameweek, parse_gameweeks

logger = logging.getLogger(__name__)

# HTTP status codes that should trigger a retry
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class FplApiError(Exception):
    """Raised when the FPL API returns an error or cannot be reached."""

    def __init__(self, status_code: int, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.path = path  # Upstream path that failed, when known


def _is_retryable_error(exception: BaseException) -> bool:
    """Check if an error should trigger a retry."""
    if isinstance(exception, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRYABLE_STATUS_CODES
    return False


class CacheEntry:
    """Cached response body with the TTL of the policy it was fetched under."""

    def __init__(self, data: Any, ttl: int) -> None:
        self.data = data
        self.ttl = ttl


def _entry_expiry(_key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class FPLProxyService:
    """
    Proxy service for FPL API requests.

    Features:
    - In-memory caching with a TTL per endpoint (see cache_policies)
    - Retries with exponential backoff for timeouts, 429 and 5xx
    - Upstream errors raised as FplApiError carrying the HTTP status
    - User-Agent header to avoid blocks
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=self._settings.cache_max_entries,
            ttu=_entry_expiry,
            timer=time.monotonic,
        )
        # Bootstrap is ~1.8MB and needed by most requests; fetch it once at a time
        self._bootstrap_lock = asyncio.Lock()
        self._client = httpx.AsyncClient(
            base_url=self._settings.fpl_api_base_url,
            timeout=self._settings.request_timeout,
            headers={"User-Agent": self._settings.user_agent},
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(_is_retryable_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _request(self, path: str) -> Any:
        """GET a path from the FPL API with retries."""
        response = await self._client.get(path)
        response.raise_for_status()
        return response.json()

    async def _fetch(self, path: str, policy: CachePolicy) -> Any:
        """Fetch data from FPL API with caching.

        Raises:
            FplApiError: On an HTTP error status or when the API is unreachable
        """
        entry = self._cache.get(path)
        if entry is not None:
            logger.debug(f"Cache hit for {path}")
            return entry.data

        try:
            logger.info(f"Fetching {path} from FPL API")
            data = await self._request(path)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"HTTP error fetching {path}: {status}")
            raise FplApiError(
                status, e.response.text or f"FPL API error: {status}", path
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Request error fetching {path}: {e}")
            raise FplApiError(503, "FPL API is unavailable", path) from e

        self._cache[path] = CacheEntry(data, policy.ttl)
        return data

    async def get_bootstrap_static(self) -> dict:
        """Get bootstrap-static data (players, teams, events)."""
        path = "/bootstrap-static/"
        entry = self._cache.get(path)
        if entry is not None:
            return entry.data
        async with self._bootstrap_lock:
            # Another request may have populated it while we waited
            return await self._fetch(path, cache_policies.BOOTSTRAP)

    async def get_current_gameweek(self) -> int:
        """Current gameweek from bootstrap (is_current, else first unfinished, else 1)."""
        bootstrap = await self.get_bootstrap_static()
        return find_current_gameweek(parse_gameweeks(bootstrap))

    async def resolve_live_policy(self, event_id: int) -> CachePolicy:
        """Pick the live cache policy from the gameweek's finished flag."""
        bootstrap = await self.get_bootstrap_static()
        finished = any(gw.id == event_id and gw.finished for gw in parse_gameweeks(bootstrap))
        return cache_policies.live_policy(finished)

    async def resolve_picks_policy(self, event_id: int) -> CachePolicy:
        """Pick the picks cache policy: past gameweeks are locked."""
        current = await self.get_current_gameweek()
        return cache_policies.picks_policy(event_id, current)

    async def get_fixtures(self, event: int | None = None) -> list:
        """Get fixtures, optionally filtered by gameweek."""
        if event is not None:
            return await self._fetch(f"/fixtures/?event={event}", cache_policies.FIXTURES)
        return await self._fetch("/fixtures/", cache_policies.FIXTURES)

    async def get_event_live(self, event_id: int) -> dict:
        """Get live event data (points, bonus, etc)."""
        policy = await self.resolve_live_policy(event_id)
        return await self._fetch(f"/event/{event_id}/live/", policy)

    async def get_entry(self, entry_id: int) -> dict:
        """Get manager entry data."""
        return await self._fetch(f"/entry/{entry_id}/", cache_policies.TEAM_ENTRY)

    async def get_entry_picks(self, entry_id: int, event_id: int) -> dict:
        """Get manager picks for a specific gameweek."""
        policy = await self.resolve_picks_policy(event_id)
        return await self._fetch(f"/entry/{entry_id}/event/{event_id}/picks/", policy)

    async def get_entry_history(self, entry_id: int) -> dict:
        """Get manager's gameweek history, past seasons, and chips used."""
        return await self._fetch(f"/entry/{entry_id}/history/", cache_policies.TEAM_HISTORY)

    async def get_entry_transfers(self, entry_id: int) -> list:
        """Get all transfers made by a manager this season."""
        return await self._fetch(f"/entry/{entry_id}/transfers/", cache_policies.TEAM_TRANSFERS)

    async def get_element_summary(self, element_id: int) -> dict:
        """Get player summary with fixture history and upcoming matches."""
        return await self._fetch(
            f"/element-summary/{element_id}/", cache_policies.PLAYER_SUMMARY
        )

    async def get_league_standings(self, league_id: int, page: int = 1) -> dict:
        """Get one page of classic league standings."""
        return await self._fetch(
            f"/leagues-classic/{league_id}/standings/?page_standings={page}",
            cache_policies.LEAGUE_STANDINGS,
        )

    def clear_cache(self) -> None:
        """Drop all cached responses."""
        self._cache.clear()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
