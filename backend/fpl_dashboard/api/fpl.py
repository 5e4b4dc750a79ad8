"""FPL API proxy routes - cached passthrough of upstream documents."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response

from fpl_dashboard.dependencies import get_fpl_proxy
from fpl_dashboard.services import cache_policies
from fpl_dashboard.services.cache_policies import CachePolicy
from fpl_dashboard.services.fpl_proxy import FplApiError, FPLProxyService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/fpl", tags=["fpl"])


# =============================================================================
# Route Parameters
# =============================================================================

TeamIdPath = Annotated[int, Path(ge=1, description="FPL entry (team) ID")]
PlayerIdPath = Annotated[int, Path(ge=1, description="FPL element (player) ID")]
LeagueIdPath = Annotated[int, Path(ge=1, description="Classic league ID")]
GameweekPath = Annotated[int, Path(ge=1, le=38, description="Gameweek number")]

Proxy = Annotated[FPLProxyService, Depends(get_fpl_proxy)]


# =============================================================================
# Helpers
# =============================================================================


def upstream_http_error(e: FplApiError, not_found: str) -> HTTPException:
    """Map an FplApiError to the HTTPException returned to the client."""
    if e.status_code == 404:
        return HTTPException(status_code=404, detail=not_found)
    return HTTPException(status_code=e.status_code, detail=e.message)


def _set_cache_headers(response: Response, policy: CachePolicy) -> None:
    response.headers["Cache-Control"] = cache_policies.cache_control_header(policy)


# =============================================================================
# Routes
# =============================================================================


@router.get("/bootstrap")
async def get_bootstrap(response: Response, proxy: Proxy) -> Any:
    """Players, teams and gameweeks (bootstrap-static)."""
    try:
        data = await proxy.get_bootstrap_static()
    except FplApiError as e:
        raise upstream_http_error(e, "Bootstrap data not found") from e
    _set_cache_headers(response, cache_policies.BOOTSTRAP)
    return data


@router.get("/fixtures")
async def get_fixtures(
    response: Response,
    proxy: Proxy,
    gw: int | None = Query(default=None, ge=1, le=38, description="Filter by gameweek"),
) -> Any:
    """All fixtures, or one gameweek's fixtures."""
    try:
        data = await proxy.get_fixtures(gw)
    except FplApiError as e:
        raise upstream_http_error(e, "Fixtures not found") from e
    _set_cache_headers(response, cache_policies.FIXTURES)
    return data


@router.get("/live/{gw}")
async def get_live(gw: GameweekPath, response: Response, proxy: Proxy) -> Any:
    """Live player stats for a gameweek.

    Finished gameweeks are immutable and cached for a year.
    """
    try:
        policy = await proxy.resolve_live_policy(gw)
        data = await proxy.get_event_live(gw)
    except FplApiError as e:
        raise upstream_http_error(e, f"Live data for gameweek {gw} not found") from e
    _set_cache_headers(response, policy)
    return data


@router.get("/entry/{team_id}")
async def get_entry(team_id: TeamIdPath, response: Response, proxy: Proxy) -> Any:
    """Manager entry summary."""
    try:
        data = await proxy.get_entry(team_id)
    except FplApiError as e:
        raise upstream_http_error(e, f"Team {team_id} not found") from e
    _set_cache_headers(response, cache_policies.TEAM_ENTRY)
    return data


@router.get("/entry/{team_id}/history")
async def get_entry_history(team_id: TeamIdPath, response: Response, proxy: Proxy) -> Any:
    """Manager gameweek history, past seasons and chips."""
    try:
        data = await proxy.get_entry_history(team_id)
    except FplApiError as e:
        raise upstream_http_error(e, f"History for team {team_id} not found") from e
    _set_cache_headers(response, cache_policies.TEAM_HISTORY)
    return data


@router.get("/entry/{team_id}/transfers")
async def get_entry_transfers(team_id: TeamIdPath, response: Response, proxy: Proxy) -> Any:
    """All transfers a manager made this season."""
    try:
        data = await proxy.get_entry_transfers(team_id)
    except FplApiError as e:
        raise upstream_http_error(e, f"Transfers for team {team_id} not found") from e
    _set_cache_headers(response, cache_policies.TEAM_TRANSFERS)
    return data


@router.get("/entry/{team_id}/picks/{gw}")
async def get_entry_picks(
    team_id: TeamIdPath,
    gw: GameweekPath,
    response: Response,
    proxy: Proxy,
) -> Any:
    """A manager's picks for a gameweek."""
    try:
        policy = await proxy.resolve_picks_policy(gw)
        data = await proxy.get_entry_picks(team_id, gw)
    except FplApiError as e:
        raise upstream_http_error(
            e, f"Picks for team {team_id} in gameweek {gw} not found"
        ) from e
    _set_cache_headers(response, policy)
    return data


@router.get("/element/{player_id}")
async def get_element_summary(player_id: PlayerIdPath, response: Response, proxy: Proxy) -> Any:
    """Player fixture history and upcoming fixtures."""
    try:
        data = await proxy.get_element_summary(player_id)
    except FplApiError as e:
        raise upstream_http_error(e, f"Player {player_id} not found") from e
    _set_cache_headers(response, cache_policies.PLAYER_SUMMARY)
    return data


@router.get("/leagues/{league_id}")
async def get_league_standings(
    league_id: LeagueIdPath,
    response: Response,
    proxy: Proxy,
    page: int = Query(default=1, ge=1, description="Standings page"),
) -> Any:
    """One page of classic league standings."""
    try:
        data = await proxy.get_league_standings(league_id, page)
    except FplApiError as e:
        raise upstream_http_error(e, f"League {league_id} not found") from e
    _set_cache_headers(response, cache_policies.LEAGUE_STANDINGS)
    return data
