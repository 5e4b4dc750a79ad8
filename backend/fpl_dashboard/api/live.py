"""Live view routes - squad scoring, live league tables, pitch and transfers."""

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from fpl_dashboard.dependencies import get_live_service
from fpl_dashboard.schemas.live import (
    ClassicLeagueResponse,
    EntryLeaguesResponse,
    LiveLeagueResponse,
    LiveTeamResponse,
    TeamPitchResponse,
    TransferLedgerResponse,
)
from fpl_dashboard.services.fpl_proxy import FplApiError
from fpl_dashboard.services.live import LiveService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["live"])


# =============================================================================
# Route Parameters
# =============================================================================

EntryIdPath = Annotated[int, Path(ge=1, description="FPL entry (team) ID")]
LeagueIdPath = Annotated[int, Path(ge=1, description="Classic league ID")]

# Defaults to the current gameweek when omitted
GameweekQuery = Annotated[
    int | None,
    Query(ge=1, le=38, description="Gameweek (default: current)"),
]

Service = Annotated[LiveService, Depends(get_live_service)]


# =============================================================================
# Error Mapping
# =============================================================================

# Upstream path -> resource named in a 404 message. First match wins.
_UPSTREAM_RESOURCES: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"^/entry/(?P<id>\d+)/event/(?P<gw>\d+)/picks/"),
        "Picks for team {id} in gameweek {gw}",
    ),
    (re.compile(r"^/entry/(?P<id>\d+)/transfers/"), "Transfers for team {id}"),
    (re.compile(r"^/entry/(?P<id>\d+)/history/"), "History for team {id}"),
    (re.compile(r"^/entry/(?P<id>\d+)/$"), "Team {id}"),
    (re.compile(r"^/event/(?P<gw>\d+)/live/"), "Live data for gameweek {gw}"),
    (re.compile(r"^/leagues-classic/(?P<id>\d+)/"), "League {id}"),
    (re.compile(r"^/fixtures/"), "Fixtures"),
    (re.compile(r"^/bootstrap-static/"), "Bootstrap data"),
]


def upstream_resource(path: str | None) -> str:
    """Describe the FPL resource behind an upstream path."""
    if path:
        for pattern, template in _UPSTREAM_RESOURCES:
            match = pattern.match(path)
            if match:
                return template.format(**match.groupdict())
    return "FPL data"


def live_upstream_error(e: FplApiError) -> HTTPException:
    """Map an FplApiError from a composed view, naming the upstream resource on 404."""
    if e.status_code == 404:
        return HTTPException(status_code=404, detail=f"{upstream_resource(e.path)} not found")
    return HTTPException(status_code=e.status_code, detail=e.message)


# =============================================================================
# Routes
# =============================================================================


@router.get("/live/team/{entry_id}", response_model=LiveTeamResponse)
async def get_live_team(
    entry_id: EntryIdPath,
    service: Service,
    gw: GameweekQuery = None,
) -> LiveTeamResponse:
    """
    Get a manager's squad scored against live gameweek data.

    Includes provisional bonus for matches in progress and the squad's
    playing / finished / yet-to-play counts.
    """
    try:
        team = await service.get_live_team(entry_id, gw)
    except FplApiError as e:
        raise live_upstream_error(e) from e
    except Exception as e:
        logger.exception(f"Failed to get live team {entry_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error while calculating live points",
        ) from e
    return LiveTeamResponse.model_validate(team)


@router.get("/live/league/{league_id}", response_model=LiveLeagueResponse)
async def get_live_league(
    league_id: LeagueIdPath,
    service: Service,
    entry_id: int = Query(..., ge=1, description="Viewing manager's entry ID"),
    gw: GameweekQuery = None,
    page: int = Query(default=1, ge=1, description="Standings page"),
) -> LiveLeagueResponse:
    """
    Get a league standings page re-ranked on live points.

    Only the current gameweek is available: a gw other than the current one
    is rejected with 422. Also returns the viewing manager's starters
    classified by how many rivals on the page own them.
    """
    try:
        league = await service.get_live_league(league_id, entry_id, gw, page)
    except FplApiError as e:
        raise live_upstream_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Failed to get live league {league_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error while calculating live standings",
        ) from e
    return LiveLeagueResponse.model_validate(league)


@router.get("/team/{entry_id}/pitch", response_model=TeamPitchResponse)
async def get_team_pitch(
    entry_id: EntryIdPath,
    service: Service,
    gw: GameweekQuery = None,
) -> TeamPitchResponse:
    """Get a manager's squad laid out in formation with live points."""
    try:
        pitch = await service.get_team_pitch(entry_id, gw)
    except FplApiError as e:
        raise live_upstream_error(e) from e
    except Exception as e:
        logger.exception(f"Failed to get pitch for team {entry_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error while building team pitch",
        ) from e
    return TeamPitchResponse.model_validate(pitch)


@router.get("/team/{entry_id}/transfers", response_model=TransferLedgerResponse)
async def get_transfer_ledger(entry_id: EntryIdPath, service: Service) -> TransferLedgerResponse:
    """Get a manager's transfers grouped by gameweek, with hit costs."""
    try:
        ledger = await service.get_transfer_ledger(entry_id)
    except FplApiError as e:
        raise live_upstream_error(e) from e
    except Exception as e:
        logger.exception(f"Failed to get transfers for team {entry_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error while building transfer ledger",
        ) from e
    return TransferLedgerResponse.model_validate(ledger)


@router.get("/team/{entry_id}/leagues", response_model=EntryLeaguesResponse)
async def get_entry_leagues(entry_id: EntryIdPath, service: Service) -> EntryLeaguesResponse:
    """Get the private classic leagues a manager has joined."""
    try:
        leagues = await service.get_entry_leagues(entry_id)
    except FplApiError as e:
        raise live_upstream_error(e) from e
    except Exception as e:
        logger.exception(f"Failed to get leagues for team {entry_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error while listing leagues",
        ) from e
    return EntryLeaguesResponse(
        entry_id=entry_id,
        leagues=[ClassicLeagueResponse.model_validate(league) for league in leagues],
    )
