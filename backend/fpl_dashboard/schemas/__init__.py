"""API response schemas."""

from fpl_dashboard.schemas.live import (
    ClassicLeagueResponse,
    DifferentialResponse,
    EntryLeaguesResponse,
    LiveLeagueEntryResponse,
    LiveLeagueResponse,
    LiveTeamResponse,
    ScoredPickResponse,
    SquadTotalsResponse,
    TeamPitchResponse,
    TransferLedgerResponse,
)

__all__ = [
    "ClassicLeagueResponse",
    "DifferentialResponse",
    "EntryLeaguesResponse",
    "LiveLeagueEntryResponse",
    "LiveLeagueResponse",
    "LiveTeamResponse",
    "ScoredPickResponse",
    "SquadTotalsResponse",
    "TeamPitchResponse",
    "TransferLedgerResponse",
]
