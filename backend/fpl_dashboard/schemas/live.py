"""Live view API response schemas.

These Pydantic models are used for API serialization. They can be populated
directly from the service dataclasses using model_validate(obj, from_attributes=True).
"""

from pydantic import BaseModel, ConfigDict, Field

from fpl_dashboard.services.calculations import MatchStatus


class ScoredPickResponse(BaseModel):
    """A squad pick scored against live data."""

    model_config = ConfigDict(from_attributes=True)

    element: int
    position: int = Field(ge=1, le=15)
    is_captain: bool
    is_vice_captain: bool
    multiplier: int = Field(ge=0, le=3)
    player_name: str
    element_type: int
    club_id: int
    club_short_name: str | None
    fixture_id: int | None
    base_points: int
    points: int  # base_points with captain multiplier applied
    bonus: int
    bps: int
    minutes: int
    provisional_bonus: int = Field(ge=0, le=3)
    is_playing: bool
    is_finished: bool
    match_status: MatchStatus


class SquadTotalsResponse(BaseModel):
    """Live squad totals for the starting XI."""

    model_config = ConfigDict(from_attributes=True)

    total_points: int
    bench_points: int
    playing: int = Field(ge=0, le=11)
    finished: int = Field(ge=0, le=11)
    yet_to_play: int = Field(ge=0, le=11)


class LiveTeamResponse(BaseModel):
    """Response for GET /api/v1/live/team/{entry_id}."""

    model_config = ConfigDict(from_attributes=True)

    entry_id: int
    gameweek: int = Field(ge=1, le=38)
    active_chip: str | None
    starters: list[ScoredPickResponse]
    bench: list[ScoredPickResponse]
    totals: SquadTotalsResponse


class LiveLeagueEntryResponse(BaseModel):
    """A league standings row re-ranked on live points."""

    model_config = ConfigDict(from_attributes=True)

    entry: int
    entry_name: str
    player_name: str
    rank: int
    last_rank: int | None
    event_total: int
    total: int
    live_gw_points: int
    live_total: int
    live_rank: int = Field(ge=1)
    rank_change: int  # Positive = climbed
    has_live_picks: bool


class DifferentialResponse(BaseModel):
    """How many rivals on the page share one of the user's starters."""

    model_config = ConfigDict(from_attributes=True)

    element: int
    position: int
    is_captain: bool
    player_name: str | None
    league_ownership: int = Field(ge=0)
    league_ownership_pct: float = Field(ge=0, le=100)
    total_teams: int = Field(ge=0)
    is_unique: bool
    is_differential: bool


class LiveLeagueResponse(BaseModel):
    """Response for GET /api/v1/live/league/{league_id}."""

    model_config = ConfigDict(from_attributes=True)

    league_id: int
    league_name: str
    gameweek: int = Field(ge=1, le=38)
    page: int
    has_next: bool
    entry_id: int
    user_live_points: int
    standings: list[LiveLeagueEntryResponse]
    differentials: list[DifferentialResponse]
    fetched_entries: int = Field(ge=0)
    failed_entries: int = Field(ge=0)


class PitchSlotResponse(BaseModel):
    """A player placed on the pitch or bench."""

    model_config = ConfigDict(from_attributes=True)

    element: int
    position: int
    web_name: str
    element_type: int
    club_id: int
    club_short_name: str | None
    shirt_url: str | None
    is_captain: bool
    is_vice_captain: bool
    multiplier: int
    points: int
    match_status: MatchStatus


class TeamPitchResponse(BaseModel):
    """Response for GET /api/v1/team/{entry_id}/pitch."""

    model_config = ConfigDict(from_attributes=True)

    formation: str
    goalkeepers: list[PitchSlotResponse]
    defenders: list[PitchSlotResponse]
    midfielders: list[PitchSlotResponse]
    forwards: list[PitchSlotResponse]
    bench: list[PitchSlotResponse]


class TransferResponse(BaseModel):
    """A transfer made by a manager."""

    model_config = ConfigDict(from_attributes=True)

    event: int
    time: str
    element_in: int
    element_in_name: str | None
    element_in_cost: int
    element_out: int
    element_out_name: str | None
    element_out_cost: int


class GameweekTransfersResponse(BaseModel):
    """Transfers made for one gameweek."""

    model_config = ConfigDict(from_attributes=True)

    gameweek: int
    transfers: list[TransferResponse]
    chip: str | None
    is_free_transfer_chip: bool


class TransferLedgerResponse(BaseModel):
    """Response for GET /api/v1/team/{entry_id}/transfers."""

    model_config = ConfigDict(from_attributes=True)

    entry_id: int
    gameweeks: list[GameweekTransfersResponse]
    total_transfers: int = Field(ge=0)
    total_hits: int = Field(ge=0)


class ClassicLeagueResponse(BaseModel):
    """A private classic league the manager has joined."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    entry_rank: int | None = None
    entry_last_rank: int | None = None


class EntryLeaguesResponse(BaseModel):
    """Response for GET /api/v1/team/{entry_id}/leagues."""

    entry_id: int
    leagues: list[ClassicLeagueResponse]
