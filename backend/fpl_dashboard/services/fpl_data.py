"""Typed snapshots of FPL API documents and the lookups built from them.

The FPL API returns loosely-typed JSON. Everything the calculation core needs is
parsed here once into frozen dataclasses with explicit defaults, so downstream
code never has to guess whether a key is missing, null or an empty string.

Parsing never raises for absent optional fields. Passing ``None`` where a whole
document or collection is required is a caller bug and raises ``ValueError``.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Position element_types
POSITION_GKP = 1
POSITION_DEF = 2
POSITION_MID = 3
POSITION_FWD = 4

# Squad slots 1-11 are the starting XI, 12-15 the bench
STARTING_XI_SIZE = 11

BPS_IDENTIFIER = "bps"

# league_type of invite-only classic leagues ("s" = system, public)
PRIVATE_LEAGUE_TYPE = "x"


def _safe_int(val: Any, default: int = 0) -> int:
    """Safely convert API value to int, handling None and empty strings."""
    if val is None or val == "":
        return default
    try:
        return int(val)
    except (ValueError, TypeError):
        return default


def _safe_float(val: Any, default: float = 0.0) -> float:
    """Safely convert API value to float, handling None and empty strings."""
    if val is None or val == "":
        return default
    try:
        return float(val)
    except (ValueError, TypeError):
        return default


def _optional_int(val: Any) -> int | None:
    if val is None or val == "":
        return None
    try:
        return int(val)
    except (ValueError, TypeError):
        return None


def _require(value: Any, name: str) -> Any:
    if value is None:
        raise ValueError(f"{name} is required")
    return value


# =============================================================================
# Data Models
# =============================================================================


@dataclass(frozen=True, slots=True)
class Player:
    """A player from bootstrap-static ``elements``."""

    id: int
    web_name: str
    club_id: int
    element_type: int  # GK=1, DEF=2, MID=3, FWD=4
    status: str  # a=fit, d=doubtful, s=suspended, i/u/n=unavailable
    selected_by_percent: float


@dataclass(frozen=True, slots=True)
class Club:
    """A Premier League club from bootstrap-static ``teams``."""

    id: int
    code: int  # Used for shirt image lookup, not the same as id
    short_name: str
    name: str


@dataclass(frozen=True, slots=True)
class Gameweek:
    """A gameweek from bootstrap-static ``events``."""

    id: int
    is_current: bool
    is_next: bool
    finished: bool


@dataclass(frozen=True, slots=True)
class StatValue:
    """One ranked (player, value) pair in a fixture stat table."""

    element: int
    value: int


@dataclass(frozen=True, slots=True)
class FixtureStat:
    """A per-fixture stat table, e.g. the BPS leaderboard."""

    identifier: str
    home: tuple[StatValue, ...]
    away: tuple[StatValue, ...]


@dataclass(frozen=True, slots=True)
class Fixture:
    """A fixture with score, state flags and in-play stat tables."""

    id: int
    event: int | None
    home_club_id: int
    away_club_id: int
    home_score: int | None
    away_score: int | None
    started: bool
    finished: bool
    finished_provisional: bool  # Match over, bonus not yet confirmed
    stats: tuple[FixtureStat, ...] = ()

    def stat(self, identifier: str) -> FixtureStat | None:
        for stat in self.stats:
            if stat.identifier == identifier:
                return stat
        return None


@dataclass(frozen=True, slots=True)
class LiveStat:
    """A player's live statistics for one gameweek."""

    minutes: int = 0
    goals_scored: int = 0
    assists: int = 0
    clean_sheets: int = 0
    goals_conceded: int = 0
    saves: int = 0
    penalties_saved: int = 0
    penalties_missed: int = 0
    own_goals: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    bonus: int = 0  # Final bonus, authoritative once awarded
    bps: int = 0
    total_points: int = 0  # Before captain multiplier


@dataclass(frozen=True, slots=True)
class Pick:
    """A squad selection for one entry and gameweek."""

    element: int
    position: int  # 1-11 starting XI, 12-15 bench
    is_captain: bool
    is_vice_captain: bool
    multiplier: int  # 0=bench, 1=playing, 2=captain, 3=triple captain

    @property
    def is_starter(self) -> bool:
        return self.position <= STARTING_XI_SIZE


@dataclass(frozen=True, slots=True)
class PicksDocument:
    """An entry's picks for a gameweek plus the chip played."""

    picks: tuple[Pick, ...]
    active_chip: str | None


@dataclass(frozen=True, slots=True)
class LeagueEntry:
    """One row of classic league standings."""

    entry: int
    entry_name: str
    player_name: str
    rank: int
    last_rank: int | None
    event_total: int
    total: int


@dataclass(frozen=True, slots=True)
class LeagueStandingsPage:
    """A single page of classic league standings."""

    league_id: int
    league_name: str
    page: int
    has_next: bool
    results: tuple[LeagueEntry, ...]


@dataclass(frozen=True, slots=True)
class ClassicLeague:
    """A classic league an entry belongs to, from the entry document."""

    id: int
    name: str
    entry_rank: int | None
    entry_last_rank: int | None


# =============================================================================
# Parsers
# =============================================================================


def parse_players(bootstrap: Mapping[str, Any]) -> list[Player]:
    """Parse ``elements`` from a bootstrap-static document."""
    _require(bootstrap, "bootstrap")
    players = []
    for e in bootstrap.get("elements") or []:
        player_id = _safe_int(e.get("id"))
        if player_id <= 0:
            logger.warning(f"Skipping element without a valid id: {e!r:.200}")
            continue
        players.append(
            Player(
                id=player_id,
                web_name=e.get("web_name") or "Unknown",
                club_id=_safe_int(e.get("team")),
                element_type=_safe_int(e.get("element_type")),
                status=e.get("status") or "a",
                selected_by_percent=_safe_float(e.get("selected_by_percent")),
            )
        )
    return players


def parse_clubs(bootstrap: Mapping[str, Any]) -> list[Club]:
    """Parse ``teams`` from a bootstrap-static document."""
    _require(bootstrap, "bootstrap")
    return [
        Club(
            id=_safe_int(t.get("id")),
            code=_safe_int(t.get("code")),
            short_name=t.get("short_name") or "",
            name=t.get("name") or "",
        )
        for t in bootstrap.get("teams") or []
    ]


def parse_gameweeks(bootstrap: Mapping[str, Any]) -> list[Gameweek]:
    """Parse ``events`` from a bootstrap-static document."""
    _require(bootstrap, "bootstrap")
    return [
        Gameweek(
            id=_safe_int(ev.get("id")),
            is_current=bool(ev.get("is_current")),
            is_next=bool(ev.get("is_next")),
            finished=bool(ev.get("finished")),
        )
        for ev in bootstrap.get("events") or []
    ]


def _parse_stat_values(rows: Iterable[Mapping[str, Any]] | None) -> tuple[StatValue, ...]:
    return tuple(
        StatValue(element=_safe_int(r.get("element")), value=_safe_int(r.get("value")))
        for r in rows or []
    )


def parse_fixtures(fixtures: Iterable[Mapping[str, Any]]) -> list[Fixture]:
    """Parse a fixtures document (a JSON list)."""
    _require(fixtures, "fixtures")
    result = []
    for f in fixtures:
        stats = tuple(
            FixtureStat(
                identifier=s.get("identifier") or "",
                home=_parse_stat_values(s.get("h")),
                away=_parse_stat_values(s.get("a")),
            )
            for s in f.get("stats") or []
        )
        result.append(
            Fixture(
                id=_safe_int(f.get("id")),
                event=_optional_int(f.get("event")),
                home_club_id=_safe_int(f.get("team_h")),
                away_club_id=_safe_int(f.get("team_a")),
                home_score=_optional_int(f.get("team_h_score")),
                away_score=_optional_int(f.get("team_a_score")),
                started=bool(f.get("started")),
                finished=bool(f.get("finished")),
                finished_provisional=bool(f.get("finished_provisional")),
                stats=stats,
            )
        )
    return result


def parse_live_stat(stats: Mapping[str, Any] | None) -> LiveStat:
    """Parse one ``stats`` block from the event live document."""
    s = stats or {}
    return LiveStat(
        minutes=_safe_int(s.get("minutes")),
        goals_scored=_safe_int(s.get("goals_scored")),
        assists=_safe_int(s.get("assists")),
        clean_sheets=_safe_int(s.get("clean_sheets")),
        goals_conceded=_safe_int(s.get("goals_conceded")),
        saves=_safe_int(s.get("saves")),
        penalties_saved=_safe_int(s.get("penalties_saved")),
        penalties_missed=_safe_int(s.get("penalties_missed")),
        own_goals=_safe_int(s.get("own_goals")),
        yellow_cards=_safe_int(s.get("yellow_cards")),
        red_cards=_safe_int(s.get("red_cards")),
        bonus=_safe_int(s.get("bonus")),
        bps=_safe_int(s.get("bps")),
        total_points=_safe_int(s.get("total_points")),
    )


def parse_picks(document: Mapping[str, Any]) -> PicksDocument:
    """Parse an entry picks document.

    A missing multiplier defaults to 2 for the captain and 1 for everyone else,
    which matches what the API sends for a normal (non-chip) gameweek.
    """
    _require(document, "picks document")
    picks = []
    for p in document.get("picks") or []:
        is_captain = bool(p.get("is_captain"))
        picks.append(
            Pick(
                element=_safe_int(p.get("element")),
                position=_safe_int(p.get("position")),
                is_captain=is_captain,
                is_vice_captain=bool(p.get("is_vice_captain")),
                multiplier=_safe_int(p.get("multiplier"), 2 if is_captain else 1),
            )
        )
    picks.sort(key=lambda pick: pick.position)
    return PicksDocument(picks=tuple(picks), active_chip=document.get("active_chip") or None)


def parse_league_standings(document: Mapping[str, Any], league_id: int) -> LeagueStandingsPage:
    """Parse one page of a classic league standings document."""
    _require(document, "league standings")
    league_info = document.get("league") or {}
    standings = document.get("standings") or {}

    results = []
    for row in standings.get("results") or []:
        entry_id = _safe_int(row.get("entry"))
        # entry=0 means the row could not be parsed upstream
        if entry_id <= 0:
            logger.warning(f"Skipping invalid entry in league {league_id}: {row}")
            continue
        results.append(
            LeagueEntry(
                entry=entry_id,
                entry_name=row.get("entry_name") or "",
                player_name=row.get("player_name") or "",
                rank=_safe_int(row.get("rank")),
                last_rank=_optional_int(row.get("last_rank")) or None,
                event_total=_safe_int(row.get("event_total")),
                total=_safe_int(row.get("total")),
            )
        )

    return LeagueStandingsPage(
        league_id=league_id,
        league_name=league_info.get("name") or f"League {league_id}",
        page=_safe_int(standings.get("page"), 1),
        has_next=bool(standings.get("has_next")),
        results=tuple(results),
    )


def parse_private_leagues(entry: Mapping[str, Any]) -> list[ClassicLeague]:
    """Private classic leagues from an entry document.

    System leagues such as the overall and country leagues are left out.
    """
    _require(entry, "entry")
    leagues = []
    for league in (entry.get("leagues") or {}).get("classic") or []:
        league_id = _safe_int(league.get("id"))
        if league_id <= 0 or league.get("league_type") != PRIVATE_LEAGUE_TYPE:
            continue
        leagues.append(
            ClassicLeague(
                id=league_id,
                name=league.get("name") or f"League {league_id}",
                entry_rank=_optional_int(league.get("entry_rank")) or None,
                entry_last_rank=_optional_int(league.get("entry_last_rank")) or None,
            )
        )
    return leagues


# =============================================================================
# Lookup builders
# =============================================================================


def build_player_lookup(players: Iterable[Player]) -> dict[int, Player]:
    """Map player id -> Player."""
    _require(players, "players")
    return {p.id: p for p in players}


def build_club_lookup(clubs: Iterable[Club]) -> dict[int, Club]:
    """Map club id -> Club."""
    _require(clubs, "clubs")
    return {c.id: c for c in clubs}


def build_fixture_index(fixtures: Iterable[Fixture]) -> dict[int, Fixture]:
    """Map club id -> that club's fixture for the gameweek.

    Each club plays at most once per gameweek. If the data contains a second
    fixture for a club, the first one is kept so the index stays single-valued.
    """
    _require(fixtures, "fixtures")
    index: dict[int, Fixture] = {}
    for fixture in fixtures:
        for club_id in (fixture.home_club_id, fixture.away_club_id):
            if club_id in index:
                logger.warning(
                    f"Club {club_id} already indexed to fixture {index[club_id].id}, "
                    f"ignoring fixture {fixture.id}"
                )
                continue
            index[club_id] = fixture
    return index


def build_live_stats_index(live: Mapping[str, Any]) -> dict[int, LiveStat]:
    """Map player id -> LiveStat from an event live document."""
    _require(live, "live document")
    index: dict[int, LiveStat] = {}
    for element in live.get("elements") or []:
        player_id = _safe_int(element.get("id"))
        if player_id > 0:
            index[player_id] = parse_live_stat(element.get("stats"))
    return index


def resolve_live_stats(index: Mapping[int, LiveStat], player_id: int) -> LiveStat | None:
    """Return a player's live stat block, or None before any data is published."""
    return index.get(player_id)


def build_live_points(index: Mapping[int, LiveStat]) -> dict[int, int]:
    """Map player id -> live total points (before captain multiplier)."""
    return {player_id: stat.total_points for player_id, stat in index.items()}


def find_current_gameweek(gameweeks: Iterable[Gameweek]) -> int:
    """Current gameweek id.

    Fallback chain: is_current -> first unfinished -> GW 1.
    """
    gameweeks = list(gameweeks)
    for gw in gameweeks:
        if gw.is_current:
            return gw.id
    for gw in gameweeks:
        if not gw.finished:
            return gw.id
    return 1
