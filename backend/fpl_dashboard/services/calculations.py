"""Pure calculation functions for live FPL scoring.

These functions are stateless and have no network or external dependencies,
making them easy to test in isolation. Every call works on the snapshot the
caller passes in; nothing is memoized between calls, so they are safe to re-run
on each poll with fresh data.

Known simplifications:
- The vice-captain never inherits the captain's multiplier, even if the captain
  did not play.
- Automatic substitutions are not simulated; bench points are reported but
  never added to the team total.
- Provisional bonus uses an approximate tie rule (see estimate_provisional_bonus).
"""

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from fpl_dashboard.services.fpl_data import (
    BPS_IDENTIFIER,
    STARTING_XI_SIZE,
    Club,
    Fixture,
    LeagueEntry,
    LiveStat,
    Pick,
    Player,
    resolve_live_stats,
)

# =============================================================================
# Constants
# =============================================================================

# Provisional bonus by BPS leaderboard position
BONUS_BY_RANK = (3, 2, 1)

# A starter owned by fewer than this share of the league is a differential
DIFFERENTIAL_OWNERSHIP_THRESHOLD = 30.0


class MatchStatus(str, Enum):
    """Where a player's fixture is for the gameweek."""

    NOT_STARTED = "not_started"
    PLAYING = "playing"
    FINISHED = "finished"


# =============================================================================
# Result records
# =============================================================================


@dataclass(frozen=True, slots=True)
class ScoredPick:
    """A pick with its live points and match state resolved."""

    element: int
    position: int
    is_captain: bool
    is_vice_captain: bool
    multiplier: int
    player_name: str
    element_type: int
    club_id: int
    club_short_name: str | None
    fixture_id: int | None
    base_points: int
    points: int
    bonus: int
    bps: int
    minutes: int
    provisional_bonus: int
    is_playing: bool
    is_finished: bool
    match_status: MatchStatus


@dataclass(frozen=True, slots=True)
class SquadTotals:
    """Live totals for one entry's gameweek."""

    total_points: int
    bench_points: int
    playing: int
    finished: int
    yet_to_play: int


@dataclass(frozen=True, slots=True)
class LiveLeagueEntry:
    """A league standings row with the current gameweek recomputed live."""

    entry: int
    entry_name: str
    player_name: str
    rank: int
    last_rank: int | None
    event_total: int
    total: int
    live_gw_points: int
    live_total: int
    live_rank: int
    rank_change: int  # Positive = climbed
    has_live_picks: bool  # False = fell back to the official event total


@dataclass(frozen=True, slots=True)
class Differential:
    """A starter from the viewed squad with its league ownership."""

    element: int
    position: int
    is_captain: bool
    player_name: str | None
    league_ownership: int
    league_ownership_pct: float
    total_teams: int
    is_unique: bool
    is_differential: bool


# =============================================================================
# Match state
# =============================================================================


def get_match_status(fixture: Fixture | None) -> MatchStatus:
    """Classify a fixture as not started, playing, or finished.

    Provisionally finished fixtures (bonus not yet confirmed) count as finished.
    """
    if fixture is None:
        return MatchStatus.NOT_STARTED
    if fixture.finished or fixture.finished_provisional:
        return MatchStatus.FINISHED
    if fixture.started:
        return MatchStatus.PLAYING
    return MatchStatus.NOT_STARTED


# =============================================================================
# Provisional bonus
# =============================================================================


def estimate_provisional_bonus(fixture: Fixture | None, player_id: int) -> int:
    """Estimate a player's bonus points from the in-play BPS leaderboard.

    Home and away BPS rows are merged and sorted by value, descending (stable,
    so equal values keep API order). Leaderboard index 0/1/2 earns 3/2/1.

    Ties: a value equal to the leader's earns 3; otherwise a value equal to the
    second-placed value earns 2. This approximates the official tie handling
    and can award more than 6 points in a fixture when the top values tie.

    Args:
        fixture: The player's fixture (None if the club has no fixture)
        player_id: Player to estimate for

    Returns:
        Provisional bonus (0-3). Always 0 unless the fixture has started and
        is not finished, or if there is no BPS table or the player is not on it.
    """
    if fixture is None or not fixture.started or fixture.finished:
        return 0

    bps_stat = fixture.stat(BPS_IDENTIFIER)
    if bps_stat is None:
        return 0

    leaderboard = sorted(
        [*bps_stat.home, *bps_stat.away],
        key=lambda row: row.value,
        reverse=True,
    )

    index = next(
        (i for i, row in enumerate(leaderboard) if row.element == player_id),
        None,
    )
    if index is None:
        return 0

    value = leaderboard[index].value
    if value == leaderboard[0].value:
        return BONUS_BY_RANK[0]
    if len(leaderboard) > 1 and value == leaderboard[1].value:
        return BONUS_BY_RANK[1]
    if index < len(BONUS_BY_RANK):
        return BONUS_BY_RANK[index]
    return 0


# =============================================================================
# Pick scoring
# =============================================================================


def score_pick(
    pick: Pick,
    player: Player | None,
    live_stat: LiveStat | None,
    fixture: Fixture | None,
    club: Club | None = None,
) -> ScoredPick | None:
    """Score a single pick against live data.

    Args:
        pick: The squad pick
        player: Resolved player (None if missing from the roster)
        live_stat: Player's live stats (None before data is published)
        fixture: Player's fixture this gameweek (None for a blank)
        club: Player's club, for display only

    Returns:
        ScoredPick, or None if the player could not be resolved
    """
    if player is None:
        return None

    stat = live_stat or LiveStat()
    base_points = stat.total_points
    # Vice-captain is never promoted here, even if the captain blanks
    points = base_points * pick.multiplier if pick.is_captain else base_points

    # Zero once finished: the API's final bonus is already in total_points
    provisional_bonus = estimate_provisional_bonus(fixture, pick.element)

    is_playing = fixture is not None and fixture.started and not fixture.finished
    is_finished = fixture is not None and (fixture.finished or fixture.finished_provisional)

    return ScoredPick(
        element=pick.element,
        position=pick.position,
        is_captain=pick.is_captain,
        is_vice_captain=pick.is_vice_captain,
        multiplier=pick.multiplier,
        player_name=player.web_name,
        element_type=player.element_type,
        club_id=player.club_id,
        club_short_name=club.short_name if club is not None else None,
        fixture_id=fixture.id if fixture is not None else None,
        base_points=base_points,
        points=points,
        bonus=stat.bonus,
        bps=stat.bps,
        minutes=stat.minutes,
        provisional_bonus=provisional_bonus,
        is_playing=is_playing,
        is_finished=is_finished,
        match_status=get_match_status(fixture),
    )


def score_picks(
    picks: Sequence[Pick],
    players: Mapping[int, Player],
    live_stats: Mapping[int, LiveStat],
    fixture_index: Mapping[int, Fixture],
    clubs: Mapping[int, Club] | None = None,
) -> list[ScoredPick]:
    """Score a full squad, dropping picks whose player cannot be resolved.

    Raises:
        ValueError: If picks or the player lookup is None
    """
    if picks is None:
        raise ValueError("picks are required")
    if players is None:
        raise ValueError("player lookup is required")

    clubs = clubs or {}
    scored = []
    for pick in picks:
        player = players.get(pick.element)
        club_id = player.club_id if player is not None else None
        row = score_pick(
            pick,
            player,
            resolve_live_stats(live_stats or {}, pick.element),
            fixture_index.get(club_id) if club_id is not None else None,
            clubs.get(club_id) if club_id is not None else None,
        )
        if row is not None:
            scored.append(row)
    return scored


# =============================================================================
# Squad aggregation
# =============================================================================


def split_starters_and_bench(
    scored_picks: Iterable[ScoredPick],
) -> tuple[tuple[ScoredPick, ...], tuple[ScoredPick, ...]]:
    """Split into (starting XI, bench), each ordered by squad position."""
    ordered = sorted(scored_picks, key=lambda p: p.position)
    starters = tuple(p for p in ordered if p.position <= STARTING_XI_SIZE)
    bench = tuple(p for p in ordered if p.position > STARTING_XI_SIZE)
    return starters, bench


def aggregate_squad(scored_picks: Iterable[ScoredPick]) -> SquadTotals:
    """Sum starters' live points and count their match states.

    Bench points are reported separately and never added to the total.
    """
    starters, bench = split_starters_and_bench(scored_picks)

    statuses = Counter(p.match_status for p in starters)

    return SquadTotals(
        total_points=sum(p.points for p in starters),
        bench_points=sum(p.points for p in bench),
        playing=statuses[MatchStatus.PLAYING],
        finished=statuses[MatchStatus.FINISHED],
        yet_to_play=statuses[MatchStatus.NOT_STARTED],
    )


# =============================================================================
# League live standings
# =============================================================================


def calculate_picks_live_points(picks: Iterable[Pick], live_points: Mapping[int, int]) -> int:
    """Live gameweek points for a squad: starters only, captain multiplied."""
    total = 0
    for pick in picks:
        if not pick.is_starter:
            continue
        points = live_points.get(pick.element, 0)
        total += points * pick.multiplier if pick.is_captain else points
    return total


def recalculate_live_standings(
    entries: Sequence[LeagueEntry],
    picks_by_entry: Mapping[int, Sequence[Pick] | None],
    live_points: Mapping[int, int],
    user_entry_id: int | None = None,
    user_live_points: int | None = None,
) -> list[LiveLeagueEntry]:
    """Recompute league standings with the current gameweek's live points.

    Per entry, live gameweek points come from (in order of preference):
    1. user_live_points, for the viewed user's own entry
    2. the entry's fetched picks scored against live_points
    3. the official event_total, when picks could not be fetched

    Prior gameweeks are kept verbatim: live_total = total - event_total + live.
    Sorting is stable, so entries tied on live_total keep their input order.
    Live ranks start from the page's best official rank, so a later page
    (ranks 51-100) keeps its place in the whole league.

    Args:
        entries: Official standings rows, in official order
        picks_by_entry: entry id -> picks (None or missing = fetch failed)
        live_points: player id -> live points before multiplier
        user_entry_id: The viewed user's entry id, if in this league
        user_live_points: The viewed user's already computed live total

    Returns:
        Rows sorted by live_total with live_rank and rank_change set
    """
    if entries is None:
        raise ValueError("league entries are required")

    picks_by_entry = picks_by_entry or {}
    live_points = live_points or {}

    computed: list[tuple[LeagueEntry, int, int, bool]] = []
    for entry in entries:
        picks = picks_by_entry.get(entry.entry)
        if entry.entry == user_entry_id and user_live_points is not None:
            live_gw_points, has_picks = user_live_points, True
        elif picks is not None:
            live_gw_points, has_picks = calculate_picks_live_points(picks, live_points), True
        else:
            live_gw_points, has_picks = entry.event_total, False

        live_total = entry.total - entry.event_total + live_gw_points
        computed.append((entry, live_gw_points, live_total, has_picks))

    computed.sort(key=lambda row: row[2], reverse=True)
    official_ranks = [entry.rank for entry in entries if entry.rank > 0]
    rank_offset = min(official_ranks) - 1 if official_ranks else 0

    return [
        LiveLeagueEntry(
            entry=entry.entry,
            entry_name=entry.entry_name,
            player_name=entry.player_name,
            rank=entry.rank,
            last_rank=entry.last_rank,
            event_total=entry.event_total,
            total=entry.total,
            live_gw_points=live_gw_points,
            live_total=live_total,
            live_rank=rank_offset + position,
            rank_change=entry.rank - (rank_offset + position),
            has_live_picks=has_picks,
        )
        for position, (entry, live_gw_points, live_total, has_picks) in enumerate(
            computed, start=1
        )
    ]


# =============================================================================
# Differentials
# =============================================================================


def count_league_ownership(
    league_picks: Mapping[int, Sequence[Pick] | None],
    exclude_entry_id: int | None = None,
) -> tuple[Counter[int], int]:
    """Count starting-XI ownership across fetched entries.

    Entries whose picks are None (fetch failed) are left out entirely, so they
    never inflate the denominator.

    Returns:
        Tuple of (player id -> owner count, number of entries counted)
    """
    ownership: Counter[int] = Counter()
    fetched = 0
    for entry_id, picks in league_picks.items():
        if entry_id == exclude_entry_id or picks is None:
            continue
        fetched += 1
        for pick in picks:
            if pick.is_starter:
                ownership[pick.element] += 1
    return ownership, fetched


def classify_differentials(
    user_picks: Sequence[Pick],
    league_picks: Mapping[int, Sequence[Pick] | None],
    players: Mapping[int, Player],
    user_entry_id: int | None = None,
) -> list[Differential]:
    """Label the user's starters as unique, differential or common.

    Args:
        user_picks: The viewed user's picks (bench is ignored)
        league_picks: entry id -> picks for the other league entries
        players: Player lookup, for names
        user_entry_id: Excluded from the counts if present in league_picks

    Returns:
        Starters sorted by league ownership, lowest first; ties keep
        squad position order
    """
    if user_picks is None:
        raise ValueError("user picks are required")
    if players is None:
        raise ValueError("player lookup is required")

    ownership, total_teams = count_league_ownership(league_picks or {}, user_entry_id)

    differentials = []
    for pick in sorted(user_picks, key=lambda p: p.position):
        if not pick.is_starter:
            continue
        count = ownership.get(pick.element, 0)
        pct = count / total_teams * 100 if total_teams > 0 else 0.0
        is_unique = count <= 1
        player = players.get(pick.element)
        differentials.append(
            Differential(
                element=pick.element,
                position=pick.position,
                is_captain=pick.is_captain,
                player_name=player.web_name if player is not None else None,
                league_ownership=count,
                league_ownership_pct=pct,
                total_teams=total_teams,
                is_unique=is_unique,
                is_differential=pct < DIFFERENTIAL_OWNERSHIP_THRESHOLD and not is_unique,
            )
        )

    differentials.sort(key=lambda d: d.league_ownership_pct)
    return differentials
