"""Live gameweek service - fetches FPL documents and runs the live calculations.

All network I/O happens here. The calculation functions it calls are pure and
receive explicit snapshots, so every request recomputes from fresh data and
nothing is carried between calls apart from the proxy's HTTP cache.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from fpl_dashboard.services.calculations import (
    Differential,
    LiveLeagueEntry,
    ScoredPick,
    SquadTotals,
    aggregate_squad,
    classify_differentials,
    recalculate_live_standings,
    score_picks,
    split_starters_and_bench,
)
from fpl_dashboard.services.fpl_data import (
    ClassicLeague,
    Club,
    Fixture,
    LiveStat,
    Pick,
    Player,
    build_club_lookup,
    build_fixture_index,
    build_live_points,
    build_live_stats_index,
    build_player_lookup,
    find_current_gameweek,
    parse_clubs,
    parse_fixtures,
    parse_gameweeks,
    parse_league_standings,
    parse_picks,
    parse_private_leagues,
    parse_players,
)
from fpl_dashboard.services.pitch import TeamPitch, organize_pitch
from fpl_dashboard.services.transfers import (
    TransferLedger,
    build_transfer_ledger,
    parse_chips_by_gameweek,
    parse_transfers,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Type Definitions
# =============================================================================


class FplProxyProtocol(Protocol):
    """Protocol for FPL proxy dependency injection."""

    async def get_bootstrap_static(self) -> dict[str, Any]: ...
    async def get_fixtures(self, event: int | None = None) -> list[Any]: ...
    async def get_event_live(self, event_id: int) -> dict[str, Any]: ...
    async def get_entry(self, entry_id: int) -> dict[str, Any]: ...
    async def get_entry_picks(self, entry_id: int, event_id: int) -> dict[str, Any]: ...
    async def get_entry_history(self, entry_id: int) -> dict[str, Any]: ...
    async def get_entry_transfers(self, entry_id: int) -> list[Any]: ...
    async def get_league_standings(self, league_id: int, page: int = 1) -> dict[str, Any]: ...


@dataclass(frozen=True, slots=True)
class GameweekSnapshot:
    """Everything needed to score any squad for one gameweek."""

    gameweek: int
    players: dict[int, Player]
    clubs: dict[int, Club]
    fixture_index: dict[int, Fixture]
    live_stats: dict[int, LiveStat]
    live_points: dict[int, int]


@dataclass(frozen=True, slots=True)
class LiveTeam:
    """A manager's squad scored live for a gameweek."""

    entry_id: int
    gameweek: int
    active_chip: str | None
    starters: tuple[ScoredPick, ...]
    bench: tuple[ScoredPick, ...]
    totals: SquadTotals


@dataclass(frozen=True, slots=True)
class LiveLeague:
    """A league page re-ranked on live points, with the viewer's differentials."""

    league_id: int
    league_name: str
    gameweek: int
    page: int
    has_next: bool
    entry_id: int
    user_live_points: int
    standings: tuple[LiveLeagueEntry, ...]
    differentials: tuple[Differential, ...]
    fetched_entries: int
    failed_entries: int


# =============================================================================
# Service
# =============================================================================


class LiveService:
    """Builds live views from FPL API data."""

    def __init__(
        self,
        proxy: FplProxyProtocol,
        max_concurrent_picks: int = 10,
        max_league_entries: int = 50,
    ) -> None:
        """Initialize with an FPL proxy.

        Args:
            proxy: FPLProxyService instance for API calls
            max_concurrent_picks: Concurrent picks requests for a league page
            max_league_entries: Most entries per page whose picks are fetched
        """
        self.proxy = proxy
        self.max_concurrent_picks = max_concurrent_picks
        self.max_league_entries = max_league_entries

    async def load_gameweek(self, gameweek: int | None = None) -> GameweekSnapshot:
        """Fetch roster, fixtures and live stats for a gameweek (default: current)."""
        bootstrap = await self.proxy.get_bootstrap_static()
        if gameweek is None:
            gameweek = find_current_gameweek(parse_gameweeks(bootstrap))

        raw_fixtures, live = await asyncio.gather(
            self.proxy.get_fixtures(gameweek),
            self.proxy.get_event_live(gameweek),
        )

        fixtures = [f for f in parse_fixtures(raw_fixtures) if f.event == gameweek]
        live_stats = build_live_stats_index(live)

        return GameweekSnapshot(
            gameweek=gameweek,
            players=build_player_lookup(parse_players(bootstrap)),
            clubs=build_club_lookup(parse_clubs(bootstrap)),
            fixture_index=build_fixture_index(fixtures),
            live_stats=live_stats,
            live_points=build_live_points(live_stats),
        )

    async def get_live_team(self, entry_id: int, gameweek: int | None = None) -> LiveTeam:
        """Score an entry's squad against live data.

        Raises:
            FplApiError: If the entry or its picks cannot be fetched
        """
        snapshot = await self.load_gameweek(gameweek)
        document = parse_picks(await self.proxy.get_entry_picks(entry_id, snapshot.gameweek))

        scored = score_picks(
            document.picks,
            snapshot.players,
            snapshot.live_stats,
            snapshot.fixture_index,
            snapshot.clubs,
        )
        starters, bench = split_starters_and_bench(scored)

        return LiveTeam(
            entry_id=entry_id,
            gameweek=snapshot.gameweek,
            active_chip=document.active_chip,
            starters=starters,
            bench=bench,
            totals=aggregate_squad(scored),
        )

    async def _fetch_league_picks(
        self,
        entry_ids: list[int],
        gameweek: int,
    ) -> dict[int, tuple[Pick, ...] | None]:
        """Fetch picks for many entries; a failed fetch maps to None.

        Uses parallel requests with a semaphore to avoid rate limiting.
        """
        semaphore = asyncio.Semaphore(self.max_concurrent_picks)

        async def fetch_one(entry_id: int) -> tuple[int, tuple[Pick, ...] | None]:
            async with semaphore:
                try:
                    document = await self.proxy.get_entry_picks(entry_id, gameweek)
                    return entry_id, parse_picks(document).picks
                except Exception as e:
                    logger.warning(
                        f"Failed to fetch picks for entry {entry_id}: "
                        f"{type(e).__name__}: {e}"
                    )
                    return entry_id, None

        results = await asyncio.gather(*[fetch_one(e) for e in entry_ids])
        return dict(results)

    async def get_live_league(
        self,
        league_id: int,
        entry_id: int,
        gameweek: int | None = None,
        page: int = 1,
    ) -> LiveLeague:
        """Re-rank a league standings page on live points.

        The viewer's own picks are required. Other entries' picks are best
        effort: an entry whose picks fail to load keeps its official gameweek
        points and is left out of the ownership counts.

        Standings only carry the current gameweek's event_total, so only the
        current gameweek can be recalculated.

        Raises:
            ValueError: If gameweek is given and is not the current gameweek
            FplApiError: If the standings or the viewer's picks cannot be fetched
        """
        bootstrap = await self.proxy.get_bootstrap_static()
        current = find_current_gameweek(parse_gameweeks(bootstrap))
        if gameweek is not None and gameweek != current:
            raise ValueError(
                f"Live league standings are only available for the current "
                f"gameweek ({current}), not gameweek {gameweek}"
            )

        snapshot = await self.load_gameweek(current)
        raw_standings, raw_user_picks = await asyncio.gather(
            self.proxy.get_league_standings(league_id, page),
            self.proxy.get_entry_picks(entry_id, snapshot.gameweek),
        )
        standings_page = parse_league_standings(raw_standings, league_id)
        user_picks = parse_picks(raw_user_picks).picks

        user_scored = score_picks(
            user_picks,
            snapshot.players,
            snapshot.live_stats,
            snapshot.fixture_index,
            snapshot.clubs,
        )
        user_live_points = aggregate_squad(user_scored).total_points

        other_ids = [e.entry for e in standings_page.results if e.entry != entry_id]
        to_fetch = other_ids[: self.max_league_entries]
        if len(other_ids) > len(to_fetch):
            logger.info(
                f"League {league_id} page {page}: fetching picks for "
                f"{len(to_fetch)}/{len(other_ids)} entries"
            )
        league_picks = await self._fetch_league_picks(to_fetch, snapshot.gameweek)

        failed = sum(1 for picks in league_picks.values() if picks is None)
        if failed > len(to_fetch) * 0.5:
            logger.warning(
                f"High failure rate fetching picks for league {league_id}: "
                f"{failed}/{len(to_fetch)} failed"
            )

        standings = recalculate_live_standings(
            standings_page.results,
            league_picks,
            snapshot.live_points,
            user_entry_id=entry_id,
            user_live_points=user_live_points,
        )
        differentials = classify_differentials(
            user_picks,
            league_picks,
            snapshot.players,
            user_entry_id=entry_id,
        )

        return LiveLeague(
            league_id=league_id,
            league_name=standings_page.league_name,
            gameweek=snapshot.gameweek,
            page=standings_page.page,
            has_next=standings_page.has_next,
            entry_id=entry_id,
            user_live_points=user_live_points,
            standings=tuple(standings),
            differentials=tuple(differentials),
            fetched_entries=len(to_fetch) - failed,
            failed_entries=failed,
        )

    async def get_team_pitch(self, entry_id: int, gameweek: int | None = None) -> TeamPitch:
        """Lay out an entry's squad in formation with live points."""
        snapshot = await self.load_gameweek(gameweek)
        document = parse_picks(await self.proxy.get_entry_picks(entry_id, snapshot.gameweek))
        return organize_pitch(
            document.picks,
            snapshot.players,
            snapshot.clubs,
            snapshot.fixture_index,
            snapshot.live_points,
        )

    async def get_transfer_ledger(self, entry_id: int) -> TransferLedger:
        """Build an entry's season transfer ledger.

        Raises:
            FplApiError: If the transfers or history cannot be fetched
        """
        bootstrap, raw_transfers, history = await asyncio.gather(
            self.proxy.get_bootstrap_static(),
            self.proxy.get_entry_transfers(entry_id),
            self.proxy.get_entry_history(entry_id),
        )
        players = build_player_lookup(parse_players(bootstrap))
        transfers = parse_transfers(raw_transfers, players)
        return build_transfer_ledger(entry_id, transfers, parse_chips_by_gameweek(history))

    async def get_entry_leagues(self, entry_id: int) -> list[ClassicLeague]:
        """List the private classic leagues an entry has joined.

        Raises:
            FplApiError: If the entry cannot be fetched
        """
        return parse_private_leagues(await self.proxy.get_entry(entry_id))
