"""HTTP cache policies per FPL endpoint, keyed to how volatile the data is.

Each policy drives two things:
- ttl: how long the proxy keeps the upstream response in its in-process cache
- cdn_max_age / stale_while_revalidate: the Cache-Control header sent to clients

Bootstrap and fixtures change rarely. Live data for an active gameweek changes
every few seconds during matches, but never changes again once the gameweek is
finished. Picks can change until the deadline and are locked afterwards.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CachePolicy:
    """Cache lifetimes in seconds."""

    name: str
    ttl: int
    stale_while_revalidate: int
    cdn_max_age: int


ONE_YEAR = 86400 * 365

BOOTSTRAP = CachePolicy("bootstrap", ttl=3600, stale_while_revalidate=600, cdn_max_age=1800)
FIXTURES = CachePolicy("fixtures", ttl=21600, stale_while_revalidate=1800, cdn_max_age=3600)
LIVE_GW_ACTIVE = CachePolicy("live_gw_active", ttl=30, stale_while_revalidate=10, cdn_max_age=15)
LIVE_GW_FINISHED = CachePolicy(
    "live_gw_finished", ttl=ONE_YEAR, stale_while_revalidate=0, cdn_max_age=86400
)
TEAM_ENTRY = CachePolicy("team_entry", ttl=300, stale_while_revalidate=60, cdn_max_age=120)
TEAM_HISTORY = CachePolicy("team_history", ttl=900, stale_while_revalidate=300, cdn_max_age=600)
TEAM_PICKS_CURRENT = CachePolicy(
    "team_picks_current", ttl=60, stale_while_revalidate=30, cdn_max_age=30
)
TEAM_PICKS_PAST = CachePolicy(
    "team_picks_past", ttl=86400, stale_while_revalidate=3600, cdn_max_age=3600
)
PLAYER_SUMMARY = CachePolicy("player_summary", ttl=300, stale_while_revalidate=60, cdn_max_age=120)
TEAM_TRANSFERS = CachePolicy("team_transfers", ttl=300, stale_while_revalidate=60, cdn_max_age=120)
LEAGUE_STANDINGS = CachePolicy(
    "league_standings", ttl=60, stale_while_revalidate=30, cdn_max_age=60
)


def live_policy(gameweek_finished: bool) -> CachePolicy:
    """Live data is effectively permanent once its gameweek is finished."""
    return LIVE_GW_FINISHED if gameweek_finished else LIVE_GW_ACTIVE


def picks_policy(gameweek: int, current_gameweek: int) -> CachePolicy:
    """Picks before the current gameweek are locked."""
    return TEAM_PICKS_PAST if gameweek < current_gameweek else TEAM_PICKS_CURRENT


def cache_control_header(policy: CachePolicy) -> str:
    """Build the Cache-Control value sent to clients and CDNs."""
    return f"s-maxage={policy.cdn_max_age}, stale-while-revalidate={policy.stale_while_revalidate}"
