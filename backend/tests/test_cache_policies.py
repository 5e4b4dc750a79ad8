"""Tests for per-endpoint cache policies."""

from fpl_dashboard.services import cache_policies
from fpl_dashboard.services.cache_policies import (
    cache_control_header,
    live_policy,
    picks_policy,
)


class TestLivePolicy:
    """Tests for live data policy selection."""

    def test_finished_gameweek_is_cached_for_a_year(self):
        """Finished gameweek live data never changes again."""
        policy = live_policy(gameweek_finished=True)

        assert policy is cache_policies.LIVE_GW_FINISHED
        assert policy.ttl == 86400 * 365

    def test_active_gameweek_uses_short_ttl(self):
        """Active gameweek live data refreshes every 30 seconds."""
        policy = live_policy(gameweek_finished=False)

        assert policy is cache_policies.LIVE_GW_ACTIVE
        assert policy.ttl == 30


class TestPicksPolicy:
    """Tests for picks policy selection."""

    def test_past_gameweek_picks_are_locked(self):
        """Picks before the current gameweek use the long policy."""
        assert picks_policy(gameweek=5, current_gameweek=6) is cache_policies.TEAM_PICKS_PAST

    def test_current_gameweek_picks_use_short_policy(self):
        """Picks for the current gameweek can still change."""
        assert picks_policy(gameweek=6, current_gameweek=6) is cache_policies.TEAM_PICKS_CURRENT

    def test_future_gameweek_picks_use_short_policy(self):
        """Picks ahead of the current gameweek are not locked."""
        assert picks_policy(gameweek=7, current_gameweek=6) is cache_policies.TEAM_PICKS_CURRENT


class TestCacheControlHeader:
    """Tests for Cache-Control header formatting."""

    def test_bootstrap_header(self):
        """Header should carry the CDN max age and stale-while-revalidate window."""
        assert (
            cache_control_header(cache_policies.BOOTSTRAP)
            == "s-maxage=1800, stale-while-revalidate=600"
        )

    def test_finished_live_header(self):
        """Finished live data is served from the CDN for a day."""
        assert (
            cache_control_header(cache_policies.LIVE_GW_FINISHED)
            == "s-maxage=86400, stale-while-revalidate=0"
        )
