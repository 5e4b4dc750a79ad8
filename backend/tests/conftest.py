"""Shared pytest fixtures for backend tests.

Sample FPL documents describe gameweek 2 with three fixtures:
- ARS v LIV (id 11): in play, with a BPS table
- MCI v CHE (id 12): finished
- TOT v BOU (id 13): not started
"""

import pytest
from httpx import ASGITransport, AsyncClient

from fpl_dashboard.main import app


@pytest.fixture
async def async_client():
    """Async HTTP client for testing the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Reset FastAPI dependency overrides after each test."""
    yield
    app.dependency_overrides.clear()


def _element(id: int, web_name: str, team: int, element_type: int, selected: str = "10.0") -> dict:
    return {
        "id": id,
        "web_name": web_name,
        "team": team,
        "element_type": element_type,
        "status": "a",
        "selected_by_percent": selected,
    }


def _live(id: int, total_points: int, minutes: int = 90, bps: int = 0, bonus: int = 0) -> dict:
    return {
        "id": id,
        "stats": {
            "minutes": minutes,
            "goals_scored": 0,
            "assists": 0,
            "bonus": bonus,
            "bps": bps,
            "total_points": total_points,
        },
    }


def _pick(element: int, position: int, captain: bool = False, vice: bool = False) -> dict:
    if position > 11:
        multiplier = 0
    else:
        multiplier = 2 if captain else 1
    return {
        "element": element,
        "position": position,
        "multiplier": multiplier,
        "is_captain": captain,
        "is_vice_captain": vice,
    }


@pytest.fixture
def sample_bootstrap_response() -> dict:
    """Bootstrap-static with gameweek 2 current."""
    return {
        "events": [
            {"id": 1, "is_current": False, "is_next": False, "finished": True},
            {"id": 2, "is_current": True, "is_next": False, "finished": False},
            {"id": 3, "is_current": False, "is_next": True, "finished": False},
        ],
        "teams": [
            {"id": 1, "code": 3, "short_name": "ARS", "name": "Arsenal"},
            {"id": 2, "code": 14, "short_name": "LIV", "name": "Liverpool"},
            {"id": 3, "code": 43, "short_name": "MCI", "name": "Man City"},
            {"id": 4, "code": 8, "short_name": "CHE", "name": "Chelsea"},
            {"id": 5, "code": 6, "short_name": "TOT", "name": "Spurs"},
            {"id": 6, "code": 91, "short_name": "BOU", "name": "Bournemouth"},
        ],
        "elements": [
            _element(1, "Raya", 1, 1),
            _element(2, "Saliba", 1, 2),
            _element(3, "Saka", 1, 3),
            _element(4, "Havertz", 1, 4),
            _element(5, "Salah", 2, 3, "62.5"),
            _element(6, "Van Dijk", 2, 2),
            _element(7, "Alisson", 2, 1),
            _element(8, "Haaland", 3, 4, "85.1"),
            _element(9, "Foden", 3, 3),
            _element(10, "Gvardiol", 3, 2),
            _element(11, "Palmer", 4, 3),
            _element(12, "Colwill", 4, 2),
            _element(13, "Sanchez", 4, 1),
            _element(14, "Son", 5, 4),
            _element(15, "Rodri", 3, 3),
        ],
    }


@pytest.fixture
def sample_fixtures_response() -> list:
    """Gameweek 2 fixtures plus one gameweek 3 fixture."""
    return [
        {
            "id": 11,
            "event": 2,
            "team_h": 1,
            "team_a": 2,
            "team_h_score": 1,
            "team_a_score": 1,
            "started": True,
            "finished": False,
            "finished_provisional": False,
            "stats": [
                {
                    "identifier": "bps",
                    "h": [{"element": 1, "value": 40}, {"element": 2, "value": 20}],
                    "a": [{"element": 5, "value": 35}, {"element": 6, "value": 35}],
                }
            ],
        },
        {
            "id": 12,
            "event": 2,
            "team_h": 3,
            "team_a": 4,
            "team_h_score": 3,
            "team_a_score": 0,
            "started": True,
            "finished": True,
            "finished_provisional": True,
            "stats": [],
        },
        {
            "id": 13,
            "event": 2,
            "team_h": 5,
            "team_a": 6,
            "team_h_score": None,
            "team_a_score": None,
            "started": False,
            "finished": False,
            "finished_provisional": False,
            "stats": [],
        },
        {
            "id": 21,
            "event": 3,
            "team_h": 2,
            "team_a": 1,
            "started": False,
            "finished": False,
            "finished_provisional": False,
            "stats": [],
        },
    ]


@pytest.fixture
def sample_live_response() -> dict:
    """Live stats for gameweek 2."""
    return {
        "elements": [
            _live(1, 6, bps=40),
            _live(2, 2, bps=20),
            _live(3, 5),
            _live(4, 0, minutes=10),
            _live(5, 8, bps=35),
            _live(6, 6, bps=35),
            _live(7, 1),
            _live(8, 13, bonus=3),
            _live(9, 2),
            _live(10, 6),
            _live(11, 3),
            _live(12, 1),
            _live(13, 2),
            _live(14, 0, minutes=0),
            _live(15, 7),
        ]
    }


@pytest.fixture
def sample_picks_response() -> dict:
    """A 3-4-3 squad captaining Salah.

    Live starting XI points: 59 (Salah 8 x 2). Bench: 11.
    """
    return {
        "active_chip": None,
        "picks": [
            _pick(1, 1),
            _pick(2, 2),
            _pick(6, 3),
            _pick(10, 4),
            _pick(3, 5),
            _pick(5, 6, captain=True),
            _pick(9, 7),
            _pick(11, 8),
            _pick(4, 9),
            _pick(8, 10, vice=True),
            _pick(14, 11),
            _pick(13, 12),
            _pick(12, 13),
            _pick(15, 14),
            _pick(7, 15),
        ],
    }


@pytest.fixture
def sample_rival_picks_response() -> dict:
    """A rival squad captaining Haaland. Live starting XI points: 56."""
    return {
        "active_chip": None,
        "picks": [
            _pick(7, 1),
            _pick(2, 2),
            _pick(6, 3),
            _pick(12, 4),
            _pick(5, 5),
            _pick(9, 6),
            _pick(15, 7),
            _pick(11, 8),
            _pick(8, 9, captain=True),
            _pick(14, 10),
            _pick(4, 11),
            _pick(13, 12),
            _pick(10, 13),
            _pick(3, 14),
            _pick(1, 15),
        ],
    }


@pytest.fixture
def sample_entry_response() -> dict:
    """Manager entry summary."""
    return {
        "id": 12345,
        "name": "Test FC",
        "player_first_name": "Test",
        "player_last_name": "Manager",
        "summary_overall_points": 512,
        "current_event": 2,
        "leagues": {
            "classic": [
                {
                    "id": 314,
                    "name": "Test League",
                    "league_type": "x",
                    "entry_rank": 2,
                    "entry_last_rank": 1,
                },
                {
                    "id": 314159,
                    "name": "Gameweek 1",
                    "league_type": "s",
                    "entry_rank": 1204332,
                    "entry_last_rank": 1304112,
                },
            ],
            "h2h": [],
        },
    }


@pytest.fixture
def sample_league_response() -> dict:
    """Classic league standings page with three entries."""
    return {
        "league": {"id": 314, "name": "Test League"},
        "standings": {
            "has_next": False,
            "page": 1,
            "results": [
                {
                    "entry": 101,
                    "entry_name": "Test FC",
                    "player_name": "Test Manager",
                    "rank": 1,
                    "last_rank": 1,
                    "event_total": 50,
                    "total": 512,
                },
                {
                    "entry": 202,
                    "entry_name": "Rival XI",
                    "player_name": "Rival Manager",
                    "rank": 2,
                    "last_rank": 3,
                    "event_total": 45,
                    "total": 515,
                },
                {
                    "entry": 303,
                    "entry_name": "Third Team",
                    "player_name": "Third Manager",
                    "rank": 3,
                    "last_rank": 2,
                    "event_total": 40,
                    "total": 490,
                },
            ],
        },
    }


@pytest.fixture
def sample_transfers_response() -> list:
    """Transfers across gameweeks 2 and 3."""
    return [
        {
            "element_in": 5,
            "element_in_cost": 130,
            "element_out": 3,
            "element_out_cost": 100,
            "entry": 101,
            "event": 3,
            "time": "2024-08-24T09:00:00Z",
        },
        {
            "element_in": 8,
            "element_in_cost": 150,
            "element_out": 4,
            "element_out_cost": 80,
            "entry": 101,
            "event": 2,
            "time": "2024-08-16T10:00:00Z",
        },
        {
            "element_in": 11,
            "element_in_cost": 105,
            "element_out": 9,
            "element_out_cost": 90,
            "entry": 101,
            "event": 2,
            "time": "2024-08-16T12:30:00Z",
        },
    ]


@pytest.fixture
def sample_history_response() -> dict:
    """Entry history with a wildcard played in gameweek 3."""
    return {
        "current": [],
        "past": [],
        "chips": [{"name": "wildcard", "time": "2024-08-24T09:00:00Z", "event": 3}],
    }
