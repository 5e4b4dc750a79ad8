"""Pitch formation layout for a squad.

Starters are grouped into rows by position (GK, DEF, MID, FWD) in squad order,
which is how the FPL site draws the team. The formation string counts the
outfield rows, e.g. "3-5-2".
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from fpl_dashboard.services.calculations import MatchStatus, get_match_status
from fpl_dashboard.services.fpl_data import (
    POSITION_DEF,
    POSITION_FWD,
    POSITION_GKP,
    POSITION_MID,
    Club,
    Fixture,
    Pick,
    Player,
)

FPL_STATIC_URL = "https://fantasy.premierleague.com/dist/img"


@dataclass(frozen=True, slots=True)
class PitchSlot:
    """A player placed on the pitch or bench."""

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


@dataclass(frozen=True, slots=True)
class TeamPitch:
    """Starters by row plus the bench, in auto-sub order."""

    formation: str
    goalkeepers: tuple[PitchSlot, ...]
    defenders: tuple[PitchSlot, ...]
    midfielders: tuple[PitchSlot, ...]
    forwards: tuple[PitchSlot, ...]
    bench: tuple[PitchSlot, ...]


def shirt_url(club_code: int, is_goalkeeper: bool = False) -> str:
    """URL of a club's shirt image (goalkeepers wear the _1 variant)."""
    suffix = "_1" if is_goalkeeper else ""
    return f"{FPL_STATIC_URL}/shirts/standard/shirt_{club_code}{suffix}-110.webp"


def match_status_for_club(club_id: int | None, fixture_index: Mapping[int, Fixture]) -> MatchStatus:
    """Match status of a club's fixture; clubs without one have not started."""
    if not club_id:
        return MatchStatus.NOT_STARTED
    return get_match_status(fixture_index.get(club_id))


def formation_string(defenders: Sequence, midfielders: Sequence, forwards: Sequence) -> str:
    """Outfield row sizes, e.g. "4-4-2"."""
    return f"{len(defenders)}-{len(midfielders)}-{len(forwards)}"


def organize_pitch(
    picks: Sequence[Pick],
    players: Mapping[int, Player],
    clubs: Mapping[int, Club] | None = None,
    fixture_index: Mapping[int, Fixture] | None = None,
    live_points: Mapping[int, int] | None = None,
) -> TeamPitch:
    """Lay out a squad as pitch rows.

    Picks whose player is missing from the roster are skipped. Points shown are
    live points with the captain multiplier applied.

    Raises:
        ValueError: If picks or the player lookup is None
    """
    if picks is None:
        raise ValueError("picks are required")
    if players is None:
        raise ValueError("player lookup is required")

    clubs = clubs or {}
    fixture_index = fixture_index or {}
    live_points = live_points or {}

    rows: dict[int, list[PitchSlot]] = {
        POSITION_GKP: [],
        POSITION_DEF: [],
        POSITION_MID: [],
        POSITION_FWD: [],
    }
    bench: list[PitchSlot] = []

    for pick in sorted(picks, key=lambda p: p.position):
        player = players.get(pick.element)
        if player is None:
            continue

        club = clubs.get(player.club_id)
        base_points = live_points.get(pick.element, 0)
        slot = PitchSlot(
            element=pick.element,
            position=pick.position,
            web_name=player.web_name,
            element_type=player.element_type,
            club_id=player.club_id,
            club_short_name=club.short_name if club else None,
            shirt_url=shirt_url(club.code, player.element_type == POSITION_GKP) if club else None,
            is_captain=pick.is_captain,
            is_vice_captain=pick.is_vice_captain,
            multiplier=pick.multiplier,
            points=base_points * pick.multiplier if pick.is_captain else base_points,
            match_status=match_status_for_club(player.club_id, fixture_index),
        )

        if not pick.is_starter:
            bench.append(slot)
        elif player.element_type in rows:
            rows[player.element_type].append(slot)

    return TeamPitch(
        formation=formation_string(rows[POSITION_DEF], rows[POSITION_MID], rows[POSITION_FWD]),
        goalkeepers=tuple(rows[POSITION_GKP]),
        defenders=tuple(rows[POSITION_DEF]),
        midfielders=tuple(rows[POSITION_MID]),
        forwards=tuple(rows[POSITION_FWD]),
        bench=tuple(bench),
    )
