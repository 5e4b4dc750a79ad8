"""Transfer ledger - a manager's transfers grouped by gameweek with hit costs.

FPL rules applied here:
- Each transfer beyond the first in a gameweek costs a 4 point hit
- Wildcard and Free Hit gameweeks have unlimited free transfers
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from fpl_dashboard.services.fpl_data import Player, _safe_int

# =============================================================================
# Constants
# =============================================================================

HIT_COST = 4

# Chips that make every transfer that gameweek free
FREE_TRANSFER_CHIPS = frozenset({"wildcard", "freehit"})

_EPOCH = datetime.min.replace(tzinfo=UTC)


# =============================================================================
# Data Models
# =============================================================================


@dataclass(frozen=True, slots=True)
class Transfer:
    """A single transfer in/out pair."""

    event: int
    time: str
    element_in: int
    element_in_name: str | None
    element_in_cost: int  # Price * 10
    element_out: int
    element_out_name: str | None
    element_out_cost: int


@dataclass(frozen=True, slots=True)
class GameweekTransfers:
    """Transfers made before one gameweek's deadline."""

    gameweek: int
    transfers: tuple[Transfer, ...]
    chip: str | None
    is_free_transfer_chip: bool


@dataclass(frozen=True, slots=True)
class TransferLedger:
    """Full season transfer history for a manager."""

    entry_id: int
    gameweeks: tuple[GameweekTransfers, ...]
    total_transfers: int
    total_hits: int  # Points spent on hits (positive number)


# =============================================================================
# Parsers
# =============================================================================


def parse_transfers(
    raw: Iterable[Mapping[str, Any]],
    players: Mapping[int, Player] | None = None,
) -> list[Transfer]:
    """Parse the entry transfers document, resolving player names if given."""
    if raw is None:
        raise ValueError("transfers are required")
    players = players or {}

    transfers = []
    for t in raw:
        element_in = _safe_int(t.get("element_in"))
        element_out = _safe_int(t.get("element_out"))
        player_in = players.get(element_in)
        player_out = players.get(element_out)
        transfers.append(
            Transfer(
                event=_safe_int(t.get("event")),
                time=t.get("time") or "",
                element_in=element_in,
                element_in_name=player_in.web_name if player_in else None,
                element_in_cost=_safe_int(t.get("element_in_cost")),
                element_out=element_out,
                element_out_name=player_out.web_name if player_out else None,
                element_out_cost=_safe_int(t.get("element_out_cost")),
            )
        )
    return transfers


def parse_chips_by_gameweek(history: Mapping[str, Any] | None) -> dict[int, str]:
    """Map gameweek -> chip name from an entry history document."""
    chips: dict[int, str] = {}
    for chip in (history or {}).get("chips") or []:
        name = chip.get("name") or ""
        event = _safe_int(chip.get("event"))
        if name and event > 0:
            chips[event] = name
    return chips


# =============================================================================
# Pure Functions
# =============================================================================


def _transfer_time(transfer: Transfer) -> datetime:
    try:
        parsed = datetime.fromisoformat(transfer.time)
    except ValueError:
        return _EPOCH
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def group_transfers_by_gameweek(
    transfers: Iterable[Transfer],
    chips: Mapping[int, str],
) -> list[GameweekTransfers]:
    """Group transfers by gameweek, most recent gameweek first.

    Within a gameweek, transfers are ordered newest first.
    """
    grouped: dict[int, list[Transfer]] = defaultdict(list)
    for transfer in transfers:
        grouped[transfer.event].append(transfer)

    result = []
    for gameweek in sorted(grouped, reverse=True):
        chip = chips.get(gameweek)
        result.append(
            GameweekTransfers(
                gameweek=gameweek,
                transfers=tuple(sorted(grouped[gameweek], key=_transfer_time, reverse=True)),
                chip=chip,
                is_free_transfer_chip=chip in FREE_TRANSFER_CHIPS,
            )
        )
    return result


def calculate_transfer_hits(
    transfers: Iterable[Transfer],
    chips: Mapping[int, str],
) -> int:
    """Points spent on hits across the season.

    Assumes one free transfer per gameweek; wildcard and free hit gameweeks
    are skipped.

    Returns:
        Total hit cost as a positive number of points
    """
    counts: dict[int, int] = defaultdict(int)
    for transfer in transfers:
        counts[transfer.event] += 1

    hits = 0
    for gameweek, count in counts.items():
        if chips.get(gameweek) in FREE_TRANSFER_CHIPS:
            continue
        if count > 1:
            hits += (count - 1) * HIT_COST
    return hits


def build_transfer_ledger(
    entry_id: int,
    transfers: list[Transfer],
    chips: Mapping[int, str],
) -> TransferLedger:
    """Assemble the season ledger from parsed transfers and the chips played.

    Gameweeks are grouped newest first. Hits assume one free transfer per
    gameweek and skip wildcard and free hit weeks.
    """
    return TransferLedger(
        entry_id=entry_id,
        gameweeks=tuple(group_transfers_by_gameweek(transfers, chips)),
        total_transfers=len(transfers),
        total_hits=calculate_transfer_hits(transfers, chips),
    )
