"""
Leaderboard builder and delta calculator.

Both sort descending with Python's stable sort, so players with equal values
keep the order they came in with. Truncation to the top K always happens
after sorting.
"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from .events import PlayerAggregate
from .exceptions import UnknownSortKeyError

SORT_KEYS = ("total_score", "achievement_points", "achievement_count")

# A player only appears on a board if they took part in what it measures:
# score boards need a submission, achievement boards need an unlock.
PARTICIPATION = {
    "total_score": "games_played",
    "achievement_points": "achievement_count",
    "achievement_count": "achievement_count",
}


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    player_name: str
    value: float


@dataclass(frozen=True)
class DeltaEntry:
    player_name: str
    current: float
    previous: float
    delta: float


def _check_key(sort_by: str) -> None:
    if sort_by not in SORT_KEYS:
        raise UnknownSortKeyError(sort_by, SORT_KEYS)


def takes_part(row: PlayerAggregate, key: str) -> bool:
    return getattr(row, PARTICIPATION[key]) > 0


def build_leaderboard(
    aggregates: Iterable[PlayerAggregate],
    sort_by: str = "total_score",
    limit: Optional[int] = None,
) -> List[LeaderboardEntry]:
    """Rank aggregates by ``sort_by``, highest first.

    Only players who took part in what ``sort_by`` measures are ranked.
    Ranks are positional (1, 2, 3, ...) even for ties; the tie order itself
    is the input order.
    """
    _check_key(sort_by)
    ordered = sorted(
        (row for row in aggregates if takes_part(row, sort_by)),
        key=lambda row: getattr(row, sort_by),
        reverse=True,
    )
    if limit is not None:
        ordered = ordered[:limit]
    return [
        LeaderboardEntry(
            rank=index + 1,
            player_name=row.player_name,
            value=getattr(row, sort_by),
        )
        for index, row in enumerate(ordered)
    ]


def build_deltas(
    current: Mapping[str, PlayerAggregate],
    previous: Mapping[str, PlayerAggregate],
    limit: Optional[int] = None,
    metric: str = "total_score",
) -> List[DeltaEntry]:
    """Signed change of ``metric`` per player between two windows.

    Covers every player who took part in ``metric`` in either window; a
    missing side counts as zero, so a player who went quiet shows up with a
    negative delta.
    """
    _check_key(metric)
    current = {
        name: row for name, row in current.items() if takes_part(row, metric)
    }
    previous = {
        name: row for name, row in previous.items() if takes_part(row, metric)
    }
    names = list(current)
    names.extend(name for name in previous if name not in current)

    entries = []
    for name in names:
        now_value = getattr(current[name], metric) if name in current else 0
        then_value = getattr(previous[name], metric) if name in previous else 0
        entries.append(
            DeltaEntry(
                player_name=name,
                current=now_value,
                previous=then_value,
                delta=now_value - then_value,
            )
        )

    entries.sort(key=lambda entry: entry.delta, reverse=True)
    if limit is not None:
        entries = entries[:limit]
    return entries
