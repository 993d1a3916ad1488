from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from .daily_series import DailySeries
from .volatility import select_top_players

DAY_COLUMN = "day"


def column_key(player: str) -> str:
    """Flat-row column for ``player``; never collides with the day column."""
    if player == DAY_COLUMN:
        return "player:" + player
    return player


@dataclass(frozen=True)
class ProgressionRow:
    day: date
    values: Dict[str, int] = field(default_factory=dict)

    def flatten(self) -> Dict[str, Any]:
        """``{"day": ..., player: cumulative, ...}`` as charts expect it."""
        row: Dict[str, Any] = {DAY_COLUMN: self.day}
        for name, value in self.values.items():
            row[column_key(name)] = value
        return row


@dataclass(frozen=True)
class ProgressionTable:
    days: List[date] = field(default_factory=list)
    rows: List[ProgressionRow] = field(default_factory=list)
    players: List[str] = field(default_factory=list)

    @property
    def columns(self) -> List[str]:
        """Player column names as they appear in flattened rows."""
        return [column_key(name) for name in self.players]


def build_progression(series: DailySeries, top_n: int) -> ProgressionTable:
    """Cumulative unlock count per day for the top ``top_n`` unlockers.

    A player's value carries over unchanged on days without unlocks, so
    every curve is non-decreasing.
    """
    players = select_top_players(series.player_totals(), top_n)
    running = {name: 0 for name in players}
    rows = []

    for day in series.days:
        day_values = series.values[day]
        for name in players:
            running[name] += int(day_values.get(name, 0))
        rows.append(ProgressionRow(day=day, values=dict(running)))

    return ProgressionTable(days=list(series.days), rows=rows, players=players)
