"""
Rank volatility tracker.

For the top N players of a window, work out where they stood on each day's
leaderboard. Every day is ranked independently over the players active that
day. A selected player who did not play that day is put one place below the
last active player, so the series has no holes.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List

from .daily_series import DailySeries


@dataclass(frozen=True)
class RankPoint:
    day: date
    rank: int


@dataclass(frozen=True)
class VolatilitySeries:
    days: List[date] = field(default_factory=list)
    series: Dict[str, List[RankPoint]] = field(default_factory=dict)


def select_top_players(totals: Dict[str, float], top_n: int) -> List[str]:
    """Top ``top_n`` names by total, ties broken alphabetically."""
    if top_n <= 0:
        return []
    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [name for name, _ in ranked[:top_n]]


def rank_day(day_values: Dict[str, float]) -> Dict[str, int]:
    """Rank one day's active players 1..k by score, highest first.

    Equal scores keep the order the players appear in ``day_values``.
    """
    ordered = sorted(day_values.items(), key=lambda item: item[1], reverse=True)
    return {name: index + 1 for index, (name, _) in enumerate(ordered)}


def build_volatility(series: DailySeries, top_n: int) -> VolatilitySeries:
    selected = select_top_players(series.player_totals(), top_n)
    result: Dict[str, List[RankPoint]] = {name: [] for name in selected}

    for day in series.days:
        ranks = rank_day(series.values[day])
        missing_rank = len(ranks) + 1
        for name in selected:
            result[name].append(RankPoint(day=day, rank=ranks.get(name, missing_rank)))

    return VolatilitySeries(days=list(series.days), series=result)
