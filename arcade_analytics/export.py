"""
CSV export of analytics tables.

Pure formatting: each function takes an already-built table and returns CSV
text with a header row. Fields containing a comma, quote or line break are
quoted with inner quotes doubled.
"""

import csv
import io
from typing import Iterable, List, Sequence

from .breakdowns import AchievementStat, GamePopularity, ScoreRange
from .heatmap import HOURS_PER_DAY, Heatmap
from .leaderboards import DeltaEntry, LeaderboardEntry
from .progression import ProgressionTable
from .volatility import VolatilitySeries


def to_csv(header: Sequence[str], rows: Iterable[Sequence]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return buffer.getvalue()


def leaderboard_csv(entries: List[LeaderboardEntry], sort_by: str) -> str:
    return to_csv(
        ["rank", "player_name", sort_by],
        ([entry.rank, entry.player_name, entry.value] for entry in entries),
    )


def deltas_csv(entries: List[DeltaEntry]) -> str:
    return to_csv(
        ["player_name", "current", "previous", "delta"],
        (
            [entry.player_name, entry.current, entry.previous, entry.delta]
            for entry in entries
        ),
    )


def volatility_csv(volatility: VolatilitySeries) -> str:
    return to_csv(
        ["player_name", "day", "rank"],
        (
            [name, point.day.isoformat(), point.rank]
            for name, points in volatility.series.items()
            for point in points
        ),
    )


def heatmap_csv(heatmap: Heatmap) -> str:
    return to_csv(
        ["day_of_week", "hour", "count"],
        (
            [dow, hour, heatmap.grid[dow][hour]]
            for dow in range(len(heatmap.grid))
            for hour in range(HOURS_PER_DAY)
        ),
    )


def progression_csv(table: ProgressionTable) -> str:
    return to_csv(
        ["day"] + table.columns,
        (
            [row.day.isoformat()] + [row.values[name] for name in table.players]
            for row in table.rows
        ),
    )


def distribution_csv(ranges: List[ScoreRange]) -> str:
    return to_csv(
        ["range", "min", "max", "count"],
        ([r.label, r.min, r.max, r.count] for r in ranges),
    )


def games_csv(rows: List[GamePopularity]) -> str:
    return to_csv(
        ["game_id", "name", "submissions"],
        ([row.game_id, row.name, row.submissions] for row in rows),
    )


def achievements_csv(rows: List[AchievementStat]) -> str:
    return to_csv(
        ["achievement_id", "name", "points", "unlocked", "percentage"],
        (
            [
                row.achievement_id,
                row.name,
                row.points,
                row.unlocked,
                f"{row.percentage:.1f}",
            ]
            for row in rows
        ),
    )
