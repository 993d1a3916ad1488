"""
Daily series builder.

Buckets events by (calendar day, player) in one fixed time zone. A player
with no events on a day is simply absent from that day's mapping; the
volatility and progression trackers each decide how to fill such gaps.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, TypeVar

from .events import AchievementUnlockEvent, ScoreEvent, local_day

T = TypeVar("T")

DayBucket = Callable[[datetime], date]


@dataclass(frozen=True)
class DailySeries:
    values: Dict[date, Dict[str, float]] = field(default_factory=dict)
    days: List[date] = field(default_factory=list)

    def player_totals(self) -> Dict[str, float]:
        """Window total per player, in the order players first appear by day."""
        totals: Dict[str, float] = {}
        for day in self.days:
            for name, value in self.values[day].items():
                totals[name] = totals.get(name, 0) + value
        return totals


def day_bucket(tz=timezone.utc) -> DayBucket:
    """Bucketing function mapping a timestamp to its calendar day in ``tz``."""

    def bucket(moment: datetime) -> date:
        return local_day(moment, tz)

    return bucket


def build_daily_series(
    events: Iterable[T],
    bucket: DayBucket,
    timestamp: Callable[[T], datetime],
    player: Callable[[T], str],
    value: Callable[[T], float],
) -> DailySeries:
    """Fold ``events`` into per-day, per-player sums of ``value``."""
    values: Dict[date, Dict[str, float]] = {}
    for event in events:
        per_player = values.setdefault(bucket(timestamp(event)), {})
        name = player(event)
        per_player[name] = per_player.get(name, 0) + value(event)

    days = sorted(values)
    return DailySeries(values={day: values[day] for day in days}, days=days)


def daily_score_series(scores: Iterable[ScoreEvent], bucket: DayBucket) -> DailySeries:
    """Summed score per player per day."""
    return build_daily_series(
        scores,
        bucket,
        timestamp=lambda event: event.occurred_at,
        player=lambda event: event.player_name,
        value=lambda event: event.score,
    )


def daily_unlock_series(
    unlocks: Iterable[AchievementUnlockEvent], bucket: DayBucket
) -> DailySeries:
    """Number of unlocks per player per day."""
    return build_daily_series(
        unlocks,
        bucket,
        timestamp=lambda event: event.unlocked_at,
        player=lambda event: event.player_name,
        value=lambda event: 1,
    )
