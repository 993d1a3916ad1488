from dataclasses import dataclass, field
from datetime import timezone
from typing import Iterable, List

from .events import ScoreEvent, as_utc

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24


def _empty_grid() -> List[List[int]]:
    return [[0] * HOURS_PER_DAY for _ in range(DAYS_PER_WEEK)]


@dataclass(frozen=True)
class Heatmap:
    """Submission counts by day of week (0 = Sunday) and hour of day."""

    grid: List[List[int]] = field(default_factory=_empty_grid)
    max: int = 1

    @property
    def total(self) -> int:
        return sum(sum(row) for row in self.grid)


def day_of_week(weekday: int) -> int:
    """Convert Python's Monday=0 weekday to a Sunday=0 index."""
    return (weekday + 1) % DAYS_PER_WEEK


def build_heatmap(scores: Iterable[ScoreEvent], tz=timezone.utc) -> Heatmap:
    """Raw frequency histogram of score submissions.

    ``max`` never drops below 1 so consumers can always divide by it.
    """
    grid = _empty_grid()
    for event in scores:
        local = as_utc(event.occurred_at).astimezone(tz)
        grid[day_of_week(local.weekday())][local.hour] += 1

    peak = max(max(row) for row in grid)
    return Heatmap(grid=grid, max=max(peak, 1))
