"""
Immutable records the analytics engine works on.

Score and unlock events are read-only snapshots of what the score store
recorded. Everything else here (windows, aggregates) is derived and thrown
away after each query.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional

from .exceptions import InvariantViolation

logger = logging.getLogger(__name__)

ALL_TOURNAMENTS = "all"


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps; the score store writes naive UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class ScoreEvent:
    player_name: str
    game_id: Hashable
    tournament_id: Optional[Hashable]
    score: float
    occurred_at: datetime

    def __post_init__(self):
        object.__setattr__(self, "occurred_at", as_utc(self.occurred_at))

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> Optional["ScoreEvent"]:
        """Build an event from a loosely-typed row, or None if it is malformed."""
        player_name = row.get("player_name")
        score = row.get("score")
        occurred_at = row.get("occurred_at")
        if not isinstance(player_name, str) or not player_name:
            return None
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return None
        if not isinstance(occurred_at, datetime):
            return None
        return cls(
            player_name=player_name,
            game_id=row.get("game_id"),
            tournament_id=row.get("tournament_id"),
            score=score,
            occurred_at=occurred_at,
        )


@dataclass(frozen=True)
class AchievementUnlockEvent:
    player_name: str
    achievement_id: Hashable
    tournament_id: Optional[Hashable]
    unlocked_at: datetime

    def __post_init__(self):
        object.__setattr__(self, "unlocked_at", as_utc(self.unlocked_at))

    @classmethod
    def from_mapping(
        cls, row: Mapping[str, Any]
    ) -> Optional["AchievementUnlockEvent"]:
        player_name = row.get("player_name")
        achievement_id = row.get("achievement_id")
        unlocked_at = row.get("unlocked_at")
        if not isinstance(player_name, str) or not player_name:
            return None
        if achievement_id is None or not isinstance(unlocked_at, datetime):
            return None
        return cls(
            player_name=player_name,
            achievement_id=achievement_id,
            tournament_id=row.get("tournament_id"),
            unlocked_at=unlocked_at,
        )


@dataclass(frozen=True)
class Achievement:
    id: Hashable
    name: str
    points: int = 0
    tournament_id: Optional[Hashable] = None


@dataclass(frozen=True)
class Game:
    id: Hashable
    name: str


@dataclass(frozen=True)
class Tournament:
    id: Hashable
    name: str


class WindowKind(str, Enum):
    LAST30 = "last30"
    THIS_MONTH = "this_month"
    PREV_MONTH = "prev_month"


@dataclass(frozen=True)
class TimeWindow:
    """A time interval with both ends inclusive."""

    start: datetime
    end: datetime
    kind: WindowKind

    def __post_init__(self):
        if self.start > self.end:
            raise InvariantViolation(
                f"{self.kind.value} window starts after it ends "
                f"({self.start.isoformat()} > {self.end.isoformat()})"
            )

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class PlayerAggregate:
    player_name: str
    total_score: float = 0
    games_played: int = 0
    best_score: Optional[float] = None
    achievement_count: int = 0
    achievement_points: int = 0


@dataclass(frozen=True)
class EventSnapshot:
    """Everything the engine reads for one query, as supplied by the caller."""

    scores: List[ScoreEvent] = field(default_factory=list)
    unlocks: List[AchievementUnlockEvent] = field(default_factory=list)
    achievements: Dict[Hashable, Achievement] = field(default_factory=dict)
    games: Dict[Hashable, Game] = field(default_factory=dict)
    tournaments: Dict[Hashable, Tournament] = field(default_factory=dict)


def parse_score_events(rows: Iterable[Mapping[str, Any]]) -> List[ScoreEvent]:
    """Convert raw rows to score events, dropping malformed ones."""
    events = []
    skipped = 0
    for row in rows:
        event = ScoreEvent.from_mapping(row)
        if event is None:
            skipped += 1
            continue
        events.append(event)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed score record(s)")
    return events


def parse_unlock_events(
    rows: Iterable[Mapping[str, Any]]
) -> List[AchievementUnlockEvent]:
    """Convert raw rows to unlock events, dropping malformed ones."""
    events = []
    skipped = 0
    for row in rows:
        event = AchievementUnlockEvent.from_mapping(row)
        if event is None:
            skipped += 1
            continue
        events.append(event)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed achievement unlock record(s)")
    return events


def local_day(moment: datetime, tz) -> date:
    """Calendar day of ``moment`` in the analytics time zone."""
    return as_utc(moment).astimezone(tz).date()
