"""
Secondary competition tables: score ranges, game popularity, achievement
unlock rates and a single player's daily history.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Hashable, Iterable, List, Mapping, Optional

from .daily_series import DayBucket
from .events import Achievement, AchievementUnlockEvent, Game, ScoreEvent
from .filtering import TournamentScope, in_scope

UNKNOWN_GAME = "Unknown Game"

# (label, inclusive lower bound, exclusive upper bound or None for open)
SCORE_RANGES = (
    ("0-1K", 0, 1_000),
    ("1K-5K", 1_000, 5_000),
    ("5K-10K", 5_000, 10_000),
    ("10K-25K", 10_000, 25_000),
    ("25K-50K", 25_000, 50_000),
    ("50K-100K", 50_000, 100_000),
    ("100K+", 100_000, None),
)


@dataclass(frozen=True)
class ScoreRange:
    label: str
    min: float
    max: Optional[float]
    count: int


@dataclass(frozen=True)
class GamePopularity:
    game_id: Hashable
    name: str
    submissions: int


@dataclass(frozen=True)
class AchievementStat:
    achievement_id: Hashable
    name: str
    points: int
    unlocked: int
    percentage: float


@dataclass(frozen=True)
class HistoryPoint:
    day: date
    total_score: float
    submissions: int


@dataclass(frozen=True)
class PlayerHistory:
    player_name: str
    points: List[HistoryPoint] = field(default_factory=list)


def build_score_distribution(scores: Iterable[ScoreEvent]) -> List[ScoreRange]:
    counts = [0] * len(SCORE_RANGES)
    for event in scores:
        for index, (_, low, high) in enumerate(SCORE_RANGES):
            if event.score >= low and (high is None or event.score < high):
                counts[index] += 1
                break
    return [
        ScoreRange(label=label, min=low, max=high, count=count)
        for (label, low, high), count in zip(SCORE_RANGES, counts)
    ]


def build_game_popularity(
    scores: Iterable[ScoreEvent], games: Mapping[Hashable, Game]
) -> List[GamePopularity]:
    counts: Dict[Hashable, int] = {}
    for event in scores:
        counts[event.game_id] = counts.get(event.game_id, 0) + 1

    rows = [
        GamePopularity(
            game_id=game_id,
            name=games[game_id].name if game_id in games else UNKNOWN_GAME,
            submissions=count,
        )
        for game_id, count in counts.items()
    ]
    rows.sort(key=lambda row: row.submissions, reverse=True)
    return rows


def build_achievement_stats(
    unlocks: Iterable[AchievementUnlockEvent],
    achievements: Mapping[Hashable, Achievement],
    scope: TournamentScope,
) -> List[AchievementStat]:
    """Unlock count and share of all unlocks, per catalog achievement.

    Global achievements (no tournament) are listed under every scope.
    """
    counts: Dict[Hashable, int] = {}
    total = 0
    for event in unlocks:
        counts[event.achievement_id] = counts.get(event.achievement_id, 0) + 1
        total += 1

    rows = []
    for achievement in achievements.values():
        if achievement.tournament_id is not None and not in_scope(
            achievement.tournament_id, scope
        ):
            continue
        unlocked = counts.get(achievement.id, 0)
        rows.append(
            AchievementStat(
                achievement_id=achievement.id,
                name=achievement.name,
                points=achievement.points,
                unlocked=unlocked,
                percentage=(unlocked / total * 100) if total else 0.0,
            )
        )
    rows.sort(key=lambda row: row.unlocked, reverse=True)
    return rows


def build_player_history(
    scores: Iterable[ScoreEvent], player_name: str, bucket: DayBucket
) -> PlayerHistory:
    totals: Dict[date, float] = {}
    submissions: Dict[date, int] = {}
    for event in scores:
        if event.player_name != player_name:
            continue
        day = bucket(event.occurred_at)
        totals[day] = totals.get(day, 0) + event.score
        submissions[day] = submissions.get(day, 0) + 1

    return PlayerHistory(
        player_name=player_name,
        points=[
            HistoryPoint(day=day, total_score=totals[day], submissions=submissions[day])
            for day in sorted(totals)
        ],
    )
