"""
Aggregation engine.

Folds score events and achievement unlocks into one ``PlayerAggregate`` per
player name. Player names are used exactly as stored: "aaa" and "AAA" are
different players here.

The returned dict is ordered by first appearance of each player in the
score events, then in the unlock events. Leaderboard tie-breaks rely on
that order, so callers should feed events in a deterministic order.
"""

import logging
from typing import Dict, Hashable, Iterable, Mapping, Optional

from .events import Achievement, AchievementUnlockEvent, PlayerAggregate, ScoreEvent

logger = logging.getLogger(__name__)


class _Totals:
    __slots__ = (
        "total_score",
        "games_played",
        "best_score",
        "achievement_count",
        "achievement_points",
    )

    def __init__(self):
        self.total_score = 0
        self.games_played = 0
        self.best_score = None
        self.achievement_count = 0
        self.achievement_points = 0

    def freeze(self, player_name: str) -> PlayerAggregate:
        return PlayerAggregate(
            player_name=player_name,
            total_score=self.total_score,
            games_played=self.games_played,
            best_score=self.best_score,
            achievement_count=self.achievement_count,
            achievement_points=self.achievement_points,
        )


def aggregate_players(
    scores: Iterable[ScoreEvent],
    unlocks: Iterable[AchievementUnlockEvent] = (),
    achievements: Optional[Mapping[Hashable, Achievement]] = None,
) -> Dict[str, PlayerAggregate]:
    """Build per-player aggregates from already-filtered events."""
    achievements = achievements or {}
    totals: Dict[str, _Totals] = {}

    for event in scores:
        row = totals.setdefault(event.player_name, _Totals())
        row.total_score += event.score
        row.games_played += 1
        if row.best_score is None or event.score > row.best_score:
            row.best_score = event.score

    dangling = 0
    for event in unlocks:
        row = totals.setdefault(event.player_name, _Totals())
        row.achievement_count += 1
        achievement = achievements.get(event.achievement_id)
        if achievement is None:
            # Unknown achievement still counts as an unlock, worth nothing.
            dangling += 1
            continue
        row.achievement_points += achievement.points

    if dangling:
        logger.debug(f"{dangling} unlock(s) referenced unknown achievements")

    return {name: row.freeze(name) for name, row in totals.items()}

