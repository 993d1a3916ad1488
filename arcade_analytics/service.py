"""
Analytics service.

Wraps one immutable ``EventSnapshot`` and answers competition queries
against it. Each call resolves its windows, filters the snapshot and rebuilds
every intermediate table from scratch; nothing is cached between calls and
nothing in the snapshot is mutated, so concurrent calls need no locking.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from .aggregation import aggregate_players
from .breakdowns import (
    AchievementStat,
    GamePopularity,
    PlayerHistory,
    ScoreRange,
    build_achievement_stats,
    build_game_popularity,
    build_player_history,
    build_score_distribution,
)
from .daily_series import day_bucket, daily_score_series, daily_unlock_series
from .events import (
    ALL_TOURNAMENTS,
    AchievementUnlockEvent,
    EventSnapshot,
    PlayerAggregate,
    ScoreEvent,
    TimeWindow,
    WindowKind,
)
from .filtering import TournamentScope, filter_scores, filter_unlocks
from .heatmap import Heatmap, build_heatmap
from .leaderboards import (
    SORT_KEYS,
    DeltaEntry,
    LeaderboardEntry,
    build_deltas,
    build_leaderboard,
)
from .progression import ProgressionTable, build_progression
from .volatility import VolatilitySeries, build_volatility
from .windows import resolve_windows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompetitionReport:
    scope: TournamentScope
    current: TimeWindow
    comparison: TimeWindow
    leaderboards: Dict[str, List[LeaderboardEntry]]
    deltas: List[DeltaEntry]
    volatility: VolatilitySeries
    heatmap: Heatmap
    progression: ProgressionTable
    distribution: List[ScoreRange] = field(default_factory=list)
    games: List[GamePopularity] = field(default_factory=list)
    achievements: List[AchievementStat] = field(default_factory=list)


class AnalyticsService:
    """Competition analytics over a single event snapshot."""

    def __init__(self, snapshot: EventSnapshot, tz=timezone.utc):
        self.snapshot = snapshot
        self.tz = tz
        self.bucket = day_bucket(tz)

    def windows(
        self, kind: WindowKind, now: datetime
    ) -> Tuple[TimeWindow, TimeWindow]:
        return resolve_windows(kind, now, self.tz)

    def scoped_events(
        self, scope: TournamentScope, window: TimeWindow
    ) -> Tuple[List[ScoreEvent], List[AchievementUnlockEvent]]:
        return (
            filter_scores(self.snapshot.scores, scope, window),
            filter_unlocks(self.snapshot.unlocks, scope, window),
        )

    def aggregates(
        self, scope: TournamentScope, window: TimeWindow
    ) -> Dict[str, PlayerAggregate]:
        scores, unlocks = self.scoped_events(scope, window)
        return aggregate_players(scores, unlocks, self.snapshot.achievements)

    def leaderboard(
        self,
        scope: TournamentScope,
        kind: WindowKind,
        now: datetime,
        sort_by: str = "total_score",
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        current, _ = self.windows(kind, now)
        return build_leaderboard(
            self.aggregates(scope, current).values(), sort_by, limit
        )

    def deltas(
        self,
        scope: TournamentScope,
        kind: WindowKind,
        now: datetime,
        limit: Optional[int] = None,
        metric: str = "total_score",
    ) -> List[DeltaEntry]:
        current, comparison = self.windows(kind, now)
        return build_deltas(
            self.aggregates(scope, current),
            self.aggregates(scope, comparison),
            limit=limit,
            metric=metric,
        )

    def volatility(
        self, scope: TournamentScope, kind: WindowKind, now: datetime, top_n: int
    ) -> VolatilitySeries:
        current, _ = self.windows(kind, now)
        scores = filter_scores(self.snapshot.scores, scope, current)
        return build_volatility(daily_score_series(scores, self.bucket), top_n)

    def heatmap(
        self, scope: TournamentScope, kind: WindowKind, now: datetime
    ) -> Heatmap:
        current, _ = self.windows(kind, now)
        return build_heatmap(filter_scores(self.snapshot.scores, scope, current), self.tz)

    def progression(
        self, scope: TournamentScope, kind: WindowKind, now: datetime, top_n: int
    ) -> ProgressionTable:
        current, _ = self.windows(kind, now)
        unlocks = filter_unlocks(self.snapshot.unlocks, scope, current)
        return build_progression(daily_unlock_series(unlocks, self.bucket), top_n)

    def distribution(
        self, scope: TournamentScope, kind: WindowKind, now: datetime
    ) -> List[ScoreRange]:
        current, _ = self.windows(kind, now)
        return build_score_distribution(filter_scores(self.snapshot.scores, scope, current))

    def game_popularity(
        self, scope: TournamentScope, kind: WindowKind, now: datetime
    ) -> List[GamePopularity]:
        current, _ = self.windows(kind, now)
        return build_game_popularity(
            filter_scores(self.snapshot.scores, scope, current), self.snapshot.games
        )

    def achievement_stats(
        self, scope: TournamentScope, kind: WindowKind, now: datetime
    ) -> List[AchievementStat]:
        current, _ = self.windows(kind, now)
        return build_achievement_stats(
            filter_unlocks(self.snapshot.unlocks, scope, current),
            self.snapshot.achievements,
            scope,
        )

    def player_history(
        self,
        player_name: str,
        scope: TournamentScope,
        kind: WindowKind,
        now: datetime,
    ) -> PlayerHistory:
        current, _ = self.windows(kind, now)
        return build_player_history(
            filter_scores(self.snapshot.scores, scope, current),
            player_name,
            self.bucket,
        )

    def build_report(
        self,
        now: datetime,
        scope: TournamentScope = ALL_TOURNAMENTS,
        kind: WindowKind = WindowKind.LAST30,
        top_n: int = 5,
        leaderboard_limit: Optional[int] = 10,
        delta_limit: Optional[int] = 15,
    ) -> CompetitionReport:
        """Every table for one (scope, window, top N) selection.

        Windows are resolved and the snapshot filtered once; the builders
        then work independently off the same filtered events.
        """
        current, comparison = self.windows(kind, now)
        scores, unlocks = self.scoped_events(scope, current)
        previous_scores, previous_unlocks = self.scoped_events(scope, comparison)

        aggregates = aggregate_players(scores, unlocks, self.snapshot.achievements)
        previous = aggregate_players(
            previous_scores, previous_unlocks, self.snapshot.achievements
        )

        report = CompetitionReport(
            scope=scope,
            current=current,
            comparison=comparison,
            leaderboards={
                key: build_leaderboard(aggregates.values(), key, leaderboard_limit)
                for key in SORT_KEYS
            },
            deltas=build_deltas(aggregates, previous, limit=delta_limit),
            volatility=build_volatility(daily_score_series(scores, self.bucket), top_n),
            heatmap=build_heatmap(scores, self.tz),
            progression=build_progression(
                daily_unlock_series(unlocks, self.bucket), top_n
            ),
            distribution=build_score_distribution(scores),
            games=build_game_popularity(scores, self.snapshot.games),
            achievements=build_achievement_stats(
                unlocks, self.snapshot.achievements, scope
            ),
        )
        logger.debug(
            f"Built report for scope={scope} window={WindowKind(kind).value}: "
            f"{len(scores)} scores, {len(unlocks)} unlocks, {len(aggregates)} players"
        )
        return report
