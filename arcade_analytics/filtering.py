from typing import Hashable, Iterable, List, Union

from .events import (
    ALL_TOURNAMENTS,
    AchievementUnlockEvent,
    ScoreEvent,
    TimeWindow,
)

TournamentScope = Union[str, Hashable]


def in_scope(tournament_id, scope: TournamentScope) -> bool:
    """True when ``tournament_id`` belongs to ``scope`` ("all" matches anything)."""
    if scope == ALL_TOURNAMENTS:
        return True
    return tournament_id == scope


def filter_scores(
    events: Iterable[ScoreEvent], scope: TournamentScope, window: TimeWindow
) -> List[ScoreEvent]:
    """Score events in ``scope`` whose timestamp lies inside ``window``.

    Input order is preserved; downstream tie-breaks depend on it.
    """
    return [
        event
        for event in events
        if in_scope(event.tournament_id, scope) and window.contains(event.occurred_at)
    ]


def filter_unlocks(
    events: Iterable[AchievementUnlockEvent],
    scope: TournamentScope,
    window: TimeWindow,
) -> List[AchievementUnlockEvent]:
    return [
        event
        for event in events
        if in_scope(event.tournament_id, scope) and window.contains(event.unlocked_at)
    ]
