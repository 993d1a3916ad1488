import os

# Must be set before arcade_analytics.config is first imported.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_arcade_analytics.db")
os.environ.setdefault("ANALYTICS_TIMEZONE", "UTC")

import pytest

from arcade_analytics.events import AchievementUnlockEvent, ScoreEvent


@pytest.fixture
def make_score():
    def factory(player_name, score, occurred_at, game_id="g1", tournament_id=None):
        return ScoreEvent(
            player_name=player_name,
            game_id=game_id,
            tournament_id=tournament_id,
            score=score,
            occurred_at=occurred_at,
        )

    return factory


@pytest.fixture
def make_unlock():
    def factory(player_name, achievement_id, unlocked_at, tournament_id=None):
        return AchievementUnlockEvent(
            player_name=player_name,
            achievement_id=achievement_id,
            tournament_id=tournament_id,
            unlocked_at=unlocked_at,
        )

    return factory
