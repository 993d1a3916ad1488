"""Small helper script to populate a demo tournament with scores and unlocks.

Run locally (with Postgres running, or DATABASE_URL pointing elsewhere):

    python sample_data.py
"""

from datetime import datetime, timedelta
import random

from arcade_analytics.database import db_session, Base, engine
from arcade_analytics.models import (
    Achievement,
    Game,
    PlayerAchievement,
    Score,
    Tournament,
)


def create_schema() -> None:
    Base.metadata.create_all(bind=engine)


def create_sample_events(days: int = 45) -> None:
    names = ["AAA", "BBB", "CCC", "DDD", "EEE", "FFF", "GGG", "HHH"]
    game_names = ["Galaga", "Ms. Pac-Man", "Donkey Kong", "Robotron 2084"]

    with db_session() as db:
        tournament = Tournament(name="Spring Invitational")
        db.add(tournament)
        db.flush()

        games = [Game(name=name, tournament_id=tournament.id) for name in game_names]
        db.add_all(games)
        achievements = [
            Achievement(name="First Score", points=10, tournament_id=None),
            Achievement(name="Score Milestone", points=25, tournament_id=tournament.id),
            Achievement(name="First Place", points=50, tournament_id=tournament.id),
        ]
        db.add_all(achievements)
        db.flush()

        now = datetime.utcnow()
        for name in names:
            for _ in range(random.randint(5, 25)):
                played_at = now - timedelta(
                    days=random.randint(0, days), minutes=random.randint(0, 1440)
                )
                db.add(
                    Score(
                        player_name=name,
                        game_id=random.choice(games).id,
                        tournament_id=tournament.id,
                        score=random.randint(100, 150_000),
                        created_at=played_at,
                    )
                )
            for achievement in random.sample(achievements, random.randint(0, 3)):
                db.add(
                    PlayerAchievement(
                        player_name=name,
                        achievement_id=achievement.id,
                        tournament_id=tournament.id,
                        unlocked_at=now - timedelta(days=random.randint(0, days)),
                    )
                )


if __name__ == "__main__":
    create_schema()
    create_sample_events()
    print("Sample data created.")
