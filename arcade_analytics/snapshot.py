"""
Loads an ``EventSnapshot`` from the score store.

This is the only place the analytics code touches the database. Rows are read
in a fixed order (timestamp, then id) so repeated loads of unchanged data
give identical snapshots and identical tie-breaks downstream.
"""

import logging

from sqlalchemy.orm import Session

from . import models
from .events import (
    ALL_TOURNAMENTS,
    Achievement,
    EventSnapshot,
    Game,
    Tournament,
    parse_score_events,
    parse_unlock_events,
)
from .filtering import TournamentScope

logger = logging.getLogger(__name__)


def load_snapshot(db: Session, scope: TournamentScope = ALL_TOURNAMENTS) -> EventSnapshot:
    """Read events and catalogs, pre-filtering events by tournament if asked."""
    score_query = db.query(models.Score)
    unlock_query = db.query(models.PlayerAchievement)
    if scope != ALL_TOURNAMENTS:
        score_query = score_query.filter(models.Score.tournament_id == scope)
        unlock_query = unlock_query.filter(
            models.PlayerAchievement.tournament_id == scope
        )

    scores = parse_score_events(
        {
            "player_name": row.player_name,
            "game_id": row.game_id,
            "tournament_id": row.tournament_id,
            "score": row.score,
            "occurred_at": row.created_at,
        }
        for row in score_query.order_by(
            models.Score.created_at, models.Score.id
        ).all()
    )
    unlocks = parse_unlock_events(
        {
            "player_name": row.player_name,
            "achievement_id": row.achievement_id,
            "tournament_id": row.tournament_id,
            "unlocked_at": row.unlocked_at,
        }
        for row in unlock_query.order_by(
            models.PlayerAchievement.unlocked_at, models.PlayerAchievement.id
        ).all()
    )

    achievements = {
        row.id: Achievement(
            id=row.id,
            name=row.name,
            points=row.points or 0,
            tournament_id=row.tournament_id,
        )
        for row in db.query(models.Achievement).order_by(models.Achievement.name).all()
    }
    games = {
        row.id: Game(id=row.id, name=row.name)
        for row in db.query(models.Game).order_by(models.Game.name).all()
    }
    tournaments = {
        row.id: Tournament(id=row.id, name=row.name)
        for row in db.query(models.Tournament).order_by(models.Tournament.name).all()
    }

    logger.info(
        f"Loaded snapshot for scope={scope}: {len(scores)} scores, "
        f"{len(unlocks)} unlocks, {len(achievements)} achievements"
    )
    return EventSnapshot(
        scores=scores,
        unlocks=unlocks,
        achievements=achievements,
        games=games,
        tournaments=tournaments,
    )
