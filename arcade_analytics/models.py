import uuid
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    BigInteger,
    Index,
    Uuid,
)
from sqlalchemy.orm import relationship

from .database import Base


class Tournament(Base):
    """Competition a score or achievement can belong to. Used for labels only."""

    __tablename__ = "tournaments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Game(Base):
    __tablename__ = "games"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    tournament_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tournaments.id", ondelete="SET NULL"),
        nullable=True,
    )

    scores = relationship("Score", back_populates="game")


class Score(Base):
    """Immutable history of all score submissions."""

    __tablename__ = "scores"

    id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    player_name = Column(String, nullable=False)
    game_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("games.id", ondelete="CASCADE"),
        nullable=False,
    )
    tournament_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tournaments.id", ondelete="SET NULL"),
        nullable=True,
    )
    score = Column(BigInteger().with_variant(Integer, "sqlite"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    game = relationship("Game", back_populates="scores")

    __table_args__ = (
        Index("idx_scores_tournament_created", "tournament_id", "created_at"),
    )


class Achievement(Base):
    """Achievement catalog. ``points`` weights point-based leaderboards."""

    __tablename__ = "achievements"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    points = Column(Integer, nullable=False, default=0)
    tournament_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tournaments.id", ondelete="SET NULL"),
        nullable=True,
    )


class PlayerAchievement(Base):
    """One achievement unlock.

    ``achievement_id`` has no foreign key; unlocks may reference achievements
    that were since removed from the catalog.
    """

    __tablename__ = "player_achievements"

    id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    player_name = Column(String, nullable=False)
    achievement_id = Column(Uuid(as_uuid=True), nullable=False)
    tournament_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tournaments.id", ondelete="SET NULL"),
        nullable=True,
    )
    unlocked_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index(
            "idx_player_achievements_tournament_unlocked",
            "tournament_id",
            "unlocked_at",
        ),
    )
