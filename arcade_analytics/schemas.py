from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .events import WindowKind


class EngineModel(BaseModel):
    """Response model that can be read straight off an engine dataclass."""

    model_config = ConfigDict(from_attributes=True)


class TimeWindowSchema(EngineModel):
    kind: WindowKind
    start: datetime
    end: datetime


class WindowsResponse(EngineModel):
    current: TimeWindowSchema
    comparison: TimeWindowSchema


class LeaderboardEntry(EngineModel):
    rank: int
    player_name: str
    value: Union[int, float]


class LeaderboardResponse(BaseModel):
    tournament: str
    window: TimeWindowSchema
    sort_by: str
    total: int
    items: List[LeaderboardEntry]


class DeltaEntry(EngineModel):
    player_name: str
    current: Union[int, float]
    previous: Union[int, float]
    delta: Union[int, float]


class DeltaResponse(BaseModel):
    tournament: str
    current: TimeWindowSchema
    comparison: TimeWindowSchema
    metric: str
    items: List[DeltaEntry]


class RankPoint(EngineModel):
    day: date
    rank: int


class VolatilityResponse(EngineModel):
    days: List[date]
    series: Dict[str, List[RankPoint]]


class HeatmapResponse(EngineModel):
    grid: List[List[int]]
    max: int
    total: int


class ProgressionResponse(BaseModel):
    days: List[date]
    rows: List[Dict[str, Any]]
    players: List[str]


class ScoreRange(EngineModel):
    label: str
    min: float
    max: Optional[float]
    count: int


class GamePopularity(EngineModel):
    game_id: Optional[UUID]
    name: str
    submissions: int


class AchievementStat(EngineModel):
    achievement_id: UUID
    name: str
    points: int
    unlocked: int
    percentage: float


class HistoryPoint(EngineModel):
    day: date
    total_score: Union[int, float]
    submissions: int


class PlayerHistoryResponse(EngineModel):
    player_name: str
    points: List[HistoryPoint]


class ReportResponse(BaseModel):
    tournament: str
    tournament_name: Optional[str]
    generated_for: datetime
    current: TimeWindowSchema
    comparison: TimeWindowSchema
    leaderboards: Dict[str, List[LeaderboardEntry]]
    deltas: List[DeltaEntry]
    volatility: VolatilityResponse
    heatmap: HeatmapResponse
    progression: ProgressionResponse
    distribution: List[ScoreRange]
    games: List[GamePopularity]
    achievements: List[AchievementStat]
