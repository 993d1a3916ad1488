import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from .config import get_settings
from .database import Base, engine, get_db
from .events import ALL_TOURNAMENTS, TimeWindow, WindowKind
from .exceptions import AnalyticsError, UnknownTableError
from .logging_config import setup_logging
from .progression import ProgressionTable
from .service import AnalyticsService
from .snapshot import load_snapshot
from .windows import resolve_windows
from . import export, schemas

settings = get_settings()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    """Create tables on startup for demo purposes.

    In production you would use Alembic migrations instead.
    """
    setup_logging()
    Base.metadata.create_all(bind=engine)


@app.exception_handler(AnalyticsError)
async def analytics_error_handler(request: Request, exc: AnalyticsError) -> JSONResponse:
    logger.warning(f"{request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": exc.user_message})


Scope = Union[str, UUID]


def get_scope(tournament: str = Query(ALL_TOURNAMENTS)) -> Scope:
    """Parse the tournament selector: "all" or a tournament id."""
    if tournament == ALL_TOURNAMENTS:
        return ALL_TOURNAMENTS
    try:
        return UUID(tournament)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid tournament id")


def get_now(now: Optional[datetime] = Query(None)) -> datetime:
    """Reference instant for window resolution. Defaults to the current time."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def get_service(
    scope: Scope = Depends(get_scope), db: Session = Depends(get_db)
) -> AnalyticsService:
    """Load a fresh snapshot for the requested scope and wrap it."""
    snapshot = load_snapshot(db, scope)
    if scope != ALL_TOURNAMENTS and scope not in snapshot.tournaments:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return AnalyticsService(snapshot, tz=settings.timezone)


def _window(window: TimeWindow) -> schemas.TimeWindowSchema:
    return schemas.TimeWindowSchema.model_validate(window)


def _many(model, rows) -> List:
    return [model.model_validate(row) for row in rows]


def _progression(table: ProgressionTable) -> schemas.ProgressionResponse:
    return schemas.ProgressionResponse(
        days=table.days,
        rows=[row.flatten() for row in table.rows],
        players=table.columns,
    )


@app.get("/analytics/windows", response_model=schemas.WindowsResponse)
def get_windows(
    window: WindowKind = Query(WindowKind.LAST30),
    now: datetime = Depends(get_now),
):
    """Resolve the current and comparison windows for a selector."""
    current, comparison = resolve_windows(window, now, settings.timezone)
    return schemas.WindowsResponse(current=_window(current), comparison=_window(comparison))


@app.get("/analytics/leaderboard", response_model=schemas.LeaderboardResponse)
def get_leaderboard(
    window: WindowKind = Query(WindowKind.LAST30),
    sort_by: str = Query("total_score"),
    limit: int = Query(settings.LEADERBOARD_LIMIT, ge=1, le=100),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    """Ranked leaderboard for the current window."""
    current, _ = service.windows(window, now)
    entries = service.leaderboard(scope, window, now, sort_by=sort_by, limit=limit)
    return schemas.LeaderboardResponse(
        tournament=str(scope),
        window=_window(current),
        sort_by=sort_by,
        total=len(entries),
        items=_many(schemas.LeaderboardEntry, entries),
    )


@app.get("/analytics/deltas", response_model=schemas.DeltaResponse)
def get_deltas(
    window: WindowKind = Query(WindowKind.LAST30),
    metric: str = Query("total_score"),
    limit: int = Query(settings.DELTA_LIMIT, ge=1, le=100),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    """Biggest movers between the current and the comparison window."""
    current, comparison = service.windows(window, now)
    entries = service.deltas(scope, window, now, limit=limit, metric=metric)
    return schemas.DeltaResponse(
        tournament=str(scope),
        current=_window(current),
        comparison=_window(comparison),
        metric=metric,
        items=_many(schemas.DeltaEntry, entries),
    )


@app.get("/analytics/volatility", response_model=schemas.VolatilityResponse)
def get_volatility(
    window: WindowKind = Query(WindowKind.LAST30),
    top_n: int = Query(settings.TOP_N, ge=1, le=50),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    return schemas.VolatilityResponse.model_validate(
        service.volatility(scope, window, now, top_n)
    )


@app.get("/analytics/heatmap", response_model=schemas.HeatmapResponse)
def get_heatmap(
    window: WindowKind = Query(WindowKind.LAST30),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    return schemas.HeatmapResponse.model_validate(service.heatmap(scope, window, now))


@app.get("/analytics/progression", response_model=schemas.ProgressionResponse)
def get_progression(
    window: WindowKind = Query(WindowKind.LAST30),
    top_n: int = Query(settings.TOP_N, ge=1, le=50),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    return _progression(service.progression(scope, window, now, top_n))


@app.get("/analytics/distribution", response_model=List[schemas.ScoreRange])
def get_distribution(
    window: WindowKind = Query(WindowKind.LAST30),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    return _many(schemas.ScoreRange, service.distribution(scope, window, now))


@app.get("/analytics/games", response_model=List[schemas.GamePopularity])
def get_game_popularity(
    window: WindowKind = Query(WindowKind.LAST30),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    return _many(schemas.GamePopularity, service.game_popularity(scope, window, now))


@app.get("/analytics/achievements", response_model=List[schemas.AchievementStat])
def get_achievement_stats(
    window: WindowKind = Query(WindowKind.LAST30),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    return _many(schemas.AchievementStat, service.achievement_stats(scope, window, now))


@app.get(
    "/analytics/players/{player_name}/history",
    response_model=schemas.PlayerHistoryResponse,
)
def get_player_history(
    player_name: str,
    window: WindowKind = Query(WindowKind.LAST30),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    """Daily score totals for one player. Names are matched exactly."""
    known = any(event.player_name == player_name for event in service.snapshot.scores)
    if not known:
        raise HTTPException(status_code=404, detail="Player not found")
    return schemas.PlayerHistoryResponse.model_validate(
        service.player_history(player_name, scope, window, now)
    )


@app.get("/analytics/report", response_model=schemas.ReportResponse)
def get_report(
    window: WindowKind = Query(WindowKind.LAST30),
    top_n: int = Query(settings.TOP_N, ge=1, le=50),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    """Every analytics table for one selection in a single response."""
    report = service.build_report(
        now,
        scope=scope,
        kind=window,
        top_n=top_n,
        leaderboard_limit=settings.LEADERBOARD_LIMIT,
        delta_limit=settings.DELTA_LIMIT,
    )
    tournament = service.snapshot.tournaments.get(scope)
    return schemas.ReportResponse(
        tournament=str(scope),
        tournament_name=tournament.name if tournament else None,
        generated_for=now,
        current=_window(report.current),
        comparison=_window(report.comparison),
        leaderboards={
            key: _many(schemas.LeaderboardEntry, entries)
            for key, entries in report.leaderboards.items()
        },
        deltas=_many(schemas.DeltaEntry, report.deltas),
        volatility=schemas.VolatilityResponse.model_validate(report.volatility),
        heatmap=schemas.HeatmapResponse.model_validate(report.heatmap),
        progression=_progression(report.progression),
        distribution=_many(schemas.ScoreRange, report.distribution),
        games=_many(schemas.GamePopularity, report.games),
        achievements=_many(schemas.AchievementStat, report.achievements),
    )


# (service, scope, window, now, sort_by, top_n) -> CSV text
Exporter = Callable[[AnalyticsService, Scope, WindowKind, datetime, str, int], str]

EXPORTERS: Dict[str, Exporter] = {
    "leaderboard": lambda service, scope, window, now, sort_by, top_n: (
        export.leaderboard_csv(
            service.leaderboard(
                scope, window, now, sort_by, limit=settings.LEADERBOARD_LIMIT
            ),
            sort_by,
        )
    ),
    "deltas": lambda service, scope, window, now, sort_by, top_n: export.deltas_csv(
        service.deltas(scope, window, now, limit=settings.DELTA_LIMIT, metric=sort_by)
    ),
    "volatility": lambda service, scope, window, now, sort_by, top_n: (
        export.volatility_csv(service.volatility(scope, window, now, top_n))
    ),
    "heatmap": lambda service, scope, window, now, sort_by, top_n: export.heatmap_csv(
        service.heatmap(scope, window, now)
    ),
    "progression": lambda service, scope, window, now, sort_by, top_n: (
        export.progression_csv(service.progression(scope, window, now, top_n))
    ),
    "distribution": lambda service, scope, window, now, sort_by, top_n: (
        export.distribution_csv(service.distribution(scope, window, now))
    ),
    "games": lambda service, scope, window, now, sort_by, top_n: export.games_csv(
        service.game_popularity(scope, window, now)
    ),
    "achievements": lambda service, scope, window, now, sort_by, top_n: (
        export.achievements_csv(service.achievement_stats(scope, window, now))
    ),
}


@app.get("/analytics/export/{table}.csv")
def export_table(
    table: str,
    window: WindowKind = Query(WindowKind.LAST30),
    sort_by: str = Query("total_score"),
    top_n: int = Query(settings.TOP_N, ge=1, le=50),
    scope: Scope = Depends(get_scope),
    now: datetime = Depends(get_now),
    service: AnalyticsService = Depends(get_service),
):
    """Download one analytics table as CSV.

    ``sort_by`` picks the leaderboard column and the delta metric; ``top_n``
    sizes the volatility and progression tables.
    """
    exporter = EXPORTERS.get(table)
    if exporter is None:
        raise UnknownTableError(table, sorted(EXPORTERS))
    return Response(
        content=exporter(service, scope, window, now, sort_by, top_n),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{table}.csv"'},
    )
