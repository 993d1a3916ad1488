from datetime import datetime, timezone

from arcade_analytics.events import (
    Achievement,
    EventSnapshot,
    Game,
    WindowKind,
)
from arcade_analytics.service import AnalyticsService

NOW = datetime(2024, 3, 15, 12, tzinfo=timezone.utc)


def on(month, day, hour=12):
    return datetime(2024, month, day, hour, tzinfo=timezone.utc)


def build_snapshot(make_score, make_unlock):
    return EventSnapshot(
        scores=[
            make_score("AAA", 100, on(3, 2), tournament_id="t1"),
            make_score("BBB", 200, on(3, 3), tournament_id="t1"),
            make_score("AAA", 300, on(3, 4), tournament_id="t1"),
            make_score("AAA", 250, on(2, 10), tournament_id="t1"),
            make_score("ZZZ", 999, on(3, 5), tournament_id="t2"),
        ],
        unlocks=[
            make_unlock("AAA", "a1", on(3, 2), tournament_id="t1"),
            make_unlock("BBB", "a1", on(3, 6), tournament_id="t1"),
        ],
        achievements={"a1": Achievement("a1", "First Score", 10)},
        games={"g1": Game("g1", "Galaga")},
    )


def test_report_for_a_tournament(make_score, make_unlock):
    service = AnalyticsService(build_snapshot(make_score, make_unlock))

    report = service.build_report(NOW, scope="t1", kind=WindowKind.THIS_MONTH)

    board = report.leaderboards["total_score"]
    assert [(e.player_name, e.value) for e in board] == [("AAA", 400), ("BBB", 200)]
    assert [(d.player_name, d.delta) for d in report.deltas] == [
        ("BBB", 200),
        ("AAA", 150),
    ]
    assert report.heatmap.total == 3
    assert report.progression.players == ["AAA", "BBB"]
    assert set(report.volatility.series) == {"AAA", "BBB"}
    assert report.games[0].name == "Galaga"
    assert report.achievements[0].unlocked == 2


def test_individual_queries_match_report(make_score, make_unlock):
    service = AnalyticsService(build_snapshot(make_score, make_unlock))
    report = service.build_report(NOW, scope="t1", kind="this_month", top_n=2)

    assert service.leaderboard("t1", "this_month", NOW, limit=10) == (
        report.leaderboards["total_score"]
    )
    assert service.deltas("t1", "this_month", NOW, limit=15) == report.deltas
    assert service.volatility("t1", "this_month", NOW, 2) == report.volatility
    assert service.heatmap("t1", "this_month", NOW) == report.heatmap
    assert service.progression("t1", "this_month", NOW, 2) == report.progression


def test_report_is_idempotent(make_score, make_unlock):
    service = AnalyticsService(build_snapshot(make_score, make_unlock))

    first = service.build_report(NOW)
    second = service.build_report(NOW)

    assert first == second


def test_empty_snapshot_gives_empty_shapes():
    report = AnalyticsService(EventSnapshot()).build_report(NOW, scope="t9")

    assert all(board == [] for board in report.leaderboards.values())
    assert report.deltas == []
    assert report.volatility.days == [] and report.volatility.series == {}
    assert report.heatmap.max == 1 and report.heatmap.total == 0
    assert report.progression.rows == []
    assert all(r.count == 0 for r in report.distribution)
    assert report.games == []
    assert report.achievements == []


def test_player_history_is_scoped(make_score, make_unlock):
    service = AnalyticsService(build_snapshot(make_score, make_unlock))

    history = service.player_history("AAA", "t1", WindowKind.THIS_MONTH, NOW)

    assert [p.total_score for p in history.points] == [100, 300]


def test_naive_timestamps_are_read_as_utc(make_score, make_unlock):
    naive = datetime(2024, 3, 4, 14, 0)
    snapshot = EventSnapshot(
        scores=[make_score("AAA", 100, naive, tournament_id="t1")],
        unlocks=[make_unlock("AAA", "a1", naive, tournament_id="t1")],
        achievements={"a1": Achievement("a1", "First Score", 10)},
    )
    service = AnalyticsService(snapshot)

    board = service.leaderboard("all", "this_month", NOW)

    assert snapshot.scores[0].occurred_at.tzinfo is timezone.utc
    assert snapshot.unlocks[0].unlocked_at.tzinfo is timezone.utc
    assert [(e.player_name, e.value) for e in board] == [("AAA", 100)]
