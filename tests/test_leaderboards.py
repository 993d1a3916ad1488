from datetime import datetime, timezone

import pytest

from arcade_analytics.aggregation import aggregate_players
from arcade_analytics.events import PlayerAggregate
from arcade_analytics.exceptions import AnalyticsError, UnknownSortKeyError
from arcade_analytics.leaderboards import build_deltas, build_leaderboard

T = datetime(2024, 3, 1, 12, tzinfo=timezone.utc)


def test_leaderboard_by_total_score(make_score):
    aggregates = aggregate_players(
        [make_score("AAA", 100, T), make_score("AAA", 300, T), make_score("BBB", 200, T)]
    )

    board = build_leaderboard(aggregates.values(), "total_score")

    assert [(e.rank, e.player_name, e.value) for e in board] == [
        (1, "AAA", 400),
        (2, "BBB", 200),
    ]


def test_ties_keep_input_order():
    rows = [
        PlayerAggregate("ZED", total_score=50, games_played=1),
        PlayerAggregate("AMY", total_score=80, games_played=1),
        PlayerAggregate("BOB", total_score=50, games_played=1),
        PlayerAggregate("CAT", total_score=50, games_played=1),
    ]

    board = build_leaderboard(rows)

    assert [e.player_name for e in board] == ["AMY", "ZED", "BOB", "CAT"]
    assert [e.rank for e in board] == [1, 2, 3, 4]


def test_truncation_happens_after_sorting():
    rows = [PlayerAggregate(f"P{i}", total_score=i, games_played=1) for i in range(20)]

    board = build_leaderboard(rows, limit=3)

    assert [e.player_name for e in board] == ["P19", "P18", "P17"]


def test_untruncated_leaderboard_conserves_total(make_score):
    scores = [make_score(name, value, T) for name, value in
              [("A", 5), ("B", 7), ("A", 11), ("C", 0), ("B", 3)]]

    board = build_leaderboard(aggregate_players(scores).values())

    assert sum(e.value for e in board) == sum(e.score for e in scores)
    values = [e.value for e in board]
    assert values == sorted(values, reverse=True)


def test_achievement_sort_keys():
    rows = [
        PlayerAggregate("AAA", achievement_count=3, achievement_points=10),
        PlayerAggregate("BBB", achievement_count=1, achievement_points=50),
    ]

    by_points = build_leaderboard(rows, "achievement_points")
    by_count = build_leaderboard(rows, "achievement_count")

    assert [e.player_name for e in by_points] == ["BBB", "AAA"]
    assert [e.player_name for e in by_count] == ["AAA", "BBB"]


def test_unknown_sort_key_is_rejected():
    with pytest.raises(UnknownSortKeyError):
        build_leaderboard([], "best_score_ever")


def test_empty_leaderboard():
    assert build_leaderboard([]) == []


def test_delta_between_windows():
    current = {"AAA": PlayerAggregate("AAA", total_score=400, games_played=1)}
    previous = {"AAA": PlayerAggregate("AAA", total_score=250, games_played=1)}

    deltas = build_deltas(current, previous)

    assert len(deltas) == 1
    assert deltas[0].player_name == "AAA"
    assert deltas[0].delta == 150


def test_inactive_player_shows_regression():
    current = {"NEW": PlayerAggregate("NEW", total_score=100, games_played=1)}
    previous = {"OLD": PlayerAggregate("OLD", total_score=300, games_played=1)}

    deltas = build_deltas(current, previous)

    assert [(d.player_name, d.delta) for d in deltas] == [("NEW", 100), ("OLD", -300)]
    assert deltas[1].current == 0
    assert deltas[1].previous == 300


def test_deltas_sorted_and_truncated():
    current = {
        name: PlayerAggregate(name, total_score=score, games_played=1)
        for name, score in [("A", 10), ("B", 90), ("C", 40), ("D", 40)]
    }

    deltas = build_deltas(current, {}, limit=3)

    assert [d.player_name for d in deltas] == ["B", "C", "D"]


def test_deltas_only_cover_players_seen_in_a_window():
    assert build_deltas({}, {}) == []


def test_unlock_only_players_stay_off_the_score_board(make_score, make_unlock):
    aggregates = aggregate_players(
        [make_score("AAA", 100, T)],
        [make_unlock("CCC", "a1", T)],
    )

    by_score = build_leaderboard(aggregates.values(), "total_score")
    by_points = build_leaderboard(aggregates.values(), "achievement_points")
    by_count = build_leaderboard(aggregates.values(), "achievement_count")

    assert [e.player_name for e in by_score] == ["AAA"]
    assert [e.player_name for e in by_points] == ["CCC"]
    assert [e.player_name for e in by_count] == ["CCC"]


def test_deltas_skip_players_without_participation():
    current = {
        "AAA": PlayerAggregate("AAA", total_score=100, games_played=1),
        "CCC": PlayerAggregate("CCC", achievement_count=2, achievement_points=20),
    }

    by_score = build_deltas(current, {})
    by_points = build_deltas(current, {}, metric="achievement_points")

    assert [d.player_name for d in by_score] == ["AAA"]
    assert [d.player_name for d in by_points] == ["CCC"]


def test_error_messages_default_to_the_internal_one():
    err = UnknownSortKeyError("nope", ("total_score",))

    assert err.user_message == "Unsupported sort key 'nope'. Use one of: total_score."
    assert AnalyticsError("boom").user_message == "boom"
