import random

import pytest

from dashboard.ranking import (
    LEADERBOARD_SIZE,
    PERCENTILE_AXIS,
    LeaderboardView,
    RankingEngine,
    max_score,
    percentile_of,
    rank,
)
from dashboard.schemas import GameBucket, ScoreRecord
from tests.util import game_bucket, score_row


def records(*scores) -> list[ScoreRecord]:
    return [ScoreRecord.model_validate(score_row(s, f"p{i}")) for i, s in enumerate(scores)]


def buckets(*score_lists) -> list[GameBucket]:
    return [
        GameBucket.model_validate(game_bucket(i + 1, f"G{i + 1}", [score_row(s, f"g{i}p{j}") for j, s in enumerate(sl)]))
        for i, sl in enumerate(score_lists)
    ]


def test_rank_stable_ties_and_single_max_marker():
    recs = records(10, 30, 30, 5)
    ranked = rank(recs)

    assert [r.score for r in ranked] == [30, 30, 10, 5]
    assert ranked[0] is recs[1]
    assert ranked[1] is recs[2]
    assert max_score(ranked) == 30

    view = LeaderboardView.from_scores(recs)
    flags = [e.is_max for e in view.entries()]
    assert flags == [True, False, False, False]


@pytest.mark.parametrize("n", [0, 1, 2, 19, 20, 21, 57])
def test_rank_length_order_and_idempotence(n):
    rnd = random.Random(n)
    recs = records(*[rnd.randint(0, 50) for _ in range(n)])
    ranked = rank(recs)

    assert len(ranked) == min(n, LEADERBOARD_SIZE)
    assert all(ranked[i].score >= ranked[i + 1].score for i in range(len(ranked) - 1))
    if n <= LEADERBOARD_SIZE:
        assert rank(ranked) == ranked


def test_rank_keeps_best_twenty():
    recs = records(*range(30))
    ranked = rank(recs)
    assert [r.score for r in ranked] == list(range(29, 9, -1))


def test_percentile_endpoints_and_monotonic():
    assert percentile_of(0, 1) == 100
    for n in (2, 3, 7, 20):
        assert percentile_of(0, n) == 100
        assert percentile_of(n - 1, n) == 0
        ps = [percentile_of(i, n) for i in range(n)]
        assert ps == sorted(ps, reverse=True)
    assert percentile_of(1, 3) == 50

    with pytest.raises(ValueError):
        percentile_of(0, 0)


def test_view_invariants_and_chart_series():
    view = LeaderboardView.from_scores(records(3, 9, 1))
    assert view.max_score == 9
    assert view.max_score == view.ranked[0].score
    assert view.percentile_of(0) == 100
    assert view.percentile_of(2) == 0

    series = view.chart_series()
    assert [p["score"] for p in series] == [9, 3, 1]
    assert [p["percentile"] for p in series] == [100, 50, 0]
    assert [p["is_max"] for p in series] == [True, False, False]
    assert series[0]["achieved_at"].startswith("2025-02-01T10:00:00")
    assert PERCENTILE_AXIS["reversed"] is True


def test_empty_view():
    view = LeaderboardView.from_scores([])
    assert view.empty
    assert view.max_score is None
    assert view.entries() == []


def test_select_bucket_resets_rank():
    engine = RankingEngine(buckets=buckets([1, 2, 3, 4, 5, 6, 7], [8, 9]))
    engine.select_rank(5)
    assert engine.selection.rank_index == 5

    engine.select_bucket(1)
    assert engine.selection.bucket_index == 1
    assert engine.selection.rank_index == 0
    assert engine.selected_record().score == 9


def test_select_bucket_same_index_still_resets_rank():
    engine = RankingEngine(buckets=buckets([1, 2, 3]))
    engine.select_rank(2)
    engine.select_bucket(0)
    assert engine.selection.rank_index == 0


def test_select_bucket_out_of_range():
    engine = RankingEngine(buckets=buckets([1], [2]))
    with pytest.raises(IndexError):
        engine.select_bucket(2)
    with pytest.raises(IndexError):
        engine.select_bucket(-1)
    assert engine.selection.bucket_index == 0


def test_select_rank_clamps():
    engine = RankingEngine(buckets=buckets([5, 4, 3]))
    assert engine.select_rank(99) == 2
    assert engine.selected_record().score == 3
    assert engine.select_rank(-4) == 0


def test_select_rank_on_empty_bucket():
    engine = RankingEngine(buckets=buckets([]))
    assert engine.select_rank(3) == 0
    assert engine.selected_record() is None
    assert engine.view().empty


def test_cycle_wraps_both_ways():
    engine = RankingEngine(buckets=buckets([1], [2], [3]))
    engine.select_bucket(2)
    assert engine.cycle(+1) == 0
    assert engine.cycle(-1) == 2
    engine.select_rank(0)
    assert engine.cycle(-1) == 1
    assert engine.selection.rank_index == 0


def test_cycle_without_buckets_is_noop():
    engine = RankingEngine()
    assert engine.cycle(1) == 0
    assert engine.cycle(-1) == 0
    assert engine.active_bucket is None
    assert engine.view().empty


def test_view_follows_bucket_and_replace():
    engine = RankingEngine(buckets=buckets([1, 2], [7, 8, 9]))
    assert engine.view().max_score == 2
    engine.select_bucket(1)
    assert engine.view().max_score == 9
    engine.select_rank(2)

    engine.replace(buckets([40]))
    assert engine.selection.bucket_index == 0
    assert engine.selection.rank_index == 0
    assert engine.view().max_score == 40


def test_selection_copy_cannot_move_cursor():
    engine = RankingEngine(buckets=buckets([1, 2, 3]))
    sel = engine.selection
    sel.rank_index = 2
    assert engine.selection.rank_index == 0


def test_custom_limit():
    engine = RankingEngine(buckets=buckets(list(range(10))), limit=3)
    assert [r.score for r in engine.view().ranked] == [9, 8, 7]
