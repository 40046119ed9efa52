from __future__ import annotations

from typing import Any

from ..ranking import PERCENTILE_AXIS, RankingEngine
from ..schemas import GameBucket, ScoreRecord
from ..tween import Formatter, fixed

NO_DATA_MESSAGE = "No data available."

# fields of the selected record that get an animated counter
RECORD_COUNTERS: dict[str, Formatter] = {
    "score": fixed(0),
    "timeTaken": fixed(2),
    "scorePerMinute": fixed(2),
    "cultixReward": fixed(0),
}

CARD_COUNTERS: dict[str, Formatter] = {
    "score": fixed(0),
    "meanScorePerMinute": fixed(2),
    "meanTime": fixed(2),
}


def empty_payload() -> dict[str, Any]:
    return {"state": "empty", "message": NO_DATA_MESSAGE}


def record_out(rec: ScoreRecord) -> dict[str, Any]:
    return rec.model_dump(by_alias=True, mode="json")


def record_targets(rec: ScoreRecord) -> dict[str, float]:
    return {
        "score": rec.score,
        "timeTaken": rec.time_taken,
        "scorePerMinute": rec.score_per_minute,
        "cultixReward": rec.cultix_reward,
    }


def leaderboard_payload(engine: RankingEngine) -> dict[str, Any]:
    """
    Everything the leaderboard page renders for the current selection:
    game list, ranked rows (percentile + max marker), the chart series and
    the selected record with its counter start values.
    """
    if engine.bucket_count == 0:
        return empty_payload()

    view = engine.view()
    sel = engine.selection
    bucket = engine.active_bucket
    assert bucket is not None

    entries = [
        {
            "rank": e.rank,
            "percentile": e.percentile,
            "is_max": e.is_max,
            "record": record_out(e.record),
        }
        for e in view.entries()
    ]

    selected = engine.selected_record()
    return {
        "state": "ok",
        "games": [
            {"index": i, "game_id": b.game_id, "title": b.game_title}
            for i, b in enumerate(engine.buckets)
        ],
        "selection": {"game": sel.bucket_index, "rank": sel.rank_index},
        "game": {"game_id": bucket.game_id, "title": bucket.game_title},
        "max_score": view.max_score,
        "entries": entries,
        "chart": {"axis": dict(PERCENTILE_AXIS), "series": view.chart_series()},
        "selected": record_out(selected) if selected is not None else None,
        "counters": (
            {k: RECORD_COUNTERS[k](v) for k, v in record_targets(selected).items()}
            if selected is not None
            else None
        ),
    }


def card_targets(bucket: GameBucket) -> dict[str, float]:
    stats = bucket.statistics
    top = bucket.top_valid_score
    return {
        "score": top.score if top is not None else 0.0,
        "meanScorePerMinute": stats.score_per_minute.mean if stats is not None else 0.0,
        "meanTime": stats.time.mean if stats is not None else 0.0,
    }


def top_scorer_card(bucket: GameBucket) -> dict[str, Any]:
    top = bucket.top_valid_score
    targets = card_targets(bucket)
    return {
        "game_id": bucket.game_id,
        "title": bucket.game_title,
        "image": f"/{bucket.game_id}.svg",
        "top_valid_score": top.model_dump(by_alias=True) if top is not None else None,
        "mean_score_per_minute": targets["meanScorePerMinute"],
        "mean_time": targets["meanTime"],
        "counters": {k: CARD_COUNTERS[k](v) for k, v in targets.items()},
    }


def top_scorer_payload(engine: RankingEngine) -> dict[str, Any]:
    bucket = engine.active_bucket
    if bucket is None:
        return empty_payload()
    return {
        "state": "ok",
        "index": engine.selection.bucket_index,
        "count": engine.bucket_count,
        "card": top_scorer_card(bucket),
    }
