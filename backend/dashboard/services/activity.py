from __future__ import annotations

from typing import Any

from ..schemas import MonthlyActivity, TopGame, WalletCount
from ..tween import Formatter, ceil_int, fixed
from .leaderboard import NO_DATA_MESSAGE

ACTIVITY_COUNTERS: dict[str, Formatter] = {
    "uniquePlayers": fixed(0),
    "numberOfActivities": fixed(0),
    "activitiesPerPlayer": fixed(2),
}

WALLET_COUNTERS: dict[str, Formatter] = {"count": ceil_int}


def parse_minutes(value: str | float | int | None) -> float:
    """Upstream sends minutes as strings ("12.50"); garbage reads as 0."""
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def activity_targets(data: MonthlyActivity) -> dict[str, float]:
    return {
        "uniquePlayers": float(data.unique_players),
        "numberOfActivities": float(data.number_of_activities),
        "activitiesPerPlayer": float(data.number_of_activities_per_player),
    }


def activity_payload(data: MonthlyActivity, month: int, year: int) -> dict[str, Any]:
    targets = activity_targets(data)
    daily = [
        {
            "date": d.date,
            "total_minutes": parse_minutes(d.total_minutes),
            "total_activities": d.total_activities,
        }
        for d in data.daily_breakdown
    ]
    base = {"month": month, "year": year}
    if not daily and not any(targets.values()):
        return {**base, **{"state": "empty", "message": NO_DATA_MESSAGE}}

    return {
        **base,
        "state": "ok",
        "totals": {
            "total_time": parse_minutes(data.total_time),
            "average_time_per_activity": parse_minutes(data.average_time_per_activity),
            "average_time_spent_per_player": parse_minutes(data.average_time_spent_per_player),
        },
        "targets": targets,
        "counters": {k: ACTIVITY_COUNTERS[k](v) for k, v in targets.items()},
        "daily": daily,
    }


def wallets_payload(data: WalletCount) -> dict[str, Any]:
    return {
        "state": "ok",
        "count": data.count,
        "counters": {"count": WALLET_COUNTERS["count"](data.count)},
    }


def top_games_payload(games: list[TopGame]) -> dict[str, Any]:
    if not games:
        return {"state": "empty", "message": NO_DATA_MESSAGE}
    pct = fixed(0)
    return {
        "state": "ok",
        "games": [
            {
                "game_id": g.game_id,
                "title": g.title,
                "image": f"/{g.game_id}.svg",
                "completion_rate": g.completion_rate,
                "predicted_score": g.predicted_score,
                "completion_pct": pct(g.completion_rate * 100),
                "predicted_pct": pct(g.predicted_score * 100),
            }
            for g in games
        ],
    }
