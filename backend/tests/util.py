def score_row(score, by, day=1, **extra) -> dict:
    """Upstream-shaped ScoreRecord."""
    row = {
        "score": score,
        "achievedBy": by,
        "timeTaken": 2.5,
        "scorePerMinute": round(score / 2.5, 2),
        "achievedAt": f"2025-02-{day:02d}T10:00:00.000Z",
        "isValidated": True,
        "cultixReward": 10,
    }
    row.update(extra)
    return row


def game_bucket(game_id: int, title: str, scores: list[dict]) -> dict:
    best = max(scores, key=lambda r: r["score"]) if scores else None
    return {
        "gameId": game_id,
        "gameTitle": title,
        "topValidScore": (
            {
                "score": best["score"],
                "achievedBy": best["achievedBy"],
                "isValidated": True,
                "cultixReward": best["cultixReward"],
            }
            if best
            else None
        ),
        "statistics": {
            "score": {"mean": 100.0, "standardDeviation": 10.0},
            "time": {"mean": 3.25, "standardDeviation": 1.0},
            "scorePerMinute": {"mean": 41.5, "standardDeviation": 4.0},
        },
        "allScores": scores,
    }


def drain_until(ws, event: str, limit: int = 500) -> list[dict]:
    """Receive websocket messages up to and including the first `event`."""
    seen = []
    for _ in range(limit):
        msg = ws.receive_json()
        seen.append(msg)
        if msg["event"] == event:
            return seen
    raise AssertionError(f"no {event!r} event within {limit} messages: {[m['event'] for m in seen]}")
