import httpx
import pytest
from fastapi.testclient import TestClient

from dashboard.main import create_app
from dashboard.settings import Settings
from tests.util import game_bucket, score_row

API = "http://metrics.test/api"


def default_routes() -> dict:
    return {
        "/api/activity/top-scores": {
            "message": "ok",
            "data": [
                game_bucket(
                    1,
                    "Snake",
                    [score_row(10, "ana"), score_row(30, "ben"), score_row(30, "cy"), score_row(5, "dee")],
                ),
                game_bucket(2, "Tetris", [score_row(900 - i * 10, f"p{i}", day=1 + i % 28) for i in range(25)]),
                game_bucket(3, "Pong", [score_row(42, "solo")]),
            ],
        },
        "/api/activity/totalMonthlyActivity/2/2025": {
            "totalTime": "1234.50",
            "averageTimePerActivity": "4.10",
            "uniquePlayers": 120,
            "numberOfActivities": 300,
            "numberOfActivitiesPerPlayer": 2.5,
            "averageTimeSpentPerPlayer": "10.29",
            "dailyBreakdown": [
                {"date": "2025-02-01", "totalMinutes": "12.50", "totalActivities": 4},
                {"date": "2025-02-02", "totalMinutes": "7", "totalActivities": 2},
            ],
        },
        "/api/web3-wallets/count": {"count": 1337},
        "/api/activity/top-games": [
            {"gameId": 1, "title": "Snake", "completionRate": 0.734, "predictedScore": 0.5},
            {"gameId": 2, "title": "Tetris", "completionRate": 0.2, "predictedScore": 0.915},
        ],
    }


@pytest.fixture()
def upstream():
    """
    Route table of the fake metrics API. Values are JSON bodies, an int means
    "respond with that status", a str is sent as a raw (non-JSON) body.
    """
    routes = default_routes()
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        body = routes.get(request.url.path, 404)
        if isinstance(body, int):
            return httpx.Response(body, json={"error": "nope"})
        if isinstance(body, str):
            return httpx.Response(200, text=body)
        return httpx.Response(200, json=body)

    routes_obj = _Routes(routes, calls, httpx.MockTransport(handler))
    return routes_obj


class _Routes:
    def __init__(self, routes: dict, calls: list[str], transport: httpx.MockTransport) -> None:
        self.routes = routes
        self.calls = calls
        self.transport = transport

    def __setitem__(self, path: str, body) -> None:
        self.routes[path] = body


@pytest.fixture()
def settings():
    return Settings(
        api_base_url=API,
        log_level="DEBUG",
        counter_duration_ms=30.0,
        leaderboard_counter_mode="step",
    )


@pytest.fixture()
def client(settings, upstream):
    app = create_app(settings, transport=upstream.transport)
    with TestClient(app) as c:
        yield c
