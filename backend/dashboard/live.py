from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from .ranking import RankingEngine
from .schemas import ActivityFilter, LeaderboardAction
from .services.activity import ACTIVITY_COUNTERS, activity_payload, activity_targets
from .services.leaderboard import RECORD_COUNTERS, empty_payload, leaderboard_payload, record_targets
from .settings import Settings
from .timers import AsyncioScheduler, Scheduler
from .tween import CounterBoard
from .upstream import UpstreamClient, UpstreamError

log = logging.getLogger(__name__)


class LiveSession:
    """
    One websocket display. Outgoing messages go through a queue so timer
    callbacks (plain sync functions) can publish without awaiting.
    """

    kind = "live"

    def __init__(self, ws: WebSocket, upstream: UpstreamClient, scheduler: Scheduler | None = None) -> None:
        self.ws = ws
        self.upstream = upstream
        self.scheduler = scheduler or AsyncioScheduler()
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.boards: list[CounterBoard] = []
        self.closed = False

    def push(self, event: str, payload: Any) -> None:
        if self.closed:
            return
        self.queue.put_nowait(
            {"event": event, "payload": payload, "ts": datetime.now(timezone.utc).isoformat()}
        )

    def push_error(self, message: str) -> None:
        self.push("error", {"message": message})

    async def pump(self) -> None:
        while True:
            msg = await self.queue.get()
            try:
                await self.ws.send_json(msg)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                log.debug("%s session send failed, stopping: %s", self.kind, e)
                self.close()
                return

    def _board(self, formatters, **kwargs) -> CounterBoard:
        board = CounterBoard(
            self.scheduler,
            formatters,
            on_tick=lambda name, text: self.push("tick", {"field": name, "text": text}),
            on_settled=lambda snap: self.push("settled", snap),
            **kwargs,
        )
        self.boards.append(board)
        return board

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for b in self.boards:
            b.stop_all()
        log.debug("%s session closed", self.kind)


class LeaderboardSession(LiveSession):
    kind = "leaderboard"

    def __init__(self, ws: WebSocket, upstream: UpstreamClient, settings: Settings, scheduler: Scheduler | None = None) -> None:
        super().__init__(ws, upstream, scheduler)
        self.engine = RankingEngine(limit=settings.leaderboard_size)
        self.board = self._board(
            RECORD_COUNTERS,
            duration_ms=settings.counter_duration_ms,
            mode=settings.leaderboard_counter_mode,
            origin=settings.leaderboard_counter_origin,
        )

    async def load(self) -> None:
        try:
            buckets = await self.upstream.top_scores()
        except UpstreamError:
            self.board.stop_all()
            self.push_error("Error fetching top scores")
            return
        self.engine.replace(buckets)
        self.publish()

    def publish(self) -> None:
        if self.engine.bucket_count == 0:
            self.board.stop_all()
            self.push("empty", empty_payload())
            return
        self.push("view", leaderboard_payload(self.engine))
        selected = self.engine.selected_record()
        if selected is None:
            self.board.stop_all()
        else:
            self.board.set_targets(record_targets(selected))

    async def handle(self, raw: Any) -> None:
        try:
            msg = LeaderboardAction.model_validate(raw)
        except ValidationError:
            self.push_error("Invalid action")
            return

        if msg.action == "refresh":
            await self.load()
            return
        if self.engine.bucket_count == 0:
            self.push("empty", empty_payload())
            return

        if msg.action in ("select_game", "select_rank") and msg.index is None:
            self.push_error(f"{msg.action} needs an index")
            return

        if msg.action == "select_game":
            try:
                self.engine.select_bucket(msg.index)
            except IndexError as e:
                self.push_error(str(e))
                return
        elif msg.action == "select_rank":
            self.engine.select_rank(msg.index)
        elif msg.action == "cycle":
            self.engine.cycle(msg.direction or 1)
        self.publish()


class ActivitySession(LiveSession):
    kind = "activity"

    def __init__(self, ws: WebSocket, upstream: UpstreamClient, settings: Settings, scheduler: Scheduler | None = None) -> None:
        super().__init__(ws, upstream, scheduler)
        self.month = settings.activity_default_month
        self.year = settings.activity_default_year
        # counters restart from zero on every refetch
        self.board = self._board(
            ACTIVITY_COUNTERS,
            duration_ms=settings.counter_duration_ms,
            mode="step",
            origin="zero",
        )

    async def load(self) -> None:
        try:
            data = await self.upstream.monthly_activity(self.month, self.year)
        except UpstreamError:
            self.board.stop_all()
            self.push_error("Error fetching activity data")
            return
        payload = activity_payload(data, self.month, self.year)
        if payload["state"] == "empty":
            self.board.stop_all()
            self.push("empty", payload)
            return
        self.push("view", payload)
        self.board.set_targets(activity_targets(data))

    async def handle(self, raw: Any) -> None:
        try:
            f = ActivityFilter.model_validate(raw)
        except ValidationError:
            self.push_error("Invalid month/year")
            return
        self.month, self.year = f.month, f.year
        await self.load()


class LiveManager:
    def __init__(self) -> None:
        self._sessions: list[LiveSession] = []

    @property
    def count(self) -> int:
        return len(self._sessions)

    async def connect(self, session: LiveSession) -> None:
        await session.ws.accept()
        self._sessions.append(session)
        log.info("%s session opened (%d live)", session.kind, len(self._sessions))

    def disconnect(self, session: LiveSession) -> None:
        session.close()
        self._sessions = [s for s in self._sessions if s is not session]
        log.info("%s session gone (%d live)", session.kind, len(self._sessions))

    def close_all(self) -> None:
        for s in list(self._sessions):
            self.disconnect(s)
