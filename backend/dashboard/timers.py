from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Protocol

Callback = Callable[[], None]


class CancelToken:
    """
    Returned by every scheduled callback. Whoever holds it must call cancel()
    on teardown; cancelling twice is a no-op.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._on_cancel: Callable[[], None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()
            self._on_cancel = None


class Scheduler(Protocol):
    def now(self) -> float:
        """Milliseconds on the scheduler's clock."""

    def call_every(self, interval_ms: float, callback: Callback) -> CancelToken:
        """Run callback every interval_ms until the returned token is cancelled."""


class AsyncioScheduler:
    """Interval timers on an asyncio event loop (one call_later per tick)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._get_loop().time() * 1000.0

    def call_every(self, interval_ms: float, callback: Callback) -> CancelToken:
        loop = self._get_loop()
        token = CancelToken()
        delay = max(float(interval_ms), 0.0) / 1000.0
        handle: list[asyncio.TimerHandle] = []

        def fire() -> None:
            if token.cancelled:
                return
            callback()
            # callback may have cancelled its own token
            if not token.cancelled:
                schedule()

        def schedule() -> None:
            handle[:] = [loop.call_later(delay, fire)]

        def on_cancel() -> None:
            for h in handle:
                h.cancel()

        token._on_cancel = on_cancel
        schedule()
        return token


class ManualScheduler:
    """
    Virtual clock for tests and offline rendering: nothing fires until
    advance() moves the clock past a timer's due time.
    """

    # float accumulation of interval_ms would otherwise drop the last tick
    EPSILON_MS = 1e-6

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, _ManualTimer]] = []

    def now(self) -> float:
        return self._now

    def call_every(self, interval_ms: float, callback: Callback) -> CancelToken:
        token = CancelToken()
        timer = _ManualTimer(
            interval_ms=max(float(interval_ms), 0.0),
            callback=callback,
            token=token,
            origin=self._now,
        )
        self._push(timer)
        return token

    def _push(self, timer: _ManualTimer) -> None:
        heapq.heappush(self._queue, (timer.next_due(), next(self._seq), timer))

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.token.cancelled)

    def advance(self, ms: float) -> int:
        """Move the clock forward by ms, firing due callbacks in order. Returns fired count."""
        deadline = self._now + float(ms)
        fired = 0
        while self._queue:
            due, _, timer = self._queue[0]
            if timer.token.cancelled:
                heapq.heappop(self._queue)
                continue
            if due > deadline + self.EPSILON_MS:
                break
            heapq.heappop(self._queue)
            self._now = max(self._now, due)
            timer.fired += 1
            timer.callback()
            fired += 1
            if not timer.token.cancelled:
                self._push(timer)
        self._now = max(self._now, deadline)
        return fired


class _ManualTimer:
    __slots__ = ("interval_ms", "callback", "token", "origin", "fired")

    def __init__(self, *, interval_ms: float, callback: Callback, token: CancelToken, origin: float) -> None:
        self.interval_ms = interval_ms
        self.callback = callback
        self.token = token
        self.origin = origin
        self.fired = 0

    def next_due(self) -> float:
        return self.origin + (self.fired + 1) * self.interval_ms
