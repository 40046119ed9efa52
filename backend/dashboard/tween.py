from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Literal

from .timers import CancelToken, Scheduler

Formatter = Callable[[float], str]
TweenMode = Literal["step", "spring"]
TweenOrigin = Literal["zero", "current"]

STEP_COUNT = 60
SPRING_TICK_MS = 1000.0 / 60.0


def fixed(digits: int) -> Formatter:
    """Same output as JS Number.toFixed: exact binary value, ties round away from zero."""
    quantum = Decimal(1).scaleb(-digits)

    def fmt(n: float) -> str:
        out = f"{Decimal(n).quantize(quantum, rounding=ROUND_HALF_UP):f}"
        # "-0" / "-0.00" look wrong on a counter
        if out.lstrip("-").strip("0.") == "":
            out = out.lstrip("-")
        return out

    return fmt


def ceil_int(n: float) -> str:
    return str(int(math.ceil(n)))


@dataclass(frozen=True)
class SpringConfig:
    stiffness: float = 50.0
    damping: float = 15.0
    mass: float = 1.0
    rest_delta: float = 0.01
    rest_speed: float = 0.1
    # fraction of |target - start| the value may pass the target by
    overshoot_tolerance: float = 0.05
    max_duration_ms: float = 10_000.0


@dataclass
class TweenState:
    current: float
    target: float
    started_at: float
    duration: float
    start_value: float = 0.0
    ticks: int = 0
    velocity: float = 0.0


class CountUp:
    """
    One animated display value. At most one timer per instance: every start()
    cancels the previous tween before scheduling the next, stop() is the
    teardown hook and must be called when the display goes away.

    mode="step": 60 equal increments spaced duration_ms / 60 apart, never past
    the target, last tick lands exactly on it.
    mode="spring": damped spring integrated at 60 Hz, snaps to the target once
    at rest (duration_ms is ignored, max_duration_ms caps it instead).

    origin="current" continues from whatever value is on screen when the target
    changes; origin="zero" restarts every tween from 0.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        formatter: Formatter = fixed(0),
        duration_ms: float = 2000.0,
        mode: TweenMode = "step",
        origin: TweenOrigin = "current",
        spring: SpringConfig | None = None,
        on_update: Callable[[str], None] | None = None,
        on_settle: Callable[[str], None] | None = None,
    ) -> None:
        if mode not in ("step", "spring"):
            raise ValueError(f"unknown tween mode: {mode!r}")
        if origin not in ("zero", "current"):
            raise ValueError(f"unknown tween origin: {origin!r}")
        self._scheduler = scheduler
        self.formatter = formatter
        self.duration_ms = float(duration_ms)
        self.mode = mode
        self.origin = origin
        self.spring = spring or SpringConfig()
        self.on_update = on_update
        self.on_settle = on_settle

        self.current = 0.0
        self.state: TweenState | None = None
        self._token: CancelToken | None = None
        self.text = self.formatter(self.current)

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def start(self, target: float, duration_ms: float | None = None) -> CountUp:
        self._cancel()
        if duration_ms is not None:
            self.duration_ms = float(duration_ms)

        velocity = 0.0
        if self.origin == "zero":
            self.current = 0.0
        elif self.state is not None and self.mode == "spring":
            # keep momentum when retargeting mid-flight
            velocity = self.state.velocity

        self.state = TweenState(
            current=self.current,
            target=float(target),
            started_at=self._scheduler.now(),
            duration=self.duration_ms,
            start_value=self.current,
            velocity=velocity,
        )

        if self.current == self.state.target and velocity == 0.0:
            self._emit()
            self._settle()
            return self

        if self.mode == "step":
            interval = self.duration_ms / STEP_COUNT
            self._token = self._scheduler.call_every(interval, self._step_tick)
        else:
            self._token = self._scheduler.call_every(SPRING_TICK_MS, self._spring_tick)
        return self

    def stop(self) -> None:
        """Teardown: cancel the in-flight timer, keep the last shown value."""
        self._cancel()

    def _cancel(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None

    def _step_tick(self) -> None:
        st = self.state
        assert st is not None
        st.ticks += 1
        if st.ticks >= STEP_COUNT:
            self.current = st.target
        else:
            increment = (st.target - st.start_value) / STEP_COUNT
            nxt = self.current + increment
            if increment >= 0:
                nxt = min(nxt, st.target)
            else:
                nxt = max(nxt, st.target)
            self.current = nxt
        st.current = self.current
        self._emit()
        if self.current == st.target:
            self._cancel()
            self._settle()

    def _spring_tick(self) -> None:
        st = self.state
        assert st is not None
        cfg = self.spring
        st.ticks += 1
        dt = SPRING_TICK_MS / 1000.0

        displacement = self.current - st.target
        accel = (-cfg.stiffness * displacement - cfg.damping * st.velocity) / cfg.mass
        st.velocity += accel * dt
        pos = self.current + st.velocity * dt

        span = abs(st.target - st.start_value)
        limit = cfg.overshoot_tolerance * span
        direction = 1.0 if st.target >= st.start_value else -1.0
        if (pos - st.target) * direction > limit:
            pos = st.target + direction * limit
            st.velocity = 0.0

        elapsed = st.ticks * SPRING_TICK_MS
        at_rest = abs(st.velocity) < cfg.rest_speed and abs(st.target - pos) < cfg.rest_delta
        if at_rest or elapsed >= cfg.max_duration_ms:
            pos = st.target
            st.velocity = 0.0

        self.current = pos
        st.current = pos
        self._emit()
        if pos == st.target and st.velocity == 0.0:
            self._cancel()
            self._settle()

    def _emit(self) -> None:
        self.text = self.formatter(self.current)
        if self.on_update is not None:
            self.on_update(self.text)

    def _settle(self) -> None:
        if self.on_settle is not None:
            self.on_settle(self.text)


def start(
    scheduler: Scheduler,
    target: float,
    duration_ms: float,
    formatter: Formatter,
    **kwargs,
) -> CountUp:
    return CountUp(scheduler, formatter=formatter, duration_ms=duration_ms, **kwargs).start(target)


class CounterBoard:
    """
    Named CountUps that belong to one display (a page or a websocket session).
    on_tick(name, text) fires for every update, on_settled(snapshot) once all
    counters of the latest retarget have landed.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        formatters: dict[str, Formatter],
        *,
        duration_ms: float = 2000.0,
        mode: TweenMode = "step",
        origin: TweenOrigin = "current",
        spring: SpringConfig | None = None,
        on_tick: Callable[[str, str], None] | None = None,
        on_settled: Callable[[dict[str, str]], None] | None = None,
    ) -> None:
        self.on_tick = on_tick
        self.on_settled = on_settled
        self._pending: set[str] = set()
        self.counters: dict[str, CountUp] = {}
        for name, fmt in formatters.items():
            self.counters[name] = CountUp(
                scheduler,
                formatter=fmt,
                duration_ms=duration_ms,
                mode=mode,
                origin=origin,
                spring=spring,
                on_update=self._updater(name),
                on_settle=self._settler(name),
            )

    def _updater(self, name: str) -> Callable[[str], None]:
        def cb(text: str) -> None:
            if self.on_tick is not None:
                self.on_tick(name, text)

        return cb

    def _settler(self, name: str) -> Callable[[str], None]:
        def cb(_text: str) -> None:
            self._pending.discard(name)
            if not self._pending and self.on_settled is not None:
                self.on_settled(self.snapshot())

        return cb

    def set_targets(self, targets: dict[str, float]) -> None:
        unknown = set(targets) - set(self.counters)
        if unknown:
            raise KeyError(f"unknown counters: {sorted(unknown)}")
        self._pending = set(targets)
        for name, value in targets.items():
            self.counters[name].start(value)

    def snapshot(self) -> dict[str, str]:
        return {name: c.text for name, c in self.counters.items()}

    @property
    def settled(self) -> bool:
        return not any(c.running for c in self.counters.values())

    def stop_all(self) -> None:
        for c in self.counters.values():
            c.stop()
        self._pending.clear()
