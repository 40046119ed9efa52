import asyncio

from dashboard.timers import AsyncioScheduler, CancelToken, ManualScheduler
from dashboard.tween import CountUp


def test_manual_scheduler_fires_in_order_until_cancelled():
    sched = ManualScheduler()
    fired = []
    ta = sched.call_every(10, lambda: fired.append("a"))
    sched.call_every(15, lambda: fired.append("b"))

    assert sched.advance(30) == 5
    # both due at 30: b was queued first
    assert fired == ["a", "b", "a", "b", "a"]

    ta.cancel()
    fired.clear()
    sched.advance(30)
    assert fired == ["b", "b"]
    assert sched.now() == 60


def test_callback_can_cancel_its_own_token():
    sched = ManualScheduler()
    fired = []
    holder: list[CancelToken] = []

    def cb():
        fired.append(sched.now())
        if len(fired) == 3:
            holder[0].cancel()

    holder.append(sched.call_every(5, cb))
    sched.advance(100)
    assert fired == [5, 10, 15]
    assert sched.pending == 0


def test_cancel_token_is_idempotent():
    calls = []
    t = CancelToken()
    t._on_cancel = lambda: calls.append(1)
    t.cancel()
    t.cancel()
    assert t.cancelled
    assert calls == [1]


def test_asyncio_scheduler_runs_a_tween_to_completion():
    async def run():
        sched = AsyncioScheduler()
        done = asyncio.Event()
        c = CountUp(sched, duration_ms=60, on_settle=lambda _t: done.set())
        c.start(150)
        await asyncio.wait_for(done.wait(), timeout=5)
        return c

    c = asyncio.run(run())
    assert c.current == 150
    assert c.text == "150"
    assert not c.running


def test_asyncio_scheduler_cancel_stops_ticks():
    async def run():
        sched = AsyncioScheduler()
        fired = []
        token = sched.call_every(1, lambda: fired.append(1))
        await asyncio.sleep(0.02)
        token.cancel()
        seen = len(fired)
        await asyncio.sleep(0.02)
        return seen, len(fired)

    seen, after = asyncio.run(run())
    assert seen >= 1
    assert after == seen
