import asyncio
import math

import pytest

from dnstoggle.infrastructure.resilience.debounce import Debouncer, Throttler
from tests.fakes import FakeClock


@pytest.mark.asyncio
async def test_only_last_call_in_window_runs():
    calls = []
    d = Debouncer(0.05)

    for i in range(5):
        d.debounce(calls.append, i)
        await asyncio.sleep(0.01)
    assert calls == []
    assert d.pending is True

    await asyncio.sleep(0.1)
    assert calls == [4]
    assert d.pending is False


@pytest.mark.asyncio
async def test_cancel_prevents_fire():
    calls = []
    d = Debouncer(0.02)
    d.debounce(calls.append, "x")
    d.cancel()
    await asyncio.sleep(0.05)
    assert calls == []


@pytest.mark.asyncio
async def test_execute_now_runs_immediately_and_drops_pending():
    calls = []
    d = Debouncer(0.02)
    d.debounce(calls.append, "later")
    d.execute_now(calls.append, "now")
    await asyncio.sleep(0.05)
    assert calls == ["now"]


@pytest.mark.asyncio
async def test_async_action_is_awaited_via_wait():
    done = []
    d = Debouncer(0)

    async def action(value):
        await asyncio.sleep(0)
        done.append(value)

    d.execute_now(action, "v")
    await d.wait()
    assert done == ["v"]


@pytest.mark.asyncio
async def test_failing_action_is_logged_not_raised(caplog):
    d = Debouncer(0)

    def boom():
        raise RuntimeError("nope")

    d.execute_now(boom)
    assert "debounced action failed" in caplog.text


@pytest.mark.asyncio
async def test_aclose_cancels_pending_and_running():
    started = asyncio.Event()
    d = Debouncer(0)

    async def slow():
        started.set()
        await asyncio.sleep(10)

    d.execute_now(slow)
    await started.wait()
    d.debounce(slow)
    await d.aclose()
    assert d.pending is False


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        Debouncer(-1)
    with pytest.raises(ValueError):
        Throttler(-1)


def test_throttler_drops_calls_inside_interval():
    clock = FakeClock(now=0.0)
    t = Throttler(5.0, clock=clock)

    assert t.try_acquire() is True
    clock.advance(4.9)
    assert t.try_acquire() is False
    clock.advance(0.1)
    assert t.try_acquire() is True

    t.reset()
    assert t.try_acquire() is True


@pytest.mark.asyncio
async def test_throttle_awaits_coroutines_and_reports_whether_it_ran():
    clock = FakeClock(now=0.0)
    t = Throttler(1.0, clock=clock)
    ran = []

    async def action(v):
        ran.append(v)

    assert await t.throttle(action, 1) is True
    assert await t.throttle(action, 2) is False
    clock.advance(1.0)
    assert await t.throttle(action, 3) is True
    assert ran == [1, 3]


@pytest.mark.asyncio
async def test_throttle_rate_is_capped():
    clock = FakeClock(now=0.0)
    t = Throttler(0.3, clock=clock)
    ran = 0

    def action():
        nonlocal ran
        ran += 1

    # hammer it every 10ms for one second
    for _ in range(100):
        await t.throttle(action)
        clock.advance(0.01)

    assert ran <= math.ceil(1.0 / 0.3)
    assert ran >= 3
