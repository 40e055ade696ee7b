"""Tests for the timer registry."""

from __future__ import annotations

import asyncio

from grapesight.engine.timers import TimerRegistry


def test_scheduled_callback_fires_and_is_removed():
    async def scenario():
        timers = TimerRegistry()
        fired = []
        timers.schedule(0, fired.append, "a")
        assert timers.pending() == 1
        await asyncio.sleep(0.01)
        return fired, timers.pending()

    fired, pending = asyncio.run(scenario())
    assert fired == ["a"]
    assert pending == 0


def test_cancel_all_prevents_callbacks():
    async def scenario():
        timers = TimerRegistry()
        fired = []
        for i in range(5):
            timers.schedule(0.01, fired.append, i, owner="a" if i % 2 else "b")
        cancelled = timers.cancel_all()
        await asyncio.sleep(0.03)
        return fired, cancelled, len(timers)

    fired, cancelled, remaining = asyncio.run(scenario())
    assert fired == []
    assert cancelled == 5
    assert remaining == 0


def test_cancel_all_by_owner():
    async def scenario():
        timers = TimerRegistry()
        fired = []
        timers.schedule(0.01, fired.append, "keep", owner="gate")
        timers.schedule(0.01, fired.append, "drop", owner="sequencer")
        timers.cancel_all(owner="sequencer")
        pending = timers.pending(owner="gate")
        await asyncio.sleep(0.03)
        return fired, pending

    fired, pending = asyncio.run(scenario())
    assert fired == ["keep"]
    assert pending == 1


def test_sleep_returns_true_when_elapsed():
    async def scenario():
        timers = TimerRegistry()
        result = await timers.sleep(0)
        return result, len(timers)

    assert asyncio.run(scenario()) == (True, 0)


def test_sleep_returns_false_when_cancelled():
    async def scenario():
        timers = TimerRegistry()
        task = asyncio.create_task(timers.sleep(10, owner="reveal"))
        await asyncio.sleep(0)
        assert timers.pending(owner="reveal") == 1
        timers.cancel_all()
        return await task, len(timers)

    assert asyncio.run(scenario()) == (False, 0)


def test_cancel_unknown_id():
    async def scenario():
        timers = TimerRegistry()
        tid = timers.schedule(10, lambda: None)
        return timers.cancel(tid), timers.cancel(tid)

    assert asyncio.run(scenario()) == (True, False)
