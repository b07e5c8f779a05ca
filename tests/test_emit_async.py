"""Awaited dispatch and background scheduling on the EventEmitter."""

from __future__ import annotations

import asyncio
import time

import pytest

from lumino_core.events import EventEmitter, ListenerFailure


def test_emit_async_waits_for_every_listener() -> None:
    emitter = EventEmitter()
    finished: list[str] = []

    async def slow(_payload):
        await asyncio.sleep(0.05)
        finished.append("slow")

    async def fast(_payload):
        await asyncio.sleep(0.01)
        finished.append("fast")

    emitter.on("x", slow)
    emitter.on("x", fast)

    asyncio.run(emitter.emit_async("x", None))

    assert sorted(finished) == ["fast", "slow"]


def test_emit_async_sequential_mode_runs_one_after_another() -> None:
    emitter = EventEmitter()
    trace: list[str] = []

    async def first(_payload):
        trace.append("first:start")
        await asyncio.sleep(0.02)
        trace.append("first:end")

    def second(_payload):
        trace.append("second")

    emitter.on("x", first, priority=1)
    emitter.on("x", second)

    asyncio.run(emitter.emit_async("x"))

    assert trace == ["first:start", "first:end", "second"]


def test_emit_async_concurrent_mode_overlaps_and_keeps_start_order() -> None:
    emitter = EventEmitter(async_mode="concurrent")
    trace: list[str] = []

    async def first(_payload):
        trace.append("first:start")
        await asyncio.sleep(0.05)
        trace.append("first:end")

    async def second(_payload):
        trace.append("second:start")
        await asyncio.sleep(0.01)
        trace.append("second:end")

    emitter.on("x", first, priority=1)
    emitter.on("x", second)

    started = time.perf_counter()
    asyncio.run(emitter.emit_async("x"))
    elapsed = time.perf_counter() - started

    assert trace[:2] == ["first:start", "second:start"]
    assert trace.index("second:end") < trace.index("first:end")
    assert elapsed < 0.2


def test_emit_async_starts_wildcards_first() -> None:
    emitter = EventEmitter()
    trace: list[str] = []

    async def named(payload):
        trace.append(f"named:{payload}")

    async def wildcard(event, payload):
        trace.append(f"wild:{event}:{payload}")

    emitter.on("x", named, priority=50)
    emitter.on_any(wildcard)

    asyncio.run(emitter.emit_async("x", 3))

    assert trace == ["wild:x:3", "named:3"]


def test_emit_async_settles_all_despite_failures() -> None:
    for mode in ("sequential", "concurrent"):
        failures: list[ListenerFailure] = []
        emitter = EventEmitter(async_mode=mode, on_error=failures.append)
        done: list[str] = []

        async def async_broken(_payload):
            await asyncio.sleep(0)
            raise RuntimeError("async failure")

        def sync_broken(_payload):
            raise ValueError("sync failure")

        async def healthy(_payload):
            await asyncio.sleep(0.01)
            done.append("healthy")

        emitter.on("x", async_broken, priority=2)
        emitter.on("x", sync_broken, priority=1)
        emitter.on("x", healthy)

        asyncio.run(emitter.emit_async("x"))

        assert done == ["healthy"], mode
        assert sorted(type(failure.error).__name__ for failure in failures) == [
            "RuntimeError",
            "ValueError",
        ], mode


def test_once_is_ineligible_as_soon_as_emit_async_snapshots() -> None:
    emitter = EventEmitter()
    calls: list[int] = []
    gate = {}

    async def once_listener(payload):
        calls.append(payload)
        await gate["event"].wait()

    emitter.once("x", once_listener)

    async def scenario() -> None:
        gate["event"] = asyncio.Event()
        first = asyncio.ensure_future(emitter.emit_async("x", 1))
        await asyncio.sleep(0)
        await emitter.emit_async("x", 2)
        gate["event"].set()
        await first

    asyncio.run(scenario())

    assert calls == [1]
    assert emitter.listener_count("x") == 0


def test_sync_emit_schedules_coroutines_on_running_loop() -> None:
    failures: list[ListenerFailure] = []
    emitter = EventEmitter(on_error=failures.append)
    done: list[str] = []

    async def background(_payload):
        await asyncio.sleep(0.01)
        done.append("background")

    async def background_broken(_payload):
        await asyncio.sleep(0)
        raise RuntimeError("late failure")

    emitter.on("x", background)
    emitter.on("x", background_broken)

    async def scenario() -> None:
        emitter.emit("x")
        assert done == []
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert done == ["background"]
    assert [str(failure.error) for failure in failures] == ["late failure"]


def test_schedule_background_disabled_drops_coroutines() -> None:
    emitter = EventEmitter(schedule_background=False)
    done: list[str] = []

    async def background(_payload):
        done.append("ran")

    emitter.on("x", background)

    async def scenario() -> None:
        emitter.emit("x")
        await asyncio.sleep(0.01)

    asyncio.run(scenario())

    assert done == []


def test_emit_async_without_listeners_returns() -> None:
    emitter = EventEmitter(async_mode="concurrent")
    assert asyncio.run(emitter.emit_async("nobody")) is None


def test_concurrent_mode_starts_async_listener_before_later_sync_listener() -> None:
    emitter = EventEmitter(async_mode="concurrent")
    trace: list[str] = []

    async def first(_payload):
        trace.append("A:start")
        await asyncio.sleep(0.01)
        trace.append("A:end")

    def second(_payload):
        trace.append("B:start")

    emitter.on("x", first, priority=10)
    emitter.on("x", second)

    asyncio.run(emitter.emit_async("x"))

    assert trace == ["A:start", "B:start", "A:end"]


def test_concurrent_mode_starts_async_wildcard_before_sync_named_listener() -> None:
    emitter = EventEmitter(async_mode="concurrent")
    trace: list[str] = []

    async def wildcard(_event, _payload):
        trace.append("W")
        await asyncio.sleep(0)

    emitter.on_any(wildcard)
    emitter.on("x", lambda _: trace.append("S"))

    asyncio.run(emitter.emit_async("x"))

    assert trace == ["W", "S"]


@pytest.mark.parametrize("mode", ["sequential", "concurrent"])
def test_cancelled_listener_work_is_reported_and_others_still_run(mode: str) -> None:
    failures: list[ListenerFailure] = []
    emitter = EventEmitter(async_mode=mode, on_error=failures.append)
    calls: list[str] = []

    async def scenario() -> None:
        doomed = asyncio.get_running_loop().create_future()
        doomed.cancel()

        async def waits_on_cancelled(_payload):
            await doomed

        emitter.on("x", waits_on_cancelled, priority=1)
        emitter.on("x", lambda _: calls.append("after"))
        await emitter.emit_async("x")

    asyncio.run(scenario())

    assert calls == ["after"]
    assert len(failures) == 1
    assert isinstance(failures[0].error, asyncio.CancelledError)


@pytest.mark.parametrize("mode", ["sequential", "concurrent"])
def test_cancelling_emit_async_itself_propagates(mode: str) -> None:
    failures: list[ListenerFailure] = []
    emitter = EventEmitter(async_mode=mode, on_error=failures.append)

    async def scenario() -> None:
        started = asyncio.Event()

        async def slow(_payload):
            started.set()
            await asyncio.sleep(10)

        emitter.on("x", slow)
        task = asyncio.ensure_future(emitter.emit_async("x"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert failures == []


def test_cancelled_background_work_is_reported() -> None:
    failures: list[ListenerFailure] = []
    emitter = EventEmitter(on_error=failures.append)

    async def scenario() -> None:
        doomed = asyncio.get_running_loop().create_future()
        doomed.cancel()

        async def waits_on_cancelled(_payload):
            await doomed

        emitter.on("x", waits_on_cancelled)
        emitter.emit("x")
        await asyncio.sleep(0.01)

    asyncio.run(scenario())

    assert len(failures) == 1
    assert isinstance(failures[0].error, asyncio.CancelledError)


@pytest.mark.parametrize("mode", ["sequential", "concurrent"])
def test_emit_async_dispatch_ignores_changes_made_by_its_listeners(mode: str) -> None:
    emitter = EventEmitter(async_mode=mode)
    calls: list[str] = []
    handles = {}

    def late(_payload):
        calls.append("late")

    async def first(_payload):
        calls.append("A")
        handles["b"]()
        emitter.on("x", late, priority=100)
        await asyncio.sleep(0)

    async def second(_payload):
        calls.append("B")

    emitter.on("x", first, priority=10)
    handles["b"] = emitter.on("x", second)

    asyncio.run(emitter.emit_async("x"))
    assert calls == ["A", "B"]

    calls.clear()
    asyncio.run(emitter.emit_async("x"))
    assert calls == ["late", "A"]
