"""Dispatch engine: ordered, failure-isolated delivery of events."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Literal

from .errors import ListenerFailure
from .records import ListenerRecord
from .registry import ListenerRegistry

__all__ = ["EventEmitter", "AsyncMode", "ErrorHook"]

AsyncMode = Literal["sequential", "concurrent"]
ErrorHook = Callable[[ListenerFailure], None]

ASYNC_MODES: tuple[str, ...] = ("sequential", "concurrent")


class EventEmitter(ListenerRegistry):
    """Event emitter with priority ordering and wildcard listeners.

    Wildcard listeners always run before the listeners registered for the
    emitted name; inside each group higher priority runs first and equal
    priorities keep registration order. Every dispatch works on a snapshot
    taken when it starts, so listeners may freely (un)subscribe while it runs.

    A listener that raises never stops its siblings and never reaches the
    caller: the failure is logged and passed to ``on_error`` if one is set.

    Example::

        emitter = EventEmitter()
        emitter.on("order:placed", lambda order: print(order["id"]))
        emitter.emit("order:placed", {"id": 7})
    """

    def __init__(
        self,
        *,
        async_mode: AsyncMode = "sequential",
        schedule_background: bool = True,
        on_error: ErrorHook | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if async_mode not in ASYNC_MODES:
            raise ValueError(f"async_mode must be one of {ASYNC_MODES}, got {async_mode!r}")
        super().__init__(logger=logger or logging.getLogger(__name__))
        self.async_mode = async_mode
        self.schedule_background = schedule_background
        self.on_error = on_error
        self._background: set[asyncio.Future[Any]] = set()

    # ---------- Synchronous dispatch ----------

    def emit(self, event: str, payload: Any = None) -> None:
        """Deliver ``payload`` to the current listeners of ``event``.

        Returns once every listener has been called. Awaitables returned by
        listeners are not waited for; use :meth:`emit_async` for that.
        """
        wildcard, named = self.snapshot(event)
        self._logger.debug(
            "emit %r to %d wildcard + %d listener(s)", event, len(wildcard), len(named)
        )
        for record in wildcard:
            self._dispatch(event, record, (event, payload))
        for record in named:
            self._dispatch(event, record, (payload,))

    def _dispatch(self, event: str, record: ListenerRecord, args: tuple[Any, ...]) -> None:
        try:
            result = record.callback(*args)
        except Exception as exc:
            self._report(event, record, exc)
            return
        if inspect.isawaitable(result):
            self._detach(event, record, result)

    def _detach(self, event: str, record: ListenerRecord, work: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is None or not self.schedule_background:
            if inspect.iscoroutine(work):
                work.close()
                self._logger.warning(
                    "dropped coroutine returned by %s for %r; use emit_async to await it",
                    getattr(record.callback, "__qualname__", record.callback),
                    event,
                )
            return
        task = asyncio.ensure_future(work)
        self._background.add(task)
        task.add_done_callback(lambda done: self._settle_background(event, record, done))

    def _settle_background(self, event: str, record: ListenerRecord, task: asyncio.Future[Any]) -> None:
        self._background.discard(task)
        try:
            task.result()
        except (Exception, asyncio.CancelledError) as exc:
            self._report(event, record, exc)

    # ---------- Awaited dispatch ----------

    async def emit_async(self, event: str, payload: Any = None) -> None:
        """Deliver ``payload`` and wait until every listener's work has settled.

        Listeners start in the same order as with :meth:`emit`. In
        ``sequential`` mode each listener's awaitable finishes before the next
        listener starts; in ``concurrent`` mode each awaitable is started as a
        task before the next listener is called, and all of them are awaited
        together. Listener failures, cancelled listener work included, are
        reported and never raised. Cancelling ``emit_async`` itself propagates.
        """
        wildcard, named = self.snapshot(event)
        self._logger.debug(
            "emit_async %r to %d wildcard + %d listener(s) (%s)",
            event,
            len(wildcard),
            len(named),
            self.async_mode,
        )
        calls = [(record, (event, payload)) for record in wildcard]
        calls.extend((record, (payload,)) for record in named)
        if self.async_mode == "concurrent":
            await self._run_concurrent(event, calls)
            return
        for record, args in calls:
            try:
                result = record.callback(*args)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError as exc:
                if _being_cancelled():
                    raise
                self._report(event, record, exc)
            except Exception as exc:
                self._report(event, record, exc)

    async def _run_concurrent(
        self, event: str, calls: list[tuple[ListenerRecord, tuple[Any, ...]]]
    ) -> None:
        pending: list[tuple[ListenerRecord, asyncio.Future[Any]]] = []
        try:
            for record, args in calls:
                try:
                    result = record.callback(*args)
                except Exception as exc:
                    self._report(event, record, exc)
                    continue
                if inspect.isawaitable(result):
                    pending.append((record, asyncio.ensure_future(result)))
                    # let the task run up to its first await before the next listener starts
                    await asyncio.sleep(0)
        except asyncio.CancelledError:
            for _, task in pending:
                task.cancel()
            raise
        if not pending:
            return
        outcomes = await asyncio.gather(*(task for _, task in pending), return_exceptions=True)
        for (record, _), outcome in zip(pending, outcomes):
            if isinstance(outcome, (Exception, asyncio.CancelledError)):
                self._report(event, record, outcome)

    # ---------- Failure reporting ----------

    def _report(self, event: str, record: ListenerRecord, error: BaseException) -> None:
        failure = ListenerFailure(event, record.callback, error)
        self._logger.error(
            "error in %slistener for %r: %r",
            "wildcard " if record.wildcard else "",
            event,
            error,
            exc_info=(type(error), error, error.__traceback__),
        )
        if self.on_error is None:
            return
        try:
            self.on_error(failure)
        except Exception:
            self._logger.exception("on_error hook failed while reporting %r", event)


def _being_cancelled() -> bool:
    """True when the running task itself has a cancellation request pending."""
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0
