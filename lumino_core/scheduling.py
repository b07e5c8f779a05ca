"""Deferred work that runs after the current synchronous phase."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable

__all__ = ["DeferredQueue"]


@dataclass(frozen=True)
class _DeferredCall:
    func: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __call__(self) -> Any:
        return self.func(*self.args, **self.kwargs)


class DeferredQueue:
    """FIFO of callables that only run when :meth:`drain` is called.

    Components use it to postpone registration until their owner has finished
    constructing them; the application root drains it during startup.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._queue: deque[_DeferredCall] = deque()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def defer(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        if not callable(func):
            raise TypeError("deferred work must be callable")
        self._queue.append(_DeferredCall(func, args, kwargs))

    def drain(self, *, strict: bool = False) -> int:
        """Run queued work, including work queued while draining.

        A failing callable is logged and the drain continues, unless
        ``strict`` is set: then the error propagates and the rest of the
        queue stays pending.
        """
        ran = 0
        while self._queue:
            call = self._queue.popleft()
            ran += 1
            try:
                call()
            except Exception:
                if strict:
                    raise
                self._logger.exception(
                    "deferred call %s failed",
                    getattr(call.func, "__qualname__", call.func),
                )
        if ran:
            self._logger.debug("drained %d deferred call(s)", ran)
        return ran

    def clear(self) -> None:
        self._queue.clear()
