"""Listener registry: ordered subscription sets per event name."""

from __future__ import annotations

import bisect
import itertools
import logging
import threading
from typing import Any, Callable

from .errors import InvalidPriorityError
from .records import ListenerRecord, Subscription, sort_key

__all__ = ["ListenerRegistry", "Snapshot"]

Listener = Callable[..., Any]
Snapshot = tuple[tuple[ListenerRecord, ...], tuple[ListenerRecord, ...]]

_EMPTY: tuple[ListenerRecord, ...] = ()


def _describe(callback: Listener) -> str:
    return getattr(callback, "__qualname__", None) or repr(callback)


def _validate(callback: Listener, priority: int) -> None:
    if not callable(callback):
        raise TypeError("callback must be callable")
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise InvalidPriorityError(
            f"priority must be an int, got {type(priority).__name__}"
        )


def _matches(record: ListenerRecord, callback: Listener | None) -> bool:
    if callback is None:
        return True
    return record.callback == callback


class ListenerRegistry:
    """Holds named and wildcard listener records.

    Every collection is an immutable tuple kept in ``(priority desc,
    sequence asc)`` order and replaced wholesale on mutation, so a reader
    holding a tuple never sees a partial update. Writers serialize on a
    re-entrant lock; listeners may therefore subscribe or unsubscribe while a
    dispatch is iterating.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._named: dict[str, tuple[ListenerRecord, ...]] = {}
        self._wildcard: tuple[ListenerRecord, ...] = _EMPTY
        self._sequence = itertools.count(1)

    # ---------- Subscribing ----------

    def on(self, event: str, callback: Listener, *, priority: int = 0) -> Subscription:
        """Register ``callback`` for ``event``; higher priority runs first."""
        return self._add(event, callback, priority=priority, once=False)

    def once(self, event: str, callback: Listener, *, priority: int = 0) -> Subscription:
        """Register ``callback`` for a single delivery of ``event``."""
        return self._add(event, callback, priority=priority, once=True)

    def on_any(self, callback: Listener, *, priority: int = 0) -> Subscription:
        """Register ``callback(event, payload)`` for every emission."""
        return self._add(None, callback, priority=priority, once=False)

    def once_any(self, callback: Listener, *, priority: int = 0) -> Subscription:
        return self._add(None, callback, priority=priority, once=True)

    # ---------- Unsubscribing ----------

    def off(self, event: str, callback: Listener | Subscription | None = None) -> None:
        """Remove listeners of ``event``: those matching ``callback``, or all.

        A :class:`Subscription` removes exactly its own record, wherever it is
        registered (a handle from :meth:`on_any` included).
        """
        if isinstance(callback, Subscription):
            self.remove(callback.record)
            return
        with self._lock:
            records = self._named.get(event)
            if not records:
                return
            kept = tuple(record for record in records if not _matches(record, callback))
            self._store(event, kept)
        removed = len(records) - len(kept)
        if removed:
            self._logger.debug("removed %d listener(s) from %r", removed, event)

    def off_any(self, callback: Listener | Subscription | None = None) -> None:
        """Remove wildcard listeners matching ``callback``, or all of them."""
        if isinstance(callback, Subscription):
            self.remove(callback.record)
            return
        with self._lock:
            records = self._wildcard
            kept = tuple(record for record in records if not _matches(record, callback))
            self._wildcard = kept
        removed = len(records) - len(kept)
        if removed:
            self._logger.debug("removed %d wildcard listener(s)", removed)

    def clear_event(self, event: str) -> None:
        self.off(event)

    def clear(self) -> None:
        """Drop every record, wildcard ones included."""
        with self._lock:
            self._named = {}
            self._wildcard = _EMPTY
        self._logger.debug("cleared all listeners")

    def remove(self, record: ListenerRecord) -> bool:
        """Remove exactly ``record``; ``False`` when it was already gone."""
        with self._lock:
            if record.wildcard:
                if record not in self._wildcard:
                    return False
                self._wildcard = tuple(item for item in self._wildcard if item.id != record.id)
            else:
                records = self._named.get(record.event, _EMPTY)
                if record not in records:
                    return False
                self._store(record.event, tuple(item for item in records if item.id != record.id))
        self._logger.debug("unsubscribed %s from %r", _describe(record.callback), record.event or "*")
        return True

    # ---------- Queries ----------

    def contains(self, record: ListenerRecord) -> bool:
        if record.wildcard:
            return record in self._wildcard
        return record in self._named.get(record.event, _EMPTY)

    def has_listeners(self, event: str) -> bool:
        """True when ``event`` would reach anyone, wildcard listeners included."""
        return bool(self._named.get(event)) or bool(self._wildcard)

    def listener_count(self, event: str) -> int:
        """Count listeners registered for ``event`` itself (wildcards excluded)."""
        return len(self._named.get(event, _EMPTY))

    def wildcard_count(self) -> int:
        return len(self._wildcard)

    def event_names(self) -> frozenset[str]:
        with self._lock:
            return frozenset(name for name, records in self._named.items() if records)

    def listeners(self, event: str) -> tuple[ListenerRecord, ...]:
        """Current named records for ``event`` in dispatch order."""
        return self._named.get(event, _EMPTY)

    # ---------- Dispatch support ----------

    def snapshot(self, event: str) -> Snapshot:
        """Capture ``(wildcard, named)`` records for one dispatch of ``event``.

        Single-fire records in the snapshot are unregistered in the same
        critical section, so no later snapshot can include them again.
        """
        with self._lock:
            wildcard = self._wildcard
            named = self._named.get(event, _EMPTY)
            if any(record.once for record in wildcard):
                self._wildcard = tuple(record for record in wildcard if not record.once)
            if any(record.once for record in named):
                self._store(event, tuple(record for record in named if not record.once))
        return wildcard, named

    # ---------- Internal helpers ----------

    def _add(self, event: str | None, callback: Listener, *, priority: int, once: bool) -> Subscription:
        _validate(callback, priority)
        with self._lock:
            sequence = next(self._sequence)
            record = ListenerRecord(
                id=sequence,
                event=event,
                callback=callback,
                priority=priority,
                once=once,
                sequence=sequence,
            )
            current = self._wildcard if event is None else self._named.get(event, _EMPTY)
            index = bisect.bisect_right(current, sort_key(record), key=sort_key)
            updated = current[:index] + (record,) + current[index:]
            if event is None:
                self._wildcard = updated
            else:
                self._named[event] = updated
        self._logger.debug(
            "subscribed %s to %r (priority=%d, once=%s)",
            _describe(callback),
            event or "*",
            priority,
            once,
        )
        return Subscription(self, record)

    def _store(self, event: str, records: tuple[ListenerRecord, ...]) -> None:
        if records:
            self._named[event] = records
        else:
            self._named.pop(event, None)
