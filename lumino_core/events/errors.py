"""Error types raised or reported by the event dispatcher."""

from __future__ import annotations

from typing import Any, Callable


class EventsError(Exception):
    """Base type for dispatcher failures."""


class InvalidPriorityError(EventsError, TypeError):
    """Raised when a listener is registered with a non-integer priority."""


class ListenerFailure(EventsError):
    """A listener raised, or the work it returned failed.

    Instances are built by the emitter and handed to the logger and the
    ``on_error`` hook; they never propagate to the code that emitted.
    """

    def __init__(self, event: str, listener: Callable[..., Any], error: BaseException) -> None:
        name = getattr(listener, "__qualname__", None) or repr(listener)
        super().__init__(f"listener {name} failed for event {event!r}: {error!r}")
        self.event = event
        self.listener = listener
        self.error = error
