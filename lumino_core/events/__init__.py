"""In-process event dispatcher: registry, dispatch engine and typed bus."""

from .bus import EventBus, EventCategory, EventChannel
from .catalog import CATALOG, CATEGORIES
from .emitter import EventEmitter
from .errors import EventsError, InvalidPriorityError, ListenerFailure
from .records import ListenerRecord, Subscription
from .registry import ListenerRegistry

__all__ = [
    "CATALOG",
    "CATEGORIES",
    "EventBus",
    "EventCategory",
    "EventChannel",
    "EventEmitter",
    "EventsError",
    "InvalidPriorityError",
    "ListenerFailure",
    "ListenerRecord",
    "ListenerRegistry",
    "Subscription",
]
