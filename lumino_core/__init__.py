"""Core runtime for the lumino event dispatcher."""

from .app import LuminoApp
from .config import ConfigError, EventSettings, default_config_path
from .events import (
    EventBus,
    EventChannel,
    EventEmitter,
    EventsError,
    InvalidPriorityError,
    ListenerFailure,
    Subscription,
)
from .scheduling import DeferredQueue
from .services import ServiceContainer

__all__ = [
    "ConfigError",
    "DeferredQueue",
    "EventBus",
    "EventChannel",
    "EventEmitter",
    "EventSettings",
    "EventsError",
    "InvalidPriorityError",
    "ListenerFailure",
    "LuminoApp",
    "ServiceContainer",
    "Subscription",
    "default_config_path",
]
