"""Typed, category-grouped view over an :class:`EventEmitter`."""

from __future__ import annotations

from typing import Any, Callable, Generic, Mapping, TypeVar

from . import catalog
from .catalog import (
    ApiCacheClear,
    ApiCacheKey,
    ApiRequestError,
    ApiRequestStart,
    ApiRequestSuccess,
    AppConfigChange,
    AppError,
    AppLocaleChange,
    AuthLogin,
    AuthUnauthorized,
    Empty,
    FormChange,
    FormDirty,
    FormField,
    FormFieldError,
    FormInit,
    FormSubmit,
    FormSubmitError,
    FormSubmitSuccess,
    FormValidate,
    FormValues,
    LookupFailure,
    LookupField,
    LookupOpen,
    LookupResults,
    LookupSearch,
    LookupSelect,
    LookupSelectMultiple,
    NavigationBlocked,
    NavigationError,
    NavigationMove,
    PageBeforeLeave,
    PageError,
    PageMode,
    PageModeChange,
    PageRef,
    UiConfirmOpen,
    UiConfirmResult,
    UiModal,
    UiModalClose,
    UiNotify,
)
from .emitter import EventEmitter
from .records import Subscription

__all__ = ["EventBus", "EventCategory", "EventChannel"]

P = TypeVar("P")

# Longest prefixes first so "emit_async_x" is not read as "emit_" + "async_x".
_VERBS: tuple[str, ...] = ("emit_async", "once", "emit", "off", "on")


class EventChannel(Generic[P]):
    """One event name, bound to an emitter, with a fixed payload type."""

    __slots__ = ("_emitter", "name", "_empty")

    def __init__(self, emitter: EventEmitter, name: str, *, empty: bool = False) -> None:
        self._emitter = emitter
        self.name = name
        self._empty = empty

    def on(self, callback: Callable[[P], Any], *, priority: int = 0) -> Subscription:
        return self._emitter.on(self.name, callback, priority=priority)

    def once(self, callback: Callable[[P], Any], *, priority: int = 0) -> Subscription:
        return self._emitter.once(self.name, callback, priority=priority)

    def off(self, callback: Callable[[P], Any] | Subscription | None = None) -> None:
        self._emitter.off(self.name, callback)

    def emit(self, payload: P | None = None) -> None:
        self._emitter.emit(self.name, self._payload(payload))

    async def emit_async(self, payload: P | None = None) -> None:
        await self._emitter.emit_async(self.name, self._payload(payload))

    def _payload(self, payload: P | None) -> Any:
        if payload is None and self._empty:
            return {}
        return payload

    def __repr__(self) -> str:
        return f"<EventChannel {self.name}>"


class EventCategory:
    """Channels for every catalog event of one category.

    Each event is reachable as a channel attribute (``form.submit``) and
    through generated method aliases (``form.on_submit``,
    ``form.emit_submit``, ``form.once_submit``, ``form.off_submit``,
    ``form.emit_async_submit``).
    """

    category: str = ""

    def __init__(self, emitter: EventEmitter) -> None:
        events: Mapping[str, type] = catalog.CATALOG[self.category]
        channels: dict[str, EventChannel[Any]] = {}
        for name, payload in events.items():
            channels[catalog.attribute_name(name)] = EventChannel(
                emitter, name, empty=payload is Empty
            )
        self._channels = channels
        for attribute, channel in channels.items():
            setattr(self, attribute, channel)

    def channels(self) -> dict[str, EventChannel[Any]]:
        return dict(self._channels)

    def __getattr__(self, attribute: str) -> Any:
        channels = self.__dict__.get("_channels", {})
        for verb in _VERBS:
            prefix = verb + "_"
            if attribute.startswith(prefix) and attribute[len(prefix):] in channels:
                return getattr(channels[attribute[len(prefix):]], verb)
        raise AttributeError(
            f"{type(self).__name__!s} has no event attribute {attribute!r}"
        )

    def __dir__(self) -> list[str]:
        generated = [
            f"{verb}_{attribute}" for attribute in self.__dict__.get("_channels", {}) for verb in _VERBS
        ]
        return sorted(set(super().__dir__()) | set(generated))


class FormEvents(EventCategory):
    category = "form"

    init: EventChannel[FormInit]
    load: EventChannel[FormValues]
    ready: EventChannel[FormValues]
    change: EventChannel[FormChange]
    submit: EventChannel[FormSubmit]
    submit_success: EventChannel[FormSubmitSuccess]
    submit_error: EventChannel[FormSubmitError]
    validate: EventChannel[FormValidate]
    reset: EventChannel[FormInit]
    dirty: EventChannel[FormDirty]
    field_focus: EventChannel[FormField]
    field_blur: EventChannel[FormField]
    field_error: EventChannel[FormFieldError]


class PageEvents(EventCategory):
    category = "page"

    init: EventChannel[PageMode]
    load: EventChannel[PageMode]
    ready: EventChannel[PageMode]
    mode_change: EventChannel[PageModeChange]
    before_leave: EventChannel[PageBeforeLeave]
    leave: EventChannel[PageRef]
    destroy: EventChannel[PageRef]
    error: EventChannel[PageError]


class NavigationEvents(EventCategory):
    category = "navigation"

    start: EventChannel[NavigationMove]
    end: EventChannel[NavigationMove]
    error: EventChannel[NavigationError]
    blocked: EventChannel[NavigationBlocked]


class ApiEvents(EventCategory):
    category = "api"

    request_start: EventChannel[ApiRequestStart]
    request_success: EventChannel[ApiRequestSuccess]
    request_error: EventChannel[ApiRequestError]
    cache_hit: EventChannel[ApiCacheKey]
    cache_miss: EventChannel[ApiCacheKey]
    cache_clear: EventChannel[ApiCacheClear]


class AuthEvents(EventCategory):
    category = "auth"

    login: EventChannel[AuthLogin]
    logout: EventChannel[Empty]
    token_refresh: EventChannel[Empty]
    token_expired: EventChannel[Empty]
    unauthorized: EventChannel[AuthUnauthorized]


class AppEvents(EventCategory):
    category = "app"

    init: EventChannel[Empty]
    ready: EventChannel[Empty]
    error: EventChannel[AppError]
    config_change: EventChannel[AppConfigChange]
    locale_change: EventChannel[AppLocaleChange]


class UIEvents(EventCategory):
    category = "ui"

    modal_open: EventChannel[UiModal]
    modal_close: EventChannel[UiModalClose]
    loader_show: EventChannel[Empty]
    loader_hide: EventChannel[Empty]
    notify: EventChannel[UiNotify]
    confirm_open: EventChannel[UiConfirmOpen]
    confirm_result: EventChannel[UiConfirmResult]


class LookupEvents(EventCategory):
    category = "lookup"

    open: EventChannel[LookupOpen]
    search: EventChannel[LookupSearch]
    results: EventChannel[LookupResults]
    select: EventChannel[LookupSelect]
    select_multiple: EventChannel[LookupSelectMultiple]
    clear: EventChannel[LookupField]
    close: EventChannel[LookupField]
    error: EventChannel[LookupFailure]


CATEGORY_TYPES: dict[str, type[EventCategory]] = {
    cls.category: cls
    for cls in (
        FormEvents,
        PageEvents,
        NavigationEvents,
        ApiEvents,
        AuthEvents,
        AppEvents,
        UIEvents,
        LookupEvents,
    )
}


class EventBus:
    """Category namespaces over one emitter.

    The bus only holds a reference to ``emitter``; every call is forwarded
    with the catalog event name filled in.
    """

    def __init__(self, emitter: EventEmitter) -> None:
        self._emitter = emitter
        self.form = FormEvents(emitter)
        self.page = PageEvents(emitter)
        self.navigation = NavigationEvents(emitter)
        self.api = ApiEvents(emitter)
        self.auth = AuthEvents(emitter)
        self.app = AppEvents(emitter)
        self.ui = UIEvents(emitter)
        self.lookup = LookupEvents(emitter)

    @property
    def emitter(self) -> EventEmitter:
        return self._emitter

    def category(self, name: str) -> EventCategory:
        if name not in CATEGORY_TYPES:
            raise KeyError(f"unknown event category {name!r}")
        return getattr(self, name)

    def custom(self, event: str) -> EventChannel[Any]:
        """Untyped channel for an application-defined event name."""
        return EventChannel(self._emitter, event)
