"""Built-in event names and their payload shapes, grouped by category."""

from __future__ import annotations

import re
from typing import Any, Mapping, NotRequired, TypedDict

__all__ = [
    "CATALOG",
    "CATEGORIES",
    "all_event_names",
    "attribute_name",
    "category_of",
    "is_empty_payload",
    "payload_keys",
    "payload_type",
]


class Empty(TypedDict):
    pass


# ---------- Form ----------


class FormInit(TypedDict):
    formId: str


class FormValues(TypedDict):
    formId: str
    values: dict[str, Any]


class FormChange(TypedDict):
    formId: str
    field: str
    value: Any
    previousValue: Any


class FormSubmit(TypedDict):
    formId: str
    action: str
    values: dict[str, Any]


class FormSubmitSuccess(TypedDict):
    formId: str
    action: str
    response: Any


class FormSubmitError(TypedDict):
    formId: str
    action: str
    error: Any


class FormValidate(TypedDict):
    formId: str
    valid: bool
    errors: dict[str, list[str]]


class FormDirty(TypedDict):
    formId: str
    dirty: bool


class FormField(TypedDict):
    formId: str
    field: str


class FormFieldError(TypedDict):
    formId: str
    field: str
    errors: list[str]


# ---------- Page ----------


class PageMode(TypedDict):
    pageId: str
    mode: str


class PageModeChange(TypedDict):
    pageId: str
    previousMode: str
    mode: str


class PageBeforeLeave(TypedDict):
    pageId: str
    targetPath: str


class PageRef(TypedDict):
    pageId: str


class PageError(TypedDict):
    pageId: str
    error: Any


# ---------- Navigation ----------


NavigationMove = TypedDict("NavigationMove", {"from": str, "to": str})
NavigationBlocked = TypedDict("NavigationBlocked", {"from": str, "to": str, "reason": str})


class NavigationError(TypedDict):
    path: str
    error: Any


# ---------- API ----------


class ApiRequestStart(TypedDict):
    apiId: str
    url: str
    method: str


class ApiRequestSuccess(TypedDict):
    apiId: str
    url: str
    response: Any
    duration: float


class ApiRequestError(TypedDict):
    apiId: str
    url: str
    error: Any
    duration: float


class ApiCacheKey(TypedDict):
    apiId: str
    key: str


class ApiCacheClear(TypedDict):
    apiId: NotRequired[str]
    key: NotRequired[str]


# ---------- Auth ----------


class AuthLogin(TypedDict):
    userId: str | int


class AuthUnauthorized(TypedDict):
    path: str


# ---------- App ----------


class AppError(TypedDict):
    error: Any


class AppConfigChange(TypedDict):
    key: str
    value: Any


class AppLocaleChange(TypedDict):
    locale: str
    previousLocale: str


# ---------- UI ----------


class UiModal(TypedDict):
    modalId: str


class UiModalClose(TypedDict):
    modalId: str
    result: NotRequired[Any]


class UiNotify(TypedDict):
    message: str
    type: str


class UiConfirmOpen(TypedDict):
    message: str


class UiConfirmResult(TypedDict):
    confirmed: bool


# ---------- Lookup ----------


class LookupOpen(TypedDict):
    formId: str
    field: str
    config: Any


class LookupSearch(TypedDict):
    formId: str
    field: str
    query: str


class LookupResults(TypedDict):
    formId: str
    field: str
    results: list[Any]
    count: int


class LookupSelect(TypedDict):
    formId: str
    field: str
    selected: Any
    displayValue: str


class LookupSelectMultiple(TypedDict):
    formId: str
    field: str
    selected: list[Any]
    displayValues: list[str]


class LookupField(TypedDict):
    formId: str
    field: str


class LookupFailure(TypedDict):
    formId: str
    field: str
    error: Any


CATALOG: dict[str, dict[str, type]] = {
    "form": {
        "form:init": FormInit,
        "form:load": FormValues,
        "form:ready": FormValues,
        "form:change": FormChange,
        "form:submit": FormSubmit,
        "form:submit:success": FormSubmitSuccess,
        "form:submit:error": FormSubmitError,
        "form:validate": FormValidate,
        "form:reset": FormInit,
        "form:dirty": FormDirty,
        "form:field:focus": FormField,
        "form:field:blur": FormField,
        "form:field:error": FormFieldError,
    },
    "page": {
        "page:init": PageMode,
        "page:load": PageMode,
        "page:ready": PageMode,
        "page:modeChange": PageModeChange,
        "page:beforeLeave": PageBeforeLeave,
        "page:leave": PageRef,
        "page:destroy": PageRef,
        "page:error": PageError,
    },
    "navigation": {
        "navigation:start": NavigationMove,
        "navigation:end": NavigationMove,
        "navigation:error": NavigationError,
        "navigation:blocked": NavigationBlocked,
    },
    "api": {
        "api:request:start": ApiRequestStart,
        "api:request:success": ApiRequestSuccess,
        "api:request:error": ApiRequestError,
        "api:cache:hit": ApiCacheKey,
        "api:cache:miss": ApiCacheKey,
        "api:cache:clear": ApiCacheClear,
    },
    "auth": {
        "auth:login": AuthLogin,
        "auth:logout": Empty,
        "auth:token:refresh": Empty,
        "auth:token:expired": Empty,
        "auth:unauthorized": AuthUnauthorized,
    },
    "app": {
        "app:init": Empty,
        "app:ready": Empty,
        "app:error": AppError,
        "app:config:change": AppConfigChange,
        "app:locale:change": AppLocaleChange,
    },
    "ui": {
        "ui:modal:open": UiModal,
        "ui:modal:close": UiModalClose,
        "ui:loader:show": Empty,
        "ui:loader:hide": Empty,
        "ui:notify": UiNotify,
        "ui:confirm:open": UiConfirmOpen,
        "ui:confirm:result": UiConfirmResult,
    },
    "lookup": {
        "lookup:open": LookupOpen,
        "lookup:search": LookupSearch,
        "lookup:results": LookupResults,
        "lookup:select": LookupSelect,
        "lookup:selectMultiple": LookupSelectMultiple,
        "lookup:clear": LookupField,
        "lookup:close": LookupField,
        "lookup:error": LookupFailure,
    },
}

CATEGORIES: tuple[str, ...] = tuple(CATALOG)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def attribute_name(event: str) -> str:
    """Python attribute for ``event`` inside its category namespace.

    ``"form:submit:success"`` -> ``"submit_success"``,
    ``"page:modeChange"`` -> ``"mode_change"``.
    """
    _, _, rest = event.partition(":")
    parts = rest.split(":") if rest else [event]
    return "_".join(_CAMEL_BOUNDARY.sub(r"_\1", part).lower() for part in parts)


def category_of(event: str) -> str | None:
    for category, events in CATALOG.items():
        if event in events:
            return category
    return None


def payload_type(event: str) -> type | None:
    category = category_of(event)
    if category is None:
        return None
    return CATALOG[category][event]


def all_event_names() -> tuple[str, ...]:
    return tuple(name for events in CATALOG.values() for name in events)


def payload_keys(payload: type) -> tuple[str, ...]:
    annotations: Mapping[str, Any] = getattr(payload, "__annotations__", {})
    return tuple(annotations)


def is_empty_payload(event: str) -> bool:
    return payload_type(event) is Empty
