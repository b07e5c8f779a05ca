"""Per-application service registry with keyword injection for components."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

__all__ = ["ServiceContainer", "ServiceProvider"]

ServiceProvider = Callable[["ServiceContainer"], Any]
T = TypeVar("T")

_INJECTABLE = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)


@dataclass(frozen=True)
class _Entry:
    provider: ServiceProvider
    shared: bool


class ServiceContainer:
    """Named services of one :class:`~lumino_core.app.LuminoApp`.

    A provider receives the container, so services may depend on each other
    (the bus provider resolves ``events``). Shared services are built once, on
    first lookup; the others are rebuilt on every lookup. Components receive
    services through :meth:`inject`, which matches parameter names::

        def wire_forms(bus, scheduler):
            bus.form.on_submit(save)

        container.inject(wire_forms)
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._built: dict[str, Any] = {}
        self._resolving: list[str] = []

    def register(self, name: str, provider: ServiceProvider, *, singleton: bool = True) -> None:
        if name in self._entries:
            raise ValueError(f"service {name!r} already registered")
        self._entries[name] = _Entry(provider, singleton)

    def provide(self, name: str, instance: Any) -> None:
        """Register an object that already exists as a shared service."""
        self.register(name, lambda _: instance)
        self._built[name] = instance

    def get(self, name: str) -> Any:
        entry = self._entries.get(name)
        if entry is None:
            raise KeyError(f"service {name!r} is not registered")
        if name in self._built:
            return self._built[name]
        if name in self._resolving:
            chain = " -> ".join([*self._resolving, name])
            raise RuntimeError(f"circular service dependency: {chain}")
        self._resolving.append(name)
        try:
            instance = entry.provider(self)
        finally:
            self._resolving.pop()
        if entry.shared:
            self._built[name] = instance
        return instance

    def resolve(self, name: str, kind: type[T]) -> T:
        """Like :meth:`get`, but check that the service is a ``kind``."""
        instance = self.get(name)
        if not isinstance(instance, kind):
            raise TypeError(
                f"service {name!r} is {type(instance).__name__}, expected {kind.__name__}"
            )
        return instance

    def inject(self, func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Call ``func``, filling parameters named after registered services.

        Arguments passed explicitly win; parameters that are neither passed
        nor registered are left to their defaults.
        """
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            return func(*args, **kwargs)
        bound = signature.bind_partial(*args, **kwargs).arguments
        for name, param in signature.parameters.items():
            if param.kind in _INJECTABLE and name not in bound and name in self._entries:
                kwargs[name] = self.get(name)
        return func(*args, **kwargs)

    def has(self, name: str) -> bool:
        return name in self._entries

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._entries))
