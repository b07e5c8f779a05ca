"""Application root that owns the emitter and wires the shared services."""

from __future__ import annotations

import logging
from typing import Any, Callable

from lumino_core.config import EventSettings
from lumino_core.events import EventBus, EventEmitter
from lumino_core.events.errors import ListenerFailure
from lumino_core.scheduling import DeferredQueue
from lumino_core.services import ServiceContainer, ServiceProvider


class LuminoApp:
    """Creates the event runtime at startup and tears it down at shutdown.

    The emitter, bus and scheduler live in the app's ``container`` and are
    built on first use; the properties below resolve them from there.
    Components receive them by parameter name through :meth:`use` or
    :meth:`defer`. Nothing is stored at module level.
    """

    def __init__(
        self,
        settings: EventSettings | None = None,
        *,
        container: ServiceContainer | None = None,
        logger: logging.Logger | None = None,
        on_error: Callable[[ListenerFailure], None] | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger("lumino_core.app")
        self.settings = settings or EventSettings()
        self.container = container or ServiceContainer()
        self._on_error = on_error
        self._started = False
        self._register_services()

    @property
    def started(self) -> bool:
        return self._started

    @property
    def events(self) -> EventEmitter:
        return self.container.resolve("events", EventEmitter)

    @property
    def bus(self) -> EventBus:
        return self.container.resolve("bus", EventBus)

    @property
    def scheduler(self) -> DeferredQueue:
        return self.container.resolve("scheduler", DeferredQueue)

    def _register_services(self) -> None:
        self._register_service("app", lambda _: self)
        self._register_service("settings", lambda _: self.settings)
        self._register_service("events", self._build_emitter)
        self._register_service("bus", lambda c: EventBus(c.resolve("events", EventEmitter)))
        self._register_service("scheduler", lambda _: DeferredQueue())

    def _register_service(self, name: str, provider: ServiceProvider) -> None:
        try:
            self.container.register(name, provider)
        except ValueError:
            self.logger.debug("service %s already registered, keeping the existing one", name)

    def _build_emitter(self, container: ServiceContainer) -> EventEmitter:
        settings = container.resolve("settings", EventSettings)
        self.logger.debug("creating event emitter (async_mode=%s)", settings.async_mode)
        return EventEmitter(
            async_mode=settings.async_mode,  # type: ignore[arg-type]
            schedule_background=settings.schedule_background,
            on_error=self._on_error,
        )

    def use(self, component: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Call ``component`` now, injecting services it names as parameters."""
        return self.container.inject(component, *args, **kwargs)

    def defer(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue ``func`` to run during :meth:`start`, with services injected."""
        self.scheduler.defer(self.container.inject, func, *args, **kwargs)

    def start(self) -> None:
        if self._started:
            self.logger.warning("application is already started")
            return
        try:
            self.bus.app.emit_init()
            self.scheduler.drain(strict=True)
            self._started = True
            self.bus.app.emit_ready()
        except Exception as exc:
            self.bus.app.emit_error({"error": exc})
            raise

    def shutdown(self) -> None:
        self.events.clear()
        self.scheduler.clear()
        self._started = False
        self.logger.debug("application shut down")

    def status(self) -> dict[str, str]:
        names = sorted(self.events.event_names())
        return {
            "started": str(self._started).lower(),
            "async_mode": self.settings.async_mode,
            "events": ", ".join(names) or "none",
            "wildcard_listeners": str(self.events.wildcard_count()),
            "pending_deferred": str(self.scheduler.pending),
        }

    def __enter__(self) -> "LuminoApp":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()
