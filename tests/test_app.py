"""Application root lifecycle and service wiring."""

from __future__ import annotations

import pytest

from lumino_core import EventSettings, LuminoApp, ServiceContainer
from lumino_core.events import EventBus, EventEmitter


def test_app_resolves_runtime_through_its_container() -> None:
    app = LuminoApp()
    assert app.container.names() == ("app", "bus", "events", "scheduler", "settings")
    assert app.container.get("events") is app.events
    assert app.container.get("bus") is app.bus
    assert app.container.get("scheduler") is app.scheduler
    assert app.container.get("settings") is app.settings
    assert app.container.get("app") is app
    assert isinstance(app.events, EventEmitter)
    assert app.bus.emitter is app.events


def test_container_overrides_replace_runtime_services() -> None:
    container = ServiceContainer()
    shared = EventEmitter()
    container.provide("events", shared)

    app = LuminoApp(container=container)

    assert app.events is shared
    assert app.bus.emitter is shared


def test_use_injects_services_into_components() -> None:
    app = LuminoApp()
    submitted: list[str] = []

    def form_component(bus: EventBus, settings: EventSettings) -> str:
        bus.form.on_submit(lambda payload: submitted.append(payload["formId"]))
        return settings.async_mode

    assert app.use(form_component) == "sequential"
    app.bus.form.emit_submit({"formId": "f1", "action": "save", "values": {}})

    assert submitted == ["f1"]


def test_deferred_components_receive_services_at_start() -> None:
    app = LuminoApp()
    ready: list[object] = []

    def late_component(bus: EventBus) -> None:
        bus.app.on_ready(ready.append)

    app.defer(late_component)
    assert ready == []
    app.start()

    assert ready == [{}]


def test_each_app_owns_its_own_emitter() -> None:
    first = LuminoApp()
    second = LuminoApp()
    calls: list[str] = []
    first.events.on("x", lambda _: calls.append("first"))

    second.events.emit("x")

    assert calls == []
    assert first.events is not second.events


def test_settings_configure_the_emitter() -> None:
    app = LuminoApp(EventSettings(async_mode="concurrent", schedule_background=False))
    assert app.events.async_mode == "concurrent"
    assert app.events.schedule_background is False


def test_start_emits_lifecycle_and_drains_deferred_work() -> None:
    app = LuminoApp()
    trace: list[str] = []
    app.events.on_any(lambda event, _: trace.append(event))
    app.defer(trace.append, "deferred")

    app.start()

    assert trace == ["app:init", "deferred", "app:ready"]
    assert app.started


def test_deferred_registrations_hear_ready() -> None:
    app = LuminoApp()
    ready: list[object] = []
    app.defer(app.bus.app.on_ready, ready.append)

    app.start()

    assert ready == [{}]


def test_start_twice_is_a_warning_not_a_second_init() -> None:
    app = LuminoApp()
    inits: list[object] = []
    app.bus.app.on_init(inits.append)

    app.start()
    app.start()

    assert len(inits) == 1


def test_failed_startup_emits_app_error_and_reraises() -> None:
    app = LuminoApp()
    errors: list[BaseException] = []
    ready: list[object] = []
    app.bus.app.on_error(lambda payload: errors.append(payload["error"]))
    app.bus.app.on_ready(ready.append)

    def broken_registration() -> None:
        app.events.on("x", lambda _: None, priority="urgent")  # type: ignore[arg-type]

    app.defer(broken_registration)
    with pytest.raises(TypeError):
        app.start()

    assert len(errors) == 1
    assert isinstance(errors[0], TypeError)
    assert ready == []
    assert not app.started


def test_shutdown_clears_listeners_and_pending_work() -> None:
    app = LuminoApp()
    app.events.on("x", lambda _: None)
    app.events.on_any(lambda *_: None)
    app.defer(lambda: None)

    app.shutdown()

    assert not app.events.has_listeners("x")
    assert app.scheduler.pending == 0
    assert app.status()["events"] == "none"


def test_context_manager_starts_and_shuts_down() -> None:
    with LuminoApp() as app:
        app.events.on("x", lambda _: None)
        assert app.started
        assert app.status()["events"] == "x"
    assert not app.started
    assert app.events.listener_count("x") == 0


def test_shutdown_keeps_the_same_emitter() -> None:
    app = LuminoApp()
    emitter = app.events

    app.shutdown()

    assert app.events is emitter
