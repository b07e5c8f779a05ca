"""Settings for the event runtime, resolved from overrides, env and TOML."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Mapping

import tomllib
from platformdirs import user_config_dir

from .events.errors import EventsError

DEFAULT_APP_NAME = "lumino"
CONFIG_FILE_NAME = "config.toml"
CONFIG_SECTION = "events"

ASYNC_MODES = ("sequential", "concurrent")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_ENV_KEY_MAP: dict[str, str] = {
    "async_mode": "LUMINO_ASYNC_MODE",
    "log_level": "LUMINO_LOG_LEVEL",
    "schedule_background": "LUMINO_SCHEDULE_BACKGROUND",
}
_CONFIG_ENV = "LUMINO_CONFIG"
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

logger = logging.getLogger(__name__)


class ConfigError(EventsError, ValueError):
    """Raised when a setting has an unusable value."""


def default_config_path() -> Path:
    """Return the platform-specific user config file for lumino."""

    base_dir = Path(user_config_dir(DEFAULT_APP_NAME, appauthor=False))
    return base_dir / CONFIG_FILE_NAME


def _load_config_from_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc)
        return {}
    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        return {}
    return section


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class EventSettings:
    async_mode: str = "sequential"
    log_level: str = "WARNING"
    schedule_background: bool = True

    def __post_init__(self) -> None:
        if self.async_mode not in ASYNC_MODES:
            raise ConfigError(
                f"async_mode must be one of {', '.join(ASYNC_MODES)}, got {self.async_mode!r}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )

    @classmethod
    def load(
        cls,
        path: Path | str | None = None,
        *,
        overrides: Mapping[str, Any] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> "EventSettings":
        """Resolve settings: overrides, then env, then the TOML file, then defaults."""

        env = os.environ if env is None else env
        config_path = resolve_config_path(path, env=env)
        layers: list[Mapping[str, Any]] = [
            dict(overrides or {}),
            _env_layer(env),
            _load_config_from_file(config_path),
        ]
        values: dict[str, Any] = {}
        for key in _ENV_KEY_MAP:
            for layer in layers:
                if key in layer and layer[key] not in (None, ""):
                    values[key] = layer[key]
                    break
        if "async_mode" in values:
            values["async_mode"] = str(values["async_mode"]).strip().lower()
        if "log_level" in values:
            values["log_level"] = str(values["log_level"]).strip().upper()
        if "schedule_background" in values:
            values["schedule_background"] = _as_bool(
                "schedule_background", values["schedule_background"]
            )
        return cls(**values)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def resolve_config_path(
    path: Path | str | None = None, *, env: Mapping[str, str] | None = None
) -> Path:
    if path is not None:
        return Path(path).expanduser()
    env = os.environ if env is None else env
    if override := env.get(_CONFIG_ENV):
        return Path(override).expanduser()
    return default_config_path()


def _env_layer(env: Mapping[str, str]) -> dict[str, str]:
    return {key: env[name] for key, name in _ENV_KEY_MAP.items() if env.get(name)}
