"""Command line surface for browsing the event catalog and settings."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Sequence

import yaml

from lumino_core.config import LOG_LEVELS, ConfigError, EventSettings, resolve_config_path
from lumino_core.events import catalog

CLI_VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lumino",
        description="lumino events: inspect the built-in event catalog and runtime settings.",
    )
    parser.add_argument("--version", action="version", version=f"lumino v{CLI_VERSION}")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="logging level (defaults to the configured log_level)",
    )
    parser.add_argument("--config", help="path to a config.toml file")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = False

    catalog_cmd = subparsers.add_parser("catalog", help="list built-in events")
    catalog_cmd.add_argument("--category", help="only show one category")
    catalog_cmd.add_argument(
        "--format",
        default="text",
        choices=["text", "json", "yaml"],
        help="output format",
    )
    catalog_cmd.set_defaults(func=_handle_catalog)

    config_cmd = subparsers.add_parser("config", help="show the resolved settings")
    config_cmd.add_argument(
        "--config",
        default=argparse.SUPPRESS,
        help="path to a config.toml file (same as the global --config)",
    )
    config_cmd.add_argument(
        "--format",
        default="text",
        choices=["text", "json"],
        help="output format",
    )
    config_cmd.set_defaults(func=_handle_config)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = EventSettings.load(args.config)
    except ConfigError as exc:
        print(f"[lumino:config] {exc}")
        return 1
    _configure_logging(args.log_level or settings.log_level)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    return func(args, settings)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _catalog_rows(category: str | None) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for name, events in catalog.CATALOG.items():
        if category and name != category:
            continue
        for event, payload in events.items():
            rows.append(
                {
                    "category": name,
                    "event": event,
                    "attribute": catalog.attribute_name(event),
                    "payload": list(catalog.payload_keys(payload)),
                }
            )
    return rows


def _handle_catalog(args: argparse.Namespace, _: EventSettings) -> int:
    if args.category and args.category not in catalog.CATEGORIES:
        known = ", ".join(catalog.CATEGORIES)
        print(f"[lumino:catalog] unknown category {args.category!r} (known: {known})")
        return 1
    rows = _catalog_rows(args.category)
    if args.format == "json":
        print(json.dumps(rows, indent=2))
        return 0
    if args.format == "yaml":
        print(yaml.safe_dump(rows, sort_keys=False), end="")
        return 0
    for row in rows:
        keys = ", ".join(row["payload"]) or "-"
        print(f"{row['event']:<28} {row['category']}.{row['attribute']:<18} {keys}")
    return 0


def _handle_config(args: argparse.Namespace, settings: EventSettings) -> int:
    values = settings.as_dict()
    values["config_path"] = str(resolve_config_path(args.config))
    if args.format == "json":
        print(json.dumps(values, indent=2))
        return 0
    for key, value in values.items():
        print(f"{key}: {value}")
    return 0
