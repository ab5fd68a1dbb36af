"""
YAML loader for ledger configuration (``ledger_config.loader``).

Responsibility
--------------
Read the packaged ``defaults.yaml`` and an optional override file, merge
them key by key, and validate the result into a ``LedgerConfig``.

Failure modes
-------------
* Missing override file -> ``ConfigurationError``.
* Malformed YAML -> ``ConfigurationError`` wrapping the ``yaml.YAMLError``.
* Unknown keys or values of the wrong type -> ``ConfigurationError``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import EventBusConfig, LedgerConfig
from ledger_kernel.exceptions import ConfigurationError

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_TOP_LEVEL_KEYS = {"currency", "database_url", "log_level", "default_approver", "event_bus"}
_EVENT_BUS_KEYS = {"max_delivery_attempts"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML mapping from disk.

    Raises:
        ConfigurationError: if the file is missing, is not valid YAML, or
            does not contain a mapping at the top level.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {path}", path=str(path)) from None
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Malformed YAML in {path}: {exc}", path=str(path)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping", path=str(path))
    return data


def merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Key-by-key merge; nested mappings are merged, everything else replaced."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_config(data: dict[str, Any], source: str | None = None) -> LedgerConfig:
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}", path=source
        )

    bus_data = data.get("event_bus") or {}
    if not isinstance(bus_data, dict):
        raise ConfigurationError("event_bus must be a mapping", path=source)
    unknown = set(bus_data) - _EVENT_BUS_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unknown event_bus keys: {', '.join(sorted(unknown))}", path=source
        )

    attempts = bus_data.get("max_delivery_attempts", 5)
    if isinstance(attempts, bool) or not isinstance(attempts, int) or attempts < 1:
        raise ConfigurationError(
            "event_bus.max_delivery_attempts must be a positive integer", path=source
        )

    currency = _text(data, "currency", "KSh", source)
    log_level = _text(data, "log_level", "INFO", source).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"Unknown log_level: {log_level}", path=source)

    database_url = data.get("database_url")
    if database_url is not None and (not isinstance(database_url, str) or not database_url):
        raise ConfigurationError("database_url must be a non-empty string or null", path=source)

    return LedgerConfig(
        currency=currency,
        database_url=database_url,
        log_level=log_level,
        default_approver=_text(data, "default_approver", "Finance Manager", source),
        event_bus=EventBusConfig(max_delivery_attempts=attempts),
    )


def load_config(path: Path | str | None = None) -> LedgerConfig:
    """Defaults, overridden by ``path`` when given."""
    data = load_yaml_file(DEFAULTS_PATH)
    source = str(DEFAULTS_PATH)
    if path is not None:
        data = merge(data, load_yaml_file(Path(path)))
        source = str(path)
    return parse_config(data, source=source)


def _text(data: dict[str, Any], key: str, default: str, source: str | None) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{key} must be a non-empty string", path=source)
    return value
