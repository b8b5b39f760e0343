"""
Settings Loader (``wholesale_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen dataclasses of
``wholesale_config.schema``.  Runtime callers go through
``wholesale_config.get_active_settings()`` instead of calling this
directly.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; the only required key without a default is ``database.url``.
* Every parsed object is a frozen dataclass from ``schema.py``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``database.url``  -> ``KeyError``.
* Negative counts / unknown sink / bad UUID  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from uuid import UUID

import yaml

from wholesale_config.schema import (
    DatabaseSettings,
    InventorySettings,
    LoggingSettings,
    NotificationSettings,
    OrchestratorSettings,
    OrderSettings,
    Settings,
)

_SINKS = frozenset({"logging", "sql"})
_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _non_negative(section: str, key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{section}.{key} must be a non-negative integer, got {value!r}")
    return value


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    return DatabaseSettings(
        url=data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=_non_negative("database", "pool_size", data.get("pool_size", 20)),
        max_overflow=_non_negative("database", "max_overflow", data.get("max_overflow", 10)),
        pool_timeout=_non_negative("database", "pool_timeout", data.get("pool_timeout", 30)),
        pool_recycle=_non_negative("database", "pool_recycle", data.get("pool_recycle", 1800)),
    )


def parse_inventory(data: dict[str, Any]) -> InventorySettings:
    return InventorySettings(
        default_reorder_level=_non_negative(
            "inventory", "default_reorder_level", data.get("default_reorder_level", 100)
        ),
        low_stock_alerts_enabled=bool(data.get("low_stock_alerts_enabled", True)),
    )


def parse_orders(data: dict[str, Any]) -> OrderSettings:
    return OrderSettings(
        notify_admins_on_new_order=bool(data.get("notify_admins_on_new_order", True)),
        notify_wholesaler_on_update=bool(data.get("notify_wholesaler_on_update", True)),
    )


def parse_notifications(data: dict[str, Any]) -> NotificationSettings:
    sink = data.get("sink", "logging")
    if sink not in _SINKS:
        raise ValueError(f"notifications.sink must be one of {sorted(_SINKS)}, got {sink!r}")
    admin_ids = tuple(UUID(str(v)) for v in data.get("admin_ids") or ())
    return NotificationSettings(sink=sink, admin_ids=admin_ids)


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    level = str(data.get("level", "INFO")).upper()
    if level not in _LEVELS:
        raise ValueError(f"logging.level must be one of {sorted(_LEVELS)}, got {level!r}")
    return LoggingSettings(level=level)


def parse_orchestrator(data: dict[str, Any]) -> OrchestratorSettings:
    retries = data.get("max_conflict_retries", 3)
    if isinstance(retries, bool) or not isinstance(retries, int) or retries < 1:
        raise ValueError(
            f"orchestrator.max_conflict_retries must be a positive integer, got {retries!r}"
        )
    backoff = float(data.get("retry_backoff_seconds", 0.05))
    if backoff < 0:
        raise ValueError(
            f"orchestrator.retry_backoff_seconds cannot be negative, got {backoff!r}"
        )
    return OrchestratorSettings(max_conflict_retries=retries, retry_backoff_seconds=backoff)


def parse_settings(data: dict[str, Any]) -> Settings:
    """Parse a full settings document."""
    return Settings(
        name=data.get("name", "default"),
        database=parse_database(data["database"]),
        inventory=parse_inventory(data.get("inventory") or {}),
        orders=parse_orders(data.get("orders") or {}),
        notifications=parse_notifications(data.get("notifications") or {}),
        logging=parse_logging(data.get("logging") or {}),
        orchestrator=parse_orchestrator(data.get("orchestrator") or {}),
    )
