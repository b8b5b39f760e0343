"""
Settings schema.

Frozen dataclasses that the loader fills from YAML.  Defaults here are the
values used when a key is absent from the file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class InventorySettings:
    """Ledger defaults.

    ``default_reorder_level`` applies to records created lazily by the
    first stock-in or explicitly on product creation.
    """

    default_reorder_level: int = 100
    low_stock_alerts_enabled: bool = True


@dataclass(frozen=True)
class OrderSettings:
    notify_admins_on_new_order: bool = True
    notify_wholesaler_on_update: bool = True


@dataclass(frozen=True)
class NotificationSettings:
    sink: str = "logging"  # logging | sql
    admin_ids: tuple[UUID, ...] = ()


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class OrchestratorSettings:
    max_conflict_retries: int = 3
    retry_backoff_seconds: float = 0.05


@dataclass(frozen=True)
class Settings:
    """Root settings object returned by ``get_active_settings()``."""

    name: str
    database: DatabaseSettings
    inventory: InventorySettings = field(default_factory=InventorySettings)
    orders: OrderSettings = field(default_factory=OrderSettings)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    orchestrator: OrchestratorSettings = field(default_factory=OrchestratorSettings)
