"""
Config -> Kernel Bridges.

Functions that turn ``Settings`` into kernel inputs.  They live in
``wholesale_config`` (the producer) because the kernel must NEVER import
``wholesale_config``.

Usage:
    from wholesale_config import get_active_settings
    from wholesale_config.bridges import build_orchestrator, init_database, retrying

    settings = get_active_settings()
    init_database(settings)
    orchestrator = build_orchestrator(settings, get_session_factory())
    result = retrying(settings, lambda: orchestrator.place_order(command))
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from wholesale_config.schema import Settings
from wholesale_kernel.db.engine import init_engine_from_url
from wholesale_kernel.db.immutability import register_immutability_listeners
from wholesale_kernel.domain.clock import Clock
from wholesale_kernel.domain.ports import AdminDirectory, Notifier
from wholesale_kernel.logging_config import configure_logging
from wholesale_kernel.services.catalog import SqlProductLookup, StaticAdminDirectory
from wholesale_kernel.services.notification_service import (
    LoggingNotifier,
    SqlNotificationSink,
)
from wholesale_kernel.services.order_orchestrator import (
    OrchestratorOptions,
    OrderOrchestrator,
    WorkflowResult,
)
from wholesale_kernel.services.retry import retry_on_conflict


def init_database(settings: Settings) -> Engine:
    """Initialize the kernel's engine from ``settings.database``.

    Also registers the ORM immutability listeners.
    """
    db = settings.database
    engine = init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )
    register_immutability_listeners()
    return engine


def init_logging(settings: Settings) -> None:
    configure_logging(level=logging.getLevelName(settings.logging.level))


def orchestrator_options(settings: Settings) -> OrchestratorOptions:
    return OrchestratorOptions(
        default_reorder_level=settings.inventory.default_reorder_level,
        low_stock_alerts_enabled=settings.inventory.low_stock_alerts_enabled,
        notify_admins_on_new_order=settings.orders.notify_admins_on_new_order,
        notify_wholesaler_on_update=settings.orders.notify_wholesaler_on_update,
    )


def build_notifier(
    settings: Settings,
    session_factory: Callable[[], Session],
    clock: Clock | None = None,
) -> Notifier:
    """``sql`` persists notification rows; ``logging`` only logs them."""
    if settings.notifications.sink == "sql":
        return SqlNotificationSink(session_factory, clock=clock)
    return LoggingNotifier()


def build_admin_directory(settings: Settings) -> AdminDirectory:
    return StaticAdminDirectory(settings.notifications.admin_ids)


def build_orchestrator(
    settings: Settings,
    session_factory: Callable[[], Session],
    clock: Clock | None = None,
) -> OrderOrchestrator:
    """Wire an orchestrator with the SQL catalog and the configured sink."""
    return OrderOrchestrator(
        session_factory=session_factory,
        product_lookup=SqlProductLookup(session_factory),
        notifier=build_notifier(settings, session_factory, clock=clock),
        admin_directory=build_admin_directory(settings),
        clock=clock,
        options=orchestrator_options(settings),
    )


def retrying(
    settings: Settings,
    operation: Callable[[], WorkflowResult],
) -> WorkflowResult:
    """Run ``operation`` under the configured conflict-retry policy."""
    return retry_on_conflict(
        operation,
        max_attempts=settings.orchestrator.max_conflict_retries,
        backoff_seconds=settings.orchestrator.retry_backoff_seconds,
    )
