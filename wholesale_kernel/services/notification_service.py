"""
Notification sinks -- ``Notifier`` implementations.

Responsibility:
    ``LoggingNotifier`` emits one structured log line per notification.
    ``SqlNotificationSink`` persists one ``notifications`` row per recipient
    and supports the read-side bookkeeping (mark as read).

Architecture position:
    Kernel > Services -- adapters behind the ``domain.ports.Notifier`` port.
    Both are called by the order orchestrator after its transaction has
    committed, so the SQL sink opens and commits its own session.

Failure modes:
    Any exception propagates to the caller, which logs
    ``notification_dispatch_failed`` and carries on.  Committed workflow
    state is never affected.
"""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from wholesale_kernel.domain.clock import Clock, SystemClock
from wholesale_kernel.domain.inventory import InventoryRecord
from wholesale_kernel.domain.notification import (
    NotificationMessage,
    account_status_message,
    low_stock_message,
    order_event_message,
)
from wholesale_kernel.domain.order import Order
from wholesale_kernel.domain.ports import OrderEventKind, ProductSnapshot
from wholesale_kernel.logging_config import get_logger
from wholesale_kernel.models.notification import NotificationModel

logger = get_logger("services.notification")


class LoggingNotifier:
    """Writes notifications to the structured log instead of delivering them."""

    def _emit(self, message: NotificationMessage, recipients: tuple[UUID, ...]) -> None:
        logger.info(
            "notification_emitted",
            extra={
                "notification_type": message.notification_type.value,
                "notification_message": message.message,
                "recipient_count": len(recipients),
                "recipients": [str(r) for r in recipients],
                "related_order_id": message.related_order_id,
                "related_product_id": message.related_product_id,
            },
        )

    def order_event(
        self, kind: OrderEventKind, order: Order, recipients: tuple[UUID, ...]
    ) -> None:
        self._emit(order_event_message(kind, order), recipients)

    def low_stock(
        self,
        record: InventoryRecord,
        product: ProductSnapshot,
        recipients: tuple[UUID, ...],
    ) -> None:
        self._emit(low_stock_message(record, product), recipients)

    def account_status(
        self, user_id: UUID, approved: bool, reason: str | None = None
    ) -> None:
        self._emit(account_status_message(approved, reason), (user_id,))


class SqlNotificationSink:
    """
    Persists notifications, one row per recipient.

    Contract:
        Each call runs in its own session and commits on success.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    def _store(self, message: NotificationMessage, recipients: tuple[UUID, ...]) -> int:
        if not recipients:
            return 0
        session = self._session_factory()
        try:
            now = self._clock.now()
            for recipient_id in recipients:
                session.add(
                    NotificationModel(
                        recipient_id=recipient_id,
                        notification_type=message.notification_type.value,
                        message=message.message,
                        related_order_id=message.related_order_id,
                        related_product_id=message.related_product_id,
                        payload=dict(message.metadata),
                        created_at=now,
                    )
                )
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        logger.debug(
            "notifications_stored",
            extra={
                "notification_type": message.notification_type.value,
                "recipient_count": len(recipients),
            },
        )
        return len(recipients)

    def order_event(
        self, kind: OrderEventKind, order: Order, recipients: tuple[UUID, ...]
    ) -> None:
        self._store(order_event_message(kind, order), recipients)

    def low_stock(
        self,
        record: InventoryRecord,
        product: ProductSnapshot,
        recipients: tuple[UUID, ...],
    ) -> None:
        self._store(low_stock_message(record, product), recipients)

    def account_status(
        self, user_id: UUID, approved: bool, reason: str | None = None
    ) -> None:
        self._store(account_status_message(approved, reason), (user_id,))

    # -- read-side bookkeeping ------------------------------------------------

    def mark_as_read(self, notification_id: UUID, recipient_id: UUID) -> bool:
        """Mark one of the recipient's notifications read.

        Returns False if no such notification belongs to the recipient.
        Marking an already-read notification keeps its original ``read_at``.
        """
        session = self._session_factory()
        try:
            row = session.execute(
                select(NotificationModel).where(
                    NotificationModel.id == notification_id,
                    NotificationModel.recipient_id == recipient_id,
                )
            ).scalar_one_or_none()
            if row is None:
                return False
            if not row.is_read:
                row.is_read = True
                row.read_at = self._clock.now()
            session.commit()
            return True
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def mark_all_as_read(self, recipient_id: UUID) -> int:
        """Mark every unread notification of the recipient; returns the count."""
        now: datetime = self._clock.now()
        session = self._session_factory()
        try:
            result = session.execute(
                update(NotificationModel)
                .where(
                    NotificationModel.recipient_id == recipient_id,
                    NotificationModel.is_read.is_(False),
                )
                .values(is_read=True, read_at=now)
            )
            session.commit()
            return result.rowcount
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
