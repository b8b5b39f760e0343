"""
Module: wholesale_kernel.models.notification
Responsibility: Rows written by SqlNotificationSink, one per recipient.
Architecture position: Kernel > Models.  Inherits from Base with its own
    ``created_at`` (notifications are system-authored, there is no actor).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from wholesale_kernel.db.base import Base


class NotificationModel(Base):
    """Maps to: wholesale_kernel.domain.notification.Notification."""

    __tablename__ = "notifications"

    __table_args__ = (
        Index("idx_notifications_recipient_time", "recipient_id", "created_at"),
        Index("idx_notifications_recipient_read", "recipient_id", "is_read"),
        Index("idx_notifications_type", "notification_type"),
    )

    recipient_id: Mapped[UUID] = mapped_column(nullable=False)
    notification_type: Mapped[str] = mapped_column(String(30), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    related_order_id: Mapped[UUID | None] = mapped_column(nullable=True)
    related_product_id: Mapped[UUID | None] = mapped_column(nullable=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    read_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_dto(self):
        from wholesale_kernel.domain.notification import (
            Notification,
            NotificationType,
        )

        return Notification(
            id=self.id,
            recipient_id=self.recipient_id,
            notification_type=NotificationType(self.notification_type),
            message=self.message,
            is_read=self.is_read,
            related_order_id=self.related_order_id,
            related_product_id=self.related_product_id,
            metadata=dict(self.payload or {}),
            created_at=self.created_at,
            read_at=self.read_at,
        )

    def __repr__(self) -> str:
        return (
            f"<NotificationModel {self.notification_type} "
            f"to={self.recipient_id} read={self.is_read}>"
        )
