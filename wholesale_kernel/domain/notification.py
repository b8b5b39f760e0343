"""
Notification values and message texts.

Pure builders turn a committed order or inventory state into the
``NotificationMessage`` that a sink delivers to each recipient.  Delivery
itself (rows, sockets, e-mail) is an adapter concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from wholesale_kernel.domain.inventory import InventoryRecord
from wholesale_kernel.domain.order import Order, OrderStatus
from wholesale_kernel.domain.ports import OrderEventKind, ProductSnapshot


class NotificationType(str, Enum):
    LOW_STOCK = "low-stock"
    ORDER_UPDATE = "order-update"
    NEW_ORDER = "new-order"
    ACCOUNT_APPROVED = "account-approved"
    ACCOUNT_REJECTED = "account-rejected"


@dataclass(frozen=True)
class NotificationMessage:
    """What to tell a recipient; the same message may go to many."""

    notification_type: NotificationType
    message: str
    related_order_id: UUID | None = None
    related_product_id: UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Notification:
    """A delivered notification as stored by the SQL sink."""

    id: UUID
    recipient_id: UUID
    notification_type: NotificationType
    message: str
    is_read: bool = False
    related_order_id: UUID | None = None
    related_product_id: UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    read_at: datetime | None = None


_STATUS_TEXT = {
    OrderStatus.PROCESSING: "Your order #{number} is now being processed.",
    OrderStatus.SHIPPED: "Your order #{number} has been shipped!",
    OrderStatus.DELIVERED: (
        "Your order #{number} has been delivered. Thank you for your business!"
    ),
}


def order_event_message(kind: OrderEventKind, order: Order) -> NotificationMessage:
    number = order.order_number
    metadata: dict[str, Any] = {
        "order_number": number,
        "status": order.status.value,
    }

    if kind is OrderEventKind.NEW_ORDER:
        metadata = {
            "order_number": number,
            "total_amount": str(order.total_amount),
            "wholesaler_id": str(order.wholesaler_id),
        }
        return NotificationMessage(
            notification_type=NotificationType.NEW_ORDER,
            message=f"New order #{number} placed. Total: ${order.total_amount:.2f}",
            related_order_id=order.id,
            metadata=metadata,
        )

    if kind is OrderEventKind.APPROVED:
        text = f"Your order #{number} has been approved and is being processed."
        metadata["total_amount"] = str(order.total_amount)
    elif kind is OrderEventKind.REJECTED:
        text = f"Your order #{number} has been rejected. Reason: {order.rejection_reason}"
        metadata["reason"] = order.rejection_reason
    elif kind is OrderEventKind.CANCELLED:
        text = f"Your order #{number} has been cancelled. {order.cancellation_reason or ''}".rstrip()
        metadata["reason"] = order.cancellation_reason
    else:
        template = _STATUS_TEXT.get(order.status)
        if template is None:
            text = f"Your order #{number} status has been updated to {order.status.value}."
        else:
            text = template.format(number=number)

    return NotificationMessage(
        notification_type=NotificationType.ORDER_UPDATE,
        message=text,
        related_order_id=order.id,
        metadata=metadata,
    )


def low_stock_message(
    record: InventoryRecord, product: ProductSnapshot
) -> NotificationMessage:
    return NotificationMessage(
        notification_type=NotificationType.LOW_STOCK,
        message=(
            f"Low stock alert: {product.name} ({product.sku}) is below reorder level. "
            f"Available: {record.available_quantity}, Reorder Level: {record.reorder_level}"
        ),
        related_product_id=record.product_id,
        metadata={
            "product_name": product.name,
            "sku": product.sku,
            "available_quantity": record.available_quantity,
            "reorder_level": record.reorder_level,
        },
    )


def account_status_message(approved: bool, reason: str | None = None) -> NotificationMessage:
    if approved:
        return NotificationMessage(
            notification_type=NotificationType.ACCOUNT_APPROVED,
            message=(
                "Congratulations! Your wholesaler account has been approved. "
                "You can now place orders."
            ),
            metadata={"account_status": "approved"},
        )
    text = (
        "Your wholesaler account application has been reviewed and "
        "unfortunately was not approved at this time."
    )
    if reason:
        text = f"{text} Reason: {reason}"
    return NotificationMessage(
        notification_type=NotificationType.ACCOUNT_REJECTED,
        message=text,
        metadata={"account_status": "rejected"},
    )
