"""
Pure domain layer.

This module contains pure value objects and domain logic with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- Wall-clock time (time is always passed in)
- I/O

All domain objects are immutable and deterministic.
"""

from wholesale_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from wholesale_kernel.domain.commands import (
    ActorRole,
    AdjustInventory,
    ApproveOrder,
    CancelOrder,
    OrderLineRequest,
    PlaceOrder,
    RejectOrder,
    StockIn,
    StockOut,
    UpdateOrderStatus,
    UpdateReorderLevel,
)
from wholesale_kernel.domain.inventory import InventoryRecord, StockMovement
from wholesale_kernel.domain.order import (
    ORDER_TRANSITIONS,
    ORDER_WORKFLOW,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    ShippingAddress,
)
from wholesale_kernel.domain.ports import (
    AdminDirectory,
    Notifier,
    OrderEventKind,
    ProductLookup,
    ProductSnapshot,
)
from wholesale_kernel.domain.transaction_log import (
    InventoryTransaction,
    TransactionContext,
    TransactionType,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ActorRole",
    "AdjustInventory",
    "ApproveOrder",
    "CancelOrder",
    "OrderLineRequest",
    "PlaceOrder",
    "RejectOrder",
    "StockIn",
    "StockOut",
    "UpdateOrderStatus",
    "UpdateReorderLevel",
    "InventoryRecord",
    "StockMovement",
    "ORDER_TRANSITIONS",
    "ORDER_WORKFLOW",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "ShippingAddress",
    "AdminDirectory",
    "Notifier",
    "OrderEventKind",
    "ProductLookup",
    "ProductSnapshot",
    "InventoryTransaction",
    "TransactionContext",
    "TransactionType",
]
