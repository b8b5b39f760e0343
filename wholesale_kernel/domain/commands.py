"""
Command DTOs accepted by the order orchestrator.

Authentication and request validation happen outside the kernel; a command
arriving here carries an already-identified actor.  Commands are immutable
and carry only identifiers and scalars.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from wholesale_kernel.domain.order import OrderStatus, ShippingAddress


class ActorRole(str, Enum):
    ADMIN = "admin"
    WHOLESALER = "wholesaler"


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: UUID
    quantity: int


@dataclass(frozen=True)
class PlaceOrder:
    wholesaler_id: UUID
    items: tuple[OrderLineRequest, ...]
    shipping_address: ShippingAddress | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ApproveOrder:
    order_id: UUID
    admin_id: UUID


@dataclass(frozen=True)
class RejectOrder:
    order_id: UUID
    admin_id: UUID
    reason: str


@dataclass(frozen=True)
class CancelOrder:
    order_id: UUID
    actor_id: UUID
    actor_role: ActorRole
    reason: str


@dataclass(frozen=True)
class UpdateOrderStatus:
    """Fulfilment progress: processing, shipped or delivered."""

    order_id: UUID
    target_status: OrderStatus
    actor_id: UUID | None = None


@dataclass(frozen=True)
class StockIn:
    product_id: UUID
    quantity: int
    actor_id: UUID
    supplier_id: UUID | None = None
    unit_cost: Decimal | None = None
    reference_number: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class StockOut:
    """Direct, non-order stock removal."""

    product_id: UUID
    quantity: int
    actor_id: UUID
    reference_number: str | None = None
    order_id: UUID | None = None
    notes: str | None = None


@dataclass(frozen=True)
class AdjustInventory:
    product_id: UUID
    delta: int
    notes: str
    actor_id: UUID


@dataclass(frozen=True)
class UpdateReorderLevel:
    product_id: UUID
    reorder_level: int
    actor_id: UUID
