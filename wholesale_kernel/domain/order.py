"""
Order aggregate (``wholesale_kernel.domain.order``).

Responsibility
--------------
Pure value objects for wholesale orders (``Order``, ``OrderItem``,
``ShippingAddress``), the closed ``OrderStatus`` lifecycle declared as
``ORDER_WORKFLOW``, and pure transition functions that return a new
``Order`` for every legal lifecycle step.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  Inventory side
effects of a transition are applied by the order orchestrator; this module
only marks them (``Transition.touches_inventory``).

Invariants enforced
-------------------
* ORDER_TOTAL_CONSISTENCY -- ``subtotal`` and ``total_amount`` are derived
  properties; there is no stored total that could disagree with the items.
* LEGAL_TRANSITIONS -- ``ORDER_TRANSITIONS`` (derived from
  ``ORDER_WORKFLOW``) is the only source of legal status changes.
  ``check_transition`` returns the typed error for an illegal step
  instead of raising, and every transition function raises that error
  before a new value is built.
* An order always has at least one item.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from wholesale_kernel.domain.workflow import Guard, Transition, Workflow
from wholesale_kernel.exceptions import (
    EmptyOrderError,
    InvalidQuantityError,
    InvalidStateTransitionError,
    MissingReasonError,
)


class OrderStatus(str, Enum):
    """Order lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment states carried on the order (not driven by the kernel)."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


# =========================================================================
# Workflow definition
# =========================================================================

REASON_PROVIDED = Guard(
    name="reason_provided",
    description="A non-blank reason accompanies the transition",
)

CANCELLABLE = Guard(
    name="cancellable",
    description="Order is pending or approved and the actor is admin or owner",
)

ORDER_WORKFLOW = Workflow(
    name="wholesale_order",
    description="Wholesale order lifecycle with stock reservation",
    initial_state=OrderStatus.PENDING.value,
    states=tuple(s.value for s in OrderStatus),
    transitions=(
        Transition("pending", "approved", action="approve", touches_inventory=True),
        Transition("pending", "rejected", action="reject", guard=REASON_PROVIDED, touches_inventory=True),
        Transition("pending", "cancelled", action="cancel", guard=CANCELLABLE, touches_inventory=True),
        Transition("approved", "processing", action="mark_processing"),
        Transition("approved", "shipped", action="mark_shipped"),
        Transition("approved", "cancelled", action="cancel", guard=CANCELLABLE, touches_inventory=True),
        Transition("processing", "shipped", action="mark_shipped"),
        # Declared edge; ``cancel`` also requires ``can_be_cancelled()``.
        Transition("processing", "cancelled", action="cancel", guard=CANCELLABLE),
        Transition("shipped", "delivered", action="mark_delivered"),
    ),
    terminal_states=("rejected", "delivered", "cancelled"),
)

ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    status: frozenset(OrderStatus(s) for s in ORDER_WORKFLOW.targets_from(status.value))
    for status in OrderStatus
}

TERMINAL_ORDER_STATUSES: frozenset[OrderStatus] = frozenset(
    OrderStatus(s) for s in ORDER_WORKFLOW.terminal_states
)

CANCELLABLE_STATUSES: frozenset[OrderStatus] = frozenset({
    OrderStatus.PENDING,
    OrderStatus.APPROVED,
})

MODIFIABLE_STATUSES: frozenset[OrderStatus] = frozenset({OrderStatus.PENDING})

# Targets reachable through a plain status update (no inventory effect).
STATUS_UPDATE_TARGETS: frozenset[OrderStatus] = frozenset({
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
})


# =========================================================================
# Value objects
# =========================================================================


@dataclass(frozen=True)
class ShippingAddress:
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


@dataclass(frozen=True)
class OrderItem:
    """
    One order line with product data snapshotted at placement.

    Contract: ``quantity`` > 0, ``unit_price`` >= 0.  ``subtotal`` is derived.
    """

    product_id: UUID
    product_name: str
    sku: str
    quantity: int
    unit_price: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
            raise InvalidQuantityError("order item", self.quantity)
        if self.unit_price < 0:
            raise ValueError(f"unit_price cannot be negative (got {self.unit_price})")

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Order:
    """
    Immutable snapshot of a wholesale order.

    Contract: ``items`` is non-empty.  ``status`` changes only through the
    transition functions in this module.
    """

    id: UUID
    order_number: str
    wholesaler_id: UUID
    items: tuple[OrderItem, ...]
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    shipping_address: ShippingAddress | None = None
    notes: str | None = None
    created_at: datetime | None = None
    approved_by: UUID | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    fulfilled_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.items:
            raise EmptyOrderError()

    @property
    def total_amount(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def can_be_cancelled(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def can_be_modified(self) -> bool:
        return self.status in MODIFIABLE_STATUSES

    def is_owned_by(self, actor_id: UUID) -> bool:
        return self.wholesaler_id == actor_id


def build_order(
    *,
    order_id: UUID,
    order_number: str,
    wholesaler_id: UUID,
    items: tuple[OrderItem, ...] | list[OrderItem],
    created_at: datetime,
    shipping_address: ShippingAddress | None = None,
    notes: str | None = None,
) -> Order:
    """Create a new order in ``pending``."""
    return Order(
        id=order_id,
        order_number=order_number,
        wholesaler_id=wholesaler_id,
        items=tuple(items),
        status=OrderStatus.PENDING,
        shipping_address=shipping_address,
        notes=notes,
        created_at=created_at,
    )


# =========================================================================
# Transitions
# =========================================================================


def check_transition(
    order: Order, target: OrderStatus
) -> InvalidStateTransitionError | None:
    """Return the error for an illegal status change, or None if legal."""
    if target in ORDER_TRANSITIONS[order.status]:
        return None
    return InvalidStateTransitionError(
        str(order.id), order.status.value, target.value
    )


def _require_transition(order: Order, target: OrderStatus) -> None:
    error = check_transition(order, target)
    if error is not None:
        raise error


def _require_reason(reason: str | None, operation: str) -> str:
    if reason is None or not reason.strip():
        raise MissingReasonError(operation)
    return reason.strip()


def approve(order: Order, admin_id: UUID, at: datetime) -> Order:
    _require_transition(order, OrderStatus.APPROVED)
    return replace(
        order,
        status=OrderStatus.APPROVED,
        approved_by=admin_id,
        approved_at=at,
    )


def reject(order: Order, admin_id: UUID, reason: str, at: datetime) -> Order:
    _require_transition(order, OrderStatus.REJECTED)
    reason = _require_reason(reason, "reject an order")
    return replace(
        order,
        status=OrderStatus.REJECTED,
        approved_by=admin_id,
        approved_at=at,
        rejection_reason=reason,
    )


def mark_processing(order: Order) -> Order:
    _require_transition(order, OrderStatus.PROCESSING)
    return replace(order, status=OrderStatus.PROCESSING)


def mark_shipped(order: Order, at: datetime) -> Order:
    _require_transition(order, OrderStatus.SHIPPED)
    return replace(order, status=OrderStatus.SHIPPED, shipped_at=at)


def mark_delivered(order: Order, at: datetime) -> Order:
    _require_transition(order, OrderStatus.DELIVERED)
    return replace(
        order,
        status=OrderStatus.DELIVERED,
        delivered_at=at,
        fulfilled_at=at,
    )


def cancel(order: Order, reason: str, at: datetime) -> Order:
    """Cancel a pending or approved order.

    The caller decides the inventory effect from the status *before* this
    call: pending releases the reservation, approved restocks.
    """
    if not order.can_be_cancelled():
        raise InvalidStateTransitionError(
            str(order.id), order.status.value, OrderStatus.CANCELLED.value
        )
    _require_transition(order, OrderStatus.CANCELLED)
    reason = _require_reason(reason, "cancel an order")
    return replace(
        order,
        status=OrderStatus.CANCELLED,
        cancellation_reason=reason,
        cancelled_at=at,
    )


def apply_status_update(order: Order, target: OrderStatus, at: datetime) -> Order:
    """Fulfilment progress: processing, shipped or delivered."""
    if target is OrderStatus.PROCESSING:
        return mark_processing(order)
    if target is OrderStatus.SHIPPED:
        return mark_shipped(order, at)
    if target is OrderStatus.DELIVERED:
        return mark_delivered(order, at)
    raise InvalidStateTransitionError(str(order.id), order.status.value, target.value)
