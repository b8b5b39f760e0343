"""
Inventory transaction records (``wholesale_kernel.domain.transaction_log``).

Responsibility
--------------
Builds immutable ``InventoryTransaction`` values for ledger operations
that have external significance: stock-in, stock-out (direct or order
confirmation), manual adjustment, and restock of a cancelled approved
order (``return``).  Reservation and release are internal and are not
logged.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  Persistence is handled by
``services.transaction_log_service`` in the caller's transaction.

Invariants enforced
-------------------
* AUDIT_DELTA_CONSISTENCY -- ``new_quantity - previous_quantity`` equals
  the signed effect implied by ``type`` and ``quantity``:

  ============  ==================
  type          new - previous
  ============  ==================
  stock-in      +quantity
  return        +quantity
  stock-out     -quantity
  adjustment    +quantity or -quantity
  ============  ==================

  ``previous_quantity`` / ``new_quantity`` are on-hand counts
  (available + reserved), so confirming a reservation is a -quantity move
  even though ``available`` does not change.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from wholesale_kernel.exceptions import (
    InvalidQuantityError,
    TransactionDeltaMismatchError,
)


class TransactionType(str, Enum):
    """Inventory transaction categories."""

    STOCK_IN = "stock-in"
    STOCK_OUT = "stock-out"
    ADJUSTMENT = "adjustment"
    RETURN = "return"


def allowed_deltas(transaction_type: TransactionType, quantity: int) -> frozenset[int]:
    """Signed on-hand moves a transaction of this type may record."""
    if transaction_type in (TransactionType.STOCK_IN, TransactionType.RETURN):
        return frozenset({quantity})
    if transaction_type is TransactionType.STOCK_OUT:
        return frozenset({-quantity})
    return frozenset({quantity, -quantity})


@dataclass(frozen=True)
class TransactionContext:
    """Optional references attached to a log entry."""

    supplier_id: UUID | None = None
    order_id: UUID | None = None
    reference_number: str | None = None
    unit_cost: Decimal | None = None
    notes: str | None = None
    approved_by: UUID | None = None
    approved_at: datetime | None = None


@dataclass(frozen=True)
class InventoryTransaction:
    """One immutable inventory log entry."""

    id: UUID
    product_id: UUID
    transaction_type: TransactionType
    quantity: int
    previous_quantity: int
    new_quantity: int
    performed_by: UUID
    occurred_at: datetime
    supplier_id: UUID | None = None
    order_id: UUID | None = None
    reference_number: str | None = None
    unit_cost: Decimal | None = None
    total_cost: Decimal | None = None
    notes: str | None = None
    approved_by: UUID | None = None
    approved_at: datetime | None = None

    @property
    def delta(self) -> int:
        return self.new_quantity - self.previous_quantity


def build_transaction(
    *,
    product_id: UUID,
    transaction_type: TransactionType,
    quantity: int,
    previous_quantity: int,
    new_quantity: int,
    performed_by: UUID,
    occurred_at: datetime,
    context: TransactionContext | None = None,
) -> InventoryTransaction:
    """Validate and build a log entry.

    Raises:
        InvalidQuantityError: ``quantity`` is not a positive integer.
        TransactionDeltaMismatchError: the on-hand move disagrees with the
            type and quantity.
        ValueError: a required reference is missing.
    """
    if product_id is None:
        raise ValueError("product_id is required")
    if performed_by is None:
        raise ValueError("performed_by is required")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(transaction_type.value, quantity)

    # INVARIANT: AUDIT_DELTA_CONSISTENCY
    if new_quantity - previous_quantity not in allowed_deltas(transaction_type, quantity):
        raise TransactionDeltaMismatchError(
            transaction_type.value, quantity, previous_quantity, new_quantity
        )

    ctx = context or TransactionContext()
    total_cost = ctx.unit_cost * quantity if ctx.unit_cost is not None else None

    return InventoryTransaction(
        id=uuid4(),
        product_id=product_id,
        transaction_type=transaction_type,
        quantity=quantity,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        performed_by=performed_by,
        occurred_at=occurred_at,
        supplier_id=ctx.supplier_id,
        order_id=ctx.order_id,
        reference_number=ctx.reference_number,
        unit_cost=ctx.unit_cost,
        total_cost=total_cost,
        notes=ctx.notes,
        approved_by=ctx.approved_by,
        approved_at=ctx.approved_at,
    )
