"""
Inventory ledger (``wholesale_kernel.domain.inventory``).

Responsibility
--------------
The per-product stock ledger as an immutable value (``InventoryRecord``)
plus pure transforms ``(record, args) -> record'`` for every primitive
stock operation: add, reserve, release, confirm-out, adjust, direct
removal, reorder-level change and low-stock alert bookkeeping.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.  The persistence
boundary (load -> transform -> store) belongs to the order orchestrator;
concurrency safety comes from the store's row lock, not from here.

Invariants enforced
-------------------
* NON_NEGATIVE_STOCK -- ``available_quantity >= 0`` and
  ``reserved_quantity >= 0`` for every record produced by a transform.
* Two-phase reservation accounting -- reserve moves available -> reserved;
  release moves it back; confirm removes it from reserved permanently.
  Available is decremented once, at reservation time.

Failure modes
-------------
Every transform validates first and raises a typed error before building
a new value, so a failed call leaves the input record untouched:

- ``InvalidQuantityError`` -- non-positive quantity, zero adjustment delta,
  negative reorder level.
- ``InsufficientStockError`` -- reserve / remove more than available.
- ``InvalidReleaseError`` / ``InvalidConfirmError`` -- more than reserved.
- ``NegativeStockError`` -- adjustment would leave available < 0.
- ``MissingReasonError`` -- adjustment without notes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from wholesale_kernel.exceptions import (
    InsufficientStockError,
    InvalidConfirmError,
    InvalidQuantityError,
    InvalidReleaseError,
    MissingReasonError,
    NegativeStockError,
)


@dataclass(frozen=True)
class StockMovement:
    """Last-write snapshot of a stock-in or stock-out (not a log)."""

    at: datetime
    quantity: int
    reference: str


@dataclass(frozen=True)
class InventoryRecord:
    """
    Stock position for one product.

    Contract: immutable.  ``id`` is the persistence identity and is None for
    a record that has not been stored yet.
    Guarantees: quantities and reorder level are non-negative at construction.
    """

    product_id: UUID
    available_quantity: int = 0
    reserved_quantity: int = 0
    reorder_level: int = 0
    last_stock_in: StockMovement | None = None
    last_stock_out: StockMovement | None = None
    low_stock_alert_sent: bool = False
    notes: str | None = None
    id: UUID | None = None

    def __post_init__(self) -> None:
        if self.available_quantity < 0:
            raise ValueError(
                f"available_quantity cannot be negative (got {self.available_quantity})"
            )
        if self.reserved_quantity < 0:
            raise ValueError(
                f"reserved_quantity cannot be negative (got {self.reserved_quantity})"
            )
        if self.reorder_level < 0:
            raise ValueError(
                f"reorder_level cannot be negative (got {self.reorder_level})"
            )

    @property
    def total_quantity(self) -> int:
        """True on-hand count: available plus reserved."""
        return self.available_quantity + self.reserved_quantity

    @property
    def is_low_stock(self) -> bool:
        return self.available_quantity <= self.reorder_level

    def has_available_stock(self, quantity: int) -> bool:
        return self.available_quantity >= quantity


def new_inventory_record(product_id: UUID, reorder_level: int) -> InventoryRecord:
    """Zero-quantity record for a product that has never been stocked."""
    if reorder_level < 0:
        raise InvalidQuantityError("set reorder level", reorder_level)
    return InventoryRecord(product_id=product_id, reorder_level=reorder_level)


def _require_positive(operation: str, quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(operation, quantity)


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


def add_stock(
    record: InventoryRecord,
    quantity: int,
    *,
    at: datetime,
    reference: str = "Manual",
) -> InventoryRecord:
    """Stock-in: ``available += quantity``; re-arms the low-stock alert."""
    _require_positive("stock-in", quantity)
    return replace(
        record,
        available_quantity=record.available_quantity + quantity,
        last_stock_in=StockMovement(at=at, quantity=quantity, reference=reference),
        low_stock_alert_sent=False,
    )


def reserve_stock(record: InventoryRecord, quantity: int) -> InventoryRecord:
    """Hold ``quantity`` for a pending order: available -> reserved."""
    _require_positive("reserve", quantity)
    if record.available_quantity < quantity:
        raise InsufficientStockError(
            str(record.product_id), record.available_quantity, quantity
        )
    return replace(
        record,
        available_quantity=record.available_quantity - quantity,
        reserved_quantity=record.reserved_quantity + quantity,
    )


def release_stock(record: InventoryRecord, quantity: int) -> InventoryRecord:
    """Give a reservation back: reserved -> available."""
    _require_positive("release", quantity)
    if record.reserved_quantity < quantity:
        raise InvalidReleaseError(
            str(record.product_id), record.reserved_quantity, quantity
        )
    return replace(
        record,
        available_quantity=record.available_quantity + quantity,
        reserved_quantity=record.reserved_quantity - quantity,
    )


def confirm_stock_out(
    record: InventoryRecord,
    quantity: int,
    *,
    at: datetime,
    reference: str = "Order",
) -> InventoryRecord:
    """Turn a reservation into a permanent deduction.

    Only ``reserved`` changes; ``available`` was already decremented when
    the stock was reserved.
    """
    _require_positive("confirm stock-out", quantity)
    if record.reserved_quantity < quantity:
        raise InvalidConfirmError(
            str(record.product_id), record.reserved_quantity, quantity
        )
    return replace(
        record,
        reserved_quantity=record.reserved_quantity - quantity,
        last_stock_out=StockMovement(at=at, quantity=quantity, reference=reference),
    )


def remove_stock(
    record: InventoryRecord,
    quantity: int,
    *,
    at: datetime,
    reference: str = "Stock-Out",
) -> InventoryRecord:
    """Direct stock-out that bypasses reservation (non-order removal)."""
    _require_positive("stock-out", quantity)
    if not record.has_available_stock(quantity):
        raise InsufficientStockError(
            str(record.product_id), record.available_quantity, quantity
        )
    return replace(
        record,
        available_quantity=record.available_quantity - quantity,
        last_stock_out=StockMovement(at=at, quantity=quantity, reference=reference),
    )


def adjust_quantity(
    record: InventoryRecord,
    delta: int,
    notes: str,
) -> InventoryRecord:
    """Manual correction of ``available`` by a signed delta.

    All-or-nothing: a delta that would make available negative is rejected
    entirely.
    """
    if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
        raise InvalidQuantityError("adjust", delta)
    if not notes or not notes.strip():
        raise MissingReasonError("adjust inventory")
    new_available = record.available_quantity + delta
    if new_available < 0:
        raise NegativeStockError(
            str(record.product_id), record.available_quantity, delta
        )
    return replace(record, available_quantity=new_available, notes=notes.strip())


def set_reorder_level(record: InventoryRecord, reorder_level: int) -> InventoryRecord:
    """Change the reorder threshold and re-arm the low-stock alert."""
    if isinstance(reorder_level, bool) or not isinstance(reorder_level, int) or reorder_level < 0:
        raise InvalidQuantityError("set reorder level", reorder_level)
    return replace(record, reorder_level=reorder_level, low_stock_alert_sent=False)


def mark_low_stock_alert_sent(record: InventoryRecord) -> InventoryRecord:
    """Suppress further low-stock alerts until the next stock-in."""
    return replace(record, low_stock_alert_sent=True)


def needs_low_stock_alert(record: InventoryRecord) -> bool:
    """Low and no alert has gone out since the last replenishment."""
    return record.is_low_stock and not record.low_stock_alert_sent
