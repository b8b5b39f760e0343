"""
Module: wholesale_kernel.models.inventory_transaction
Responsibility: Append-only persistence for inventory log entries.

Architecture position: Kernel > Models.  Inherits from TrackedBase
    (``created_by_id`` is the performing actor).

Invariants enforced:
    - LOG_IMMUTABILITY: rows are never updated or deleted.  ORM listeners in
      db/immutability.py raise ImmutabilityViolationError on either.
    - ``quantity > 0`` (CHECK constraint).
    - ``seq`` is unique and strictly increasing in insertion order; it is
      drawn from the ``inventory_transaction`` counter by SequenceService.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wholesale_kernel.db.base import TrackedBase


class InventoryTransactionModel(TrackedBase):
    """Maps to: wholesale_kernel.domain.transaction_log.InventoryTransaction."""

    __tablename__ = "inventory_transactions"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_inventory_transactions_quantity_positive"),
        Index("idx_inv_txn_product_time", "product_id", "occurred_at"),
        Index("idx_inv_txn_type", "transaction_type"),
        Index("idx_inv_txn_order", "order_id"),
        Index("idx_inv_txn_time", "occurred_at"),
    )

    seq: Mapped[int] = mapped_column(nullable=False, unique=True)
    product_id: Mapped[UUID] = mapped_column(nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False)
    previous_quantity: Mapped[int] = mapped_column(nullable=False)
    new_quantity: Mapped[int] = mapped_column(nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(nullable=False)

    supplier_id: Mapped[UUID | None] = mapped_column(nullable=True)
    order_id: Mapped[UUID | None] = mapped_column(nullable=True)
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    unit_cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_dto(self):
        from wholesale_kernel.domain.transaction_log import (
            InventoryTransaction,
            TransactionType,
        )

        return InventoryTransaction(
            id=self.id,
            product_id=self.product_id,
            transaction_type=TransactionType(self.transaction_type),
            quantity=self.quantity,
            previous_quantity=self.previous_quantity,
            new_quantity=self.new_quantity,
            performed_by=self.created_by_id,
            occurred_at=self.occurred_at,
            supplier_id=self.supplier_id,
            order_id=self.order_id,
            reference_number=self.reference_number,
            unit_cost=self.unit_cost,
            total_cost=self.total_cost,
            notes=self.notes,
            approved_by=self.approved_by,
            approved_at=self.approved_at,
        )

    @classmethod
    def from_dto(cls, dto, seq: int) -> "InventoryTransactionModel":
        return cls(
            id=dto.id,
            seq=seq,
            product_id=dto.product_id,
            transaction_type=dto.transaction_type.value,
            quantity=dto.quantity,
            previous_quantity=dto.previous_quantity,
            new_quantity=dto.new_quantity,
            occurred_at=dto.occurred_at,
            supplier_id=dto.supplier_id,
            order_id=dto.order_id,
            reference_number=dto.reference_number,
            unit_cost=dto.unit_cost,
            total_cost=dto.total_cost,
            notes=dto.notes,
            approved_by=dto.approved_by,
            approved_at=dto.approved_at,
            created_by_id=dto.performed_by,
        )

    def __repr__(self) -> str:
        return (
            f"<InventoryTransactionModel #{self.seq} {self.transaction_type} "
            f"product={self.product_id} qty={self.quantity}>"
        )
