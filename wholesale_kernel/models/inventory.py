"""
Module: wholesale_kernel.models.inventory
Responsibility: Persistence for the per-product stock ledger.  Maps the
    immutable InventoryRecord value to the ``inventory_records`` table.

Architecture position: Kernel > Models.  Inherits from TrackedBase.  The
    product is referenced by id with NO foreign key (the catalog is an
    external collaborator).

Invariants enforced:
    - One record per product (unique ``product_id``).
    - NON_NEGATIVE_STOCK backstop: CHECK constraints on available, reserved
      and reorder level.
    - ``version`` is the mapper's version_id_col: an UPDATE whose version no
      longer matches raises StaleDataError instead of overwriting a
      concurrent write.

Failure modes:
    - IntegrityError on a second record for the same product, or on a
      negative quantity that bypassed the domain transforms.
    - StaleDataError on a lost update (mapped to OptimisticLockError).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wholesale_kernel.db.base import TrackedBase


class InventoryRecordModel(TrackedBase):
    """Maps to: wholesale_kernel.domain.inventory.InventoryRecord."""

    __tablename__ = "inventory_records"

    __table_args__ = (
        CheckConstraint("available_quantity >= 0", name="ck_inventory_available_non_negative"),
        CheckConstraint("reserved_quantity >= 0", name="ck_inventory_reserved_non_negative"),
        CheckConstraint("reorder_level >= 0", name="ck_inventory_reorder_level_non_negative"),
        Index("idx_inventory_low_stock", "available_quantity", "reorder_level"),
    )

    product_id: Mapped[UUID] = mapped_column(nullable=False, unique=True)

    available_quantity: Mapped[int] = mapped_column(nullable=False, default=0)
    reserved_quantity: Mapped[int] = mapped_column(nullable=False, default=0)
    reorder_level: Mapped[int] = mapped_column(nullable=False, default=0)

    last_stock_in_at: Mapped[datetime | None] = mapped_column(nullable=True)
    last_stock_in_quantity: Mapped[int | None] = mapped_column(nullable=True)
    last_stock_in_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    last_stock_out_at: Mapped[datetime | None] = mapped_column(nullable=True)
    last_stock_out_quantity: Mapped[int | None] = mapped_column(nullable=True)
    last_stock_out_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    low_stock_alert_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def to_dto(self):
        from wholesale_kernel.domain.inventory import InventoryRecord, StockMovement

        last_in = None
        if self.last_stock_in_at is not None:
            last_in = StockMovement(
                at=self.last_stock_in_at,
                quantity=self.last_stock_in_quantity,
                reference=self.last_stock_in_reference,
            )
        last_out = None
        if self.last_stock_out_at is not None:
            last_out = StockMovement(
                at=self.last_stock_out_at,
                quantity=self.last_stock_out_quantity,
                reference=self.last_stock_out_reference,
            )

        return InventoryRecord(
            id=self.id,
            product_id=self.product_id,
            available_quantity=self.available_quantity,
            reserved_quantity=self.reserved_quantity,
            reorder_level=self.reorder_level,
            last_stock_in=last_in,
            last_stock_out=last_out,
            low_stock_alert_sent=self.low_stock_alert_sent,
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "InventoryRecordModel":
        model = cls(product_id=dto.product_id, created_by_id=created_by_id)
        if dto.id is not None:
            model.id = dto.id
        model.apply_dto(dto)
        return model

    def apply_dto(self, dto, updated_by_id: UUID | None = None) -> None:
        """Copy ledger state from ``dto`` onto this row."""
        self.available_quantity = dto.available_quantity
        self.reserved_quantity = dto.reserved_quantity
        self.reorder_level = dto.reorder_level
        self.low_stock_alert_sent = dto.low_stock_alert_sent
        self.notes = dto.notes

        if dto.last_stock_in is not None:
            self.last_stock_in_at = dto.last_stock_in.at
            self.last_stock_in_quantity = dto.last_stock_in.quantity
            self.last_stock_in_reference = dto.last_stock_in.reference
        if dto.last_stock_out is not None:
            self.last_stock_out_at = dto.last_stock_out.at
            self.last_stock_out_quantity = dto.last_stock_out.quantity
            self.last_stock_out_reference = dto.last_stock_out.reference

        if updated_by_id is not None:
            self.updated_by_id = updated_by_id

    def __repr__(self) -> str:
        return (
            f"<InventoryRecordModel product={self.product_id} "
            f"available={self.available_quantity} reserved={self.reserved_quantity}>"
        )
