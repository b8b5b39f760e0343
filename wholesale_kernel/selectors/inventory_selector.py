"""
InventorySelector -- read-only queries over inventory records and the
inventory transaction log.

Results are ordered deterministically so paged listings are stable:
records by ``product_id``, log entries newest first with ``id`` as a
tie-breaker.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select

from wholesale_kernel.domain.inventory import InventoryRecord
from wholesale_kernel.domain.transaction_log import InventoryTransaction, TransactionType
from wholesale_kernel.models.inventory import InventoryRecordModel
from wholesale_kernel.models.inventory_transaction import InventoryTransactionModel
from wholesale_kernel.selectors.base import DEFAULT_PAGE_SIZE, BaseSelector


class InventorySelector(BaseSelector[InventoryRecordModel]):

    def get_by_product(self, product_id: UUID) -> InventoryRecord | None:
        row = self.session.execute(
            select(InventoryRecordModel).where(InventoryRecordModel.product_id == product_id)
        ).scalar_one_or_none()
        return row.to_dto() if row is not None else None

    def list_inventory(
        self,
        low_stock_only: bool = False,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[InventoryRecord]:
        """All records, or only those at or below their reorder level."""
        stmt = select(InventoryRecordModel)
        if low_stock_only:
            stmt = stmt.where(
                InventoryRecordModel.available_quantity <= InventoryRecordModel.reorder_level
            )
        stmt = stmt.order_by(InventoryRecordModel.product_id).limit(limit).offset(offset)
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]

    def list_low_stock(self) -> list[InventoryRecord]:
        stmt = (
            select(InventoryRecordModel)
            .where(InventoryRecordModel.available_quantity <= InventoryRecordModel.reorder_level)
            .order_by(InventoryRecordModel.available_quantity, InventoryRecordModel.product_id)
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]

    def count_inventory(self, low_stock_only: bool = False) -> int:
        stmt = select(func.count()).select_from(InventoryRecordModel)
        if low_stock_only:
            stmt = stmt.where(
                InventoryRecordModel.available_quantity <= InventoryRecordModel.reorder_level
            )
        return self.session.execute(stmt).scalar_one()

    def list_transactions(
        self,
        product_id: UUID | None = None,
        transaction_type: TransactionType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[InventoryTransaction]:
        """Log entries filtered by product, type and an inclusive time window.

        Newest first; entries sharing a timestamp come back in reverse
        insertion order.
        """
        stmt = select(InventoryTransactionModel)
        if product_id is not None:
            stmt = stmt.where(InventoryTransactionModel.product_id == product_id)
        if transaction_type is not None:
            stmt = stmt.where(
                InventoryTransactionModel.transaction_type
                == TransactionType(transaction_type).value
            )
        if start is not None:
            stmt = stmt.where(InventoryTransactionModel.occurred_at >= start)
        if end is not None:
            stmt = stmt.where(InventoryTransactionModel.occurred_at <= end)
        stmt = (
            stmt.order_by(
                InventoryTransactionModel.occurred_at.desc(),
                InventoryTransactionModel.seq.desc(),
            )
            .limit(limit)
            .offset(offset)
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]

    def transactions_for_order(self, order_id: UUID) -> list[InventoryTransaction]:
        stmt = (
            select(InventoryTransactionModel)
            .where(InventoryTransactionModel.order_id == order_id)
            .order_by(InventoryTransactionModel.seq)
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]
