"""
TransactionLogService -- append-only persistence of inventory log entries.

Responsibility:
    Builds log entries from a before/after pair of inventory records and
    appends them in the caller's transaction.

Architecture position:
    Kernel > Services -- imperative shell.  Used by the order orchestrator.

Invariants enforced:
    AUDIT_DELTA_CONSISTENCY -- delegated to
        ``domain.transaction_log.build_transaction`` on on-hand totals.
    LOG_IMMUTABILITY -- this service only ever INSERTs; ORM listeners
        reject updates and deletes.
    Every entry takes the next ``seq`` from SequenceService, so readers can
    order the log by insertion even when timestamps tie.
"""

from datetime import datetime
from uuid import UUID

from wholesale_kernel.domain.inventory import InventoryRecord
from wholesale_kernel.domain.transaction_log import (
    InventoryTransaction,
    TransactionContext,
    TransactionType,
    build_transaction,
)
from wholesale_kernel.logging_config import get_logger
from wholesale_kernel.models.inventory_transaction import InventoryTransactionModel
from wholesale_kernel.services.base import BaseService
from wholesale_kernel.services.sequence_service import SequenceService

logger = get_logger("services.transaction_log")


class TransactionLogService(BaseService[InventoryTransactionModel]):

    def record(self, entry: InventoryTransaction) -> InventoryTransaction:
        """Append an already-built entry."""
        seq = SequenceService(self.session).next_transaction_seq()
        self.session.add(InventoryTransactionModel.from_dto(entry, seq))
        self.session.flush()
        logger.info(
            "inventory_transaction_recorded",
            extra={
                "transaction_id": str(entry.id),
                "seq": seq,
                "product_id": str(entry.product_id),
                "transaction_type": entry.transaction_type.value,
                "quantity": entry.quantity,
                "previous_quantity": entry.previous_quantity,
                "new_quantity": entry.new_quantity,
                "order_id": str(entry.order_id) if entry.order_id else None,
            },
        )
        return entry

    def record_movement(
        self,
        *,
        before: InventoryRecord,
        after: InventoryRecord,
        transaction_type: TransactionType,
        quantity: int,
        performed_by: UUID,
        occurred_at: datetime,
        context: TransactionContext | None = None,
    ) -> InventoryTransaction:
        """Log the on-hand move from ``before`` to ``after``."""
        entry = build_transaction(
            product_id=after.product_id,
            transaction_type=transaction_type,
            quantity=quantity,
            previous_quantity=before.total_quantity,
            new_quantity=after.total_quantity,
            performed_by=performed_by,
            occurred_at=occurred_at,
            context=context,
        )
        return self.record(entry)
