"""
InventoryLedgerService -- load/store boundary for InventoryRecord values.

Responsibility:
    Loads inventory records under a row lock, hands the immutable value to
    the caller, and writes the caller's transformed value back onto the
    same row.  The ledger rules themselves live in ``domain.inventory``.

Architecture position:
    Kernel > Services -- imperative shell.  Used by the order orchestrator.

Invariants enforced:
    Per-record atomic read-modify-write -- ``load_for_update`` issues
        ``SELECT ... FOR UPDATE`` so a second transaction touching the same
        product waits until this one commits or rolls back.  The
        ``version`` column backs this up: a write based on a stale read
        raises OptimisticLockError instead of overwriting.
    One record per product -- lazy creation races are resolved with a
        savepoint and a re-read.

Failure modes:
    - OptimisticLockError: the row changed since it was loaded.
    - ValueError: ``save`` called for a product that was not loaded or
      created through this service in the current session.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from wholesale_kernel.domain.inventory import InventoryRecord, new_inventory_record
from wholesale_kernel.exceptions import OptimisticLockError
from wholesale_kernel.logging_config import get_logger
from wholesale_kernel.models.inventory import InventoryRecordModel
from wholesale_kernel.services.base import BaseService

logger = get_logger("services.inventory_ledger")


class InventoryLedgerService(BaseService[InventoryRecordModel]):
    """
    Row-locked access to inventory records.

    Contract:
        Every record returned by ``load_for_update`` / ``get_or_create`` is
        locked until the caller's transaction ends.  ``save`` flushes but
        never commits.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._rows: dict[UUID, InventoryRecordModel] = {}

    def _select_for_update(self, product_id: UUID) -> InventoryRecordModel | None:
        return self.session.execute(
            select(InventoryRecordModel)
            .where(InventoryRecordModel.product_id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def load_for_update(self, product_id: UUID) -> InventoryRecord | None:
        """Lock and return the product's record, or None if never stocked."""
        row = self._select_for_update(product_id)
        if row is None:
            return None
        self._rows[product_id] = row
        return row.to_dto()

    def get_or_create(
        self,
        product_id: UUID,
        reorder_level: int,
        actor_id: UUID,
    ) -> InventoryRecord:
        """Lock the product's record, creating a zero-quantity one if absent."""
        existing = self.load_for_update(product_id)
        if existing is not None:
            return existing

        savepoint = self.session.begin_nested()
        try:
            row = InventoryRecordModel.from_dto(
                new_inventory_record(product_id, reorder_level),
                created_by_id=actor_id,
            )
            self.session.add(row)
            self.session.flush()
            savepoint.commit()
        except IntegrityError:
            logger.debug(
                "inventory_record_create_race_retry",
                extra={"product_id": str(product_id)},
            )
            savepoint.rollback()
            existing = self.load_for_update(product_id)
            if existing is None:
                raise
            return existing

        self._rows[product_id] = row
        logger.info(
            "inventory_record_created",
            extra={
                "product_id": str(product_id),
                "reorder_level": reorder_level,
            },
        )
        return row.to_dto()

    def save(self, record: InventoryRecord, actor_id: UUID) -> InventoryRecord:
        """Write ``record`` onto its locked row and flush."""
        row = self._rows.get(record.product_id)
        if row is None:
            raise ValueError(
                f"Inventory record for product {record.product_id} was not "
                "loaded for update in this session"
            )
        row.apply_dto(record, updated_by_id=actor_id)
        try:
            self.session.flush()
        except StaleDataError as exc:
            raise OptimisticLockError("InventoryRecord", str(record.product_id)) from exc
        return row.to_dto()
