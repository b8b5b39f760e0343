"""
OrderService -- load/store boundary for Order values.

Responsibility:
    Inserts newly placed orders and writes lifecycle changes back.  Orders
    are loaded ``FOR UPDATE`` so two concurrent decisions on the same order
    (approve vs. cancel) serialize; the second sees the first's status and
    fails the transition check.

Architecture position:
    Kernel > Services -- imperative shell.  Used by the order orchestrator.

Invariants enforced:
    RESERVATION_RECONCILIATION -- because the order row is locked for the
        whole workflow, a pending order's reservation is reconciled by at
        most one transition.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from wholesale_kernel.domain.order import Order
from wholesale_kernel.logging_config import get_logger
from wholesale_kernel.models.order import OrderModel
from wholesale_kernel.services.base import BaseService

logger = get_logger("services.order")


class OrderService(BaseService[OrderModel]):

    def __init__(self, session: Session):
        super().__init__(session)
        self._rows: dict[UUID, OrderModel] = {}

    def load_for_update(self, order_id: UUID) -> Order | None:
        row = self.session.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if row is None:
            return None
        self._rows[order_id] = row
        return row.to_dto()

    def insert(self, order: Order, actor_id: UUID) -> Order:
        row = OrderModel.from_dto(order, created_by_id=actor_id)
        self.session.add(row)
        self.session.flush()
        self._rows[order.id] = row
        logger.info(
            "order_inserted",
            extra={
                "order_id": str(order.id),
                "order_number": order.order_number,
                "item_count": order.item_count,
                "total_amount": str(order.total_amount),
            },
        )
        return order

    def save(self, order: Order, actor_id: UUID | None) -> Order:
        row = self._rows.get(order.id)
        if row is None:
            raise ValueError(f"Order {order.id} was not loaded for update in this session")
        previous_status = row.status
        row.apply_dto(order, updated_by_id=actor_id)
        self.session.flush()
        logger.info(
            "order_status_changed",
            extra={
                "order_id": str(order.id),
                "from_status": previous_status,
                "to_status": order.status.value,
            },
        )
        return order
