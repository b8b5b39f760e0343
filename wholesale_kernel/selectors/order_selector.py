"""
OrderSelector -- read-only order queries (admin and wholesaler views).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select

from wholesale_kernel.domain.order import Order, OrderStatus
from wholesale_kernel.models.order import OrderModel
from wholesale_kernel.selectors.base import DEFAULT_PAGE_SIZE, BaseSelector


class OrderSelector(BaseSelector[OrderModel]):
    """
    Order lookups and listings.

    Listings are newest first (``placed_at`` descending, then
    ``order_number``).  Date filters are inclusive.
    """

    def get(self, order_id: UUID) -> Order | None:
        row = self.session.get(OrderModel, order_id)
        return row.to_dto() if row is not None else None

    def get_by_number(self, order_number: str) -> Order | None:
        row = self.session.execute(
            select(OrderModel).where(OrderModel.order_number == order_number)
        ).scalar_one_or_none()
        return row.to_dto() if row is not None else None

    def _filtered(
        self,
        stmt,
        status: OrderStatus | None,
        wholesaler_id: UUID | None,
        start: datetime | None,
        end: datetime | None,
    ):
        if status is not None:
            stmt = stmt.where(OrderModel.status == OrderStatus(status).value)
        if wholesaler_id is not None:
            stmt = stmt.where(OrderModel.wholesaler_id == wholesaler_id)
        if start is not None:
            stmt = stmt.where(OrderModel.placed_at >= start)
        if end is not None:
            stmt = stmt.where(OrderModel.placed_at <= end)
        return stmt

    def list_orders(
        self,
        status: OrderStatus | None = None,
        wholesaler_id: UUID | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Order]:
        stmt = self._filtered(select(OrderModel), status, wholesaler_id, start, end)
        stmt = (
            stmt.order_by(OrderModel.placed_at.desc(), OrderModel.order_number.desc())
            .limit(limit)
            .offset(offset)
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]

    def count_orders(
        self,
        status: OrderStatus | None = None,
        wholesaler_id: UUID | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(OrderModel), status, wholesaler_id, start, end
        )
        return self.session.execute(stmt).scalar_one()

    def list_pending(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> list[Order]:
        """Orders awaiting an admin decision."""
        return self.list_orders(status=OrderStatus.PENDING, limit=limit, offset=offset)

    def list_for_wholesaler(
        self,
        wholesaler_id: UUID,
        status: OrderStatus | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Order]:
        return self.list_orders(
            status=status, wholesaler_id=wholesaler_id, limit=limit, offset=offset
        )
