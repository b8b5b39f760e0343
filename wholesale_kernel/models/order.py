"""
Module: wholesale_kernel.models.order
Responsibility: Persistence for orders and their lines.

Architecture position: Kernel > Models.  OrderModel inherits from
    TrackedBase; OrderItemModel from Base (lines are owned by their order
    and written once at placement).

Invariants enforced:
    - ORDER_NUMBER_UNIQUENESS backstop: unique ``order_number``.
    - ``status`` restricted to the OrderStatus values (CHECK constraint).
    - ``total_amount`` is written from the aggregate's derived total and is
      kept only for queries; the domain value never reads it back.
    - Orders are never deleted (db/immutability.py).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wholesale_kernel.db.base import Base, TrackedBase

_STATUS_VALUES = (
    "pending", "approved", "rejected", "processing",
    "shipped", "delivered", "cancelled",
)


class OrderModel(TrackedBase):
    """Maps to: wholesale_kernel.domain.order.Order."""

    __tablename__ = "orders"

    __table_args__ = (
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{s}'" for s in _STATUS_VALUES)),
            name="ck_orders_status",
        ),
        Index("idx_orders_wholesaler_placed", "wholesaler_id", "placed_at"),
        Index("idx_orders_status", "status"),
        Index("idx_orders_placed", "placed_at"),
    )

    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    wholesaler_id: Mapped[UUID] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    placed_at: Mapped[datetime] = mapped_column(nullable=False)

    shipping_street: Mapped[str | None] = mapped_column(String(200), nullable=True)
    shipping_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipping_state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipping_zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    shipping_country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(nullable=True)
    shipped_at: Mapped[datetime | None] = mapped_column(nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(nullable=True)
    fulfilled_at: Mapped[datetime | None] = mapped_column(nullable=True)

    items: Mapped[list["OrderItemModel"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.line_no",
        lazy="selectin",
    )

    def to_dto(self):
        from wholesale_kernel.domain.order import (
            Order,
            OrderStatus,
            PaymentStatus,
            ShippingAddress,
        )

        address = None
        address_fields = (
            self.shipping_street,
            self.shipping_city,
            self.shipping_state,
            self.shipping_zip_code,
            self.shipping_country,
        )
        if any(v is not None for v in address_fields):
            address = ShippingAddress(*address_fields)

        return Order(
            id=self.id,
            order_number=self.order_number,
            wholesaler_id=self.wholesaler_id,
            items=tuple(item.to_dto() for item in self.items),
            status=OrderStatus(self.status),
            payment_status=PaymentStatus(self.payment_status),
            shipping_address=address,
            notes=self.notes,
            created_at=self.placed_at,
            approved_by=self.approved_by,
            approved_at=self.approved_at,
            rejection_reason=self.rejection_reason,
            cancellation_reason=self.cancellation_reason,
            cancelled_at=self.cancelled_at,
            shipped_at=self.shipped_at,
            delivered_at=self.delivered_at,
            fulfilled_at=self.fulfilled_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "OrderModel":
        address = dto.shipping_address
        model = cls(
            id=dto.id,
            order_number=dto.order_number,
            wholesaler_id=dto.wholesaler_id,
            placed_at=dto.created_at,
            shipping_street=address.street if address else None,
            shipping_city=address.city if address else None,
            shipping_state=address.state if address else None,
            shipping_zip_code=address.zip_code if address else None,
            shipping_country=address.country if address else None,
            notes=dto.notes,
            created_by_id=created_by_id,
            items=[
                OrderItemModel.from_dto(item, line_no)
                for line_no, item in enumerate(dto.items, start=1)
            ],
        )
        model.apply_dto(dto)
        return model

    def apply_dto(self, dto, updated_by_id: UUID | None = None) -> None:
        """Copy lifecycle state from ``dto``.  Lines are never rewritten."""
        self.status = dto.status.value
        self.payment_status = dto.payment_status.value
        self.total_amount = dto.total_amount
        self.approved_by = dto.approved_by
        self.approved_at = dto.approved_at
        self.rejection_reason = dto.rejection_reason
        self.cancellation_reason = dto.cancellation_reason
        self.cancelled_at = dto.cancelled_at
        self.shipped_at = dto.shipped_at
        self.delivered_at = dto.delivered_at
        self.fulfilled_at = dto.fulfilled_at
        if updated_by_id is not None:
            self.updated_by_id = updated_by_id

    def __repr__(self) -> str:
        return f"<OrderModel {self.order_number} status={self.status}>"


class OrderItemModel(Base):
    """Maps to: wholesale_kernel.domain.order.OrderItem."""

    __tablename__ = "order_items"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_order_items_unit_price_non_negative"),
        Index("idx_order_items_order", "order_id"),
        Index("idx_order_items_product", "product_id"),
    )

    order_id: Mapped[UUID] = mapped_column(ForeignKey("orders.id"), nullable=False)
    line_no: Mapped[int] = mapped_column(nullable=False)
    product_id: Mapped[UUID] = mapped_column(nullable=False)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(nullable=False)

    order: Mapped[OrderModel] = relationship(back_populates="items")

    def to_dto(self):
        from wholesale_kernel.domain.order import OrderItem

        return OrderItem(
            product_id=self.product_id,
            product_name=self.product_name,
            sku=self.sku,
            quantity=self.quantity,
            unit_price=self.unit_price,
        )

    @classmethod
    def from_dto(cls, dto, line_no: int) -> "OrderItemModel":
        return cls(
            line_no=line_no,
            product_id=dto.product_id,
            product_name=dto.product_name,
            sku=dto.sku,
            quantity=dto.quantity,
            unit_price=dto.unit_price,
            subtotal=dto.subtotal,
        )
