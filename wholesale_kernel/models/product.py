"""
Module: wholesale_kernel.models.product
Responsibility: Reference product catalog table.  The kernel only reads it
    (through SqlProductLookup); catalog CRUD lives outside the kernel.
Architecture position: Kernel > Models.  Inherits from TrackedBase.
"""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wholesale_kernel.db.base import TrackedBase


class ProductModel(TrackedBase):
    """Maps to: wholesale_kernel.domain.ports.ProductSnapshot."""

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_products_base_price_non_negative"),
        Index("idx_products_name", "name"),
        Index("idx_products_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    sku: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="L")
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_price: Mapped[Decimal] = mapped_column(nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dto(self):
        from wholesale_kernel.domain.ports import ProductSnapshot

        return ProductSnapshot(
            id=self.id,
            name=self.name,
            sku=self.sku,
            unit=self.unit,
            base_price=self.base_price,
            is_active=self.is_active,
        )

    def __repr__(self) -> str:
        return f"<ProductModel {self.sku} active={self.is_active}>"
