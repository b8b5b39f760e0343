"""
Collaborator ports (``wholesale_kernel.domain.ports``).

The kernel reaches the product catalog, the notification channel and the
admin roster only through these protocols.  Adapters are injected into the
order orchestrator at construction; there is no global registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol
from uuid import UUID

from wholesale_kernel.domain.inventory import InventoryRecord
from wholesale_kernel.domain.order import Order


@dataclass(frozen=True)
class ProductSnapshot:
    """Catalog data the kernel needs for ordering and stock alerts."""

    id: UUID
    name: str
    sku: str
    unit: str
    base_price: Decimal
    is_active: bool = True


class OrderEventKind(str, Enum):
    """Order events that reach the notification channel."""

    NEW_ORDER = "new-order"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    STATUS_CHANGED = "status-changed"


class ProductLookup(Protocol):
    """Read access to the product catalog."""

    def get(self, product_id: UUID) -> ProductSnapshot | None:
        """Return the product, or None if it does not exist."""
        ...


class AdminDirectory(Protocol):
    """Who receives admin-facing notifications."""

    def list_admin_ids(self) -> tuple[UUID, ...]:
        ...


class Notifier(Protocol):
    """Post-commit side channel.

    Called only after the workflow's transaction has committed.  Failures
    are logged by the caller and never undo the committed work.
    """

    def order_event(
        self,
        kind: OrderEventKind,
        order: Order,
        recipients: tuple[UUID, ...],
    ) -> None:
        ...

    def low_stock(
        self,
        record: InventoryRecord,
        product: ProductSnapshot,
        recipients: tuple[UUID, ...],
    ) -> None:
        ...

    def account_status(
        self,
        user_id: UUID,
        approved: bool,
        reason: str | None = None,
    ) -> None:
        ...
