"""Selectors for the wholesale kernel (read side)."""

from wholesale_kernel.selectors.inventory_selector import InventorySelector
from wholesale_kernel.selectors.notification_selector import NotificationSelector
from wholesale_kernel.selectors.order_selector import OrderSelector

__all__ = [
    "InventorySelector",
    "NotificationSelector",
    "OrderSelector",
]
