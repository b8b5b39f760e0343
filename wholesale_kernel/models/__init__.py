"""SQLAlchemy ORM models.  Importing this package registers every table."""

from wholesale_kernel.models.inventory import InventoryRecordModel
from wholesale_kernel.models.inventory_transaction import InventoryTransactionModel
from wholesale_kernel.models.notification import NotificationModel
from wholesale_kernel.models.order import OrderItemModel, OrderModel
from wholesale_kernel.models.product import ProductModel
from wholesale_kernel.models.sequence import SequenceCounter

__all__ = [
    "InventoryRecordModel",
    "InventoryTransactionModel",
    "NotificationModel",
    "OrderItemModel",
    "OrderModel",
    "ProductModel",
    "SequenceCounter",
]
