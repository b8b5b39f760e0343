"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

The inventory log is the audit trail for every unit that entered or left
the warehouse.  A corrected mistake is a new adjustment entry, never an
edit of an old one.  Orders and inventory records are likewise never
deleted: they only move through their lifecycle.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events:

    session.flush()
         |
         v
    [before_update event] --> _check_*_immutability() --> ImmutabilityViolationError
         |                                                        ^
         v                                                        |
    [before_delete event] --> _check_*_delete() -----------------+
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity                      | Rule
----------------------------|-----------------------------------------------
InventoryTransaction        | Never updated, never deleted
Order                       | Never deleted
InventoryRecord             | Never deleted

===============================================================================
USAGE
===============================================================================

    from wholesale_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup (idempotent)

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event

from wholesale_kernel.exceptions import ImmutabilityViolationError
from wholesale_kernel.invariants import KernelInvariant
from wholesale_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(entity_type: str, target, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "invariant": KernelInvariant.LOG_IMMUTABILITY.value,
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_inventory_transaction_immutability(mapper, connection, target):
    _block(
        "InventoryTransaction", target, "UPDATE",
        "Inventory transactions are append-only and cannot be modified",
    )


def _check_inventory_transaction_delete(mapper, connection, target):
    _block(
        "InventoryTransaction", target, "DELETE",
        "Inventory transactions cannot be deleted",
    )


def _check_order_delete(mapper, connection, target):
    _block("Order", target, "DELETE", "Orders are never deleted; cancel instead")


def _check_inventory_record_delete(mapper, connection, target):
    _block("InventoryRecord", target, "DELETE", "Inventory records are never deleted")


def _listeners():
    from wholesale_kernel.models.inventory import InventoryRecordModel
    from wholesale_kernel.models.inventory_transaction import InventoryTransactionModel
    from wholesale_kernel.models.order import OrderModel

    return (
        (InventoryTransactionModel, "before_update", _check_inventory_transaction_immutability),
        (InventoryTransactionModel, "before_delete", _check_inventory_transaction_delete),
        (OrderModel, "before_delete", _check_order_delete),
        (InventoryRecordModel, "before_delete", _check_inventory_record_delete),
    )


def register_immutability_listeners() -> None:
    """Register all immutability event listeners (idempotent)."""
    for target, event_name, fn in _listeners():
        if not event.contains(target, event_name, fn):
            event.listen(target, event_name, fn)
    logger.debug("immutability_listeners_registered")


def unregister_immutability_listeners() -> None:
    """Remove the immutability listeners.  FOR TESTING ONLY."""
    for target, event_name, fn in _listeners():
        if event.contains(target, event_name, fn):
            event.remove(target, event_name, fn)
