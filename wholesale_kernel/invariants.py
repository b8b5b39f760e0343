"""
Kernel Invariants Contract.

These invariants are structural law for stock and order handling.  No
setting, role, or command payload may override them.

This module exists solely to declare these invariants explicitly.  The
enforcement is distributed across the ledger transforms
(``domain.inventory``), the order aggregate (``domain.order``), the
transaction log builder, the ORM immutability listeners, the sequence
service, and the order orchestrator.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    NON_NEGATIVE_STOCK = "non_negative_stock"
    """available_quantity >= 0 and reserved_quantity >= 0 after every ledger
    operation. Enforced by the pure transforms in domain.inventory and by
    CHECK constraints on inventory_records."""

    RESERVATION_RECONCILIATION = "reservation_reconciliation"
    """Units reserved for a pending order are released or confirmed exactly
    once when the order leaves pending. Enforced by OrderOrchestrator."""

    ORDER_TOTAL_CONSISTENCY = "order_total_consistency"
    """total_amount equals the sum of item subtotals, and subtotal equals
    quantity * unit_price. Both are derived properties of the domain.order
    values (OrderItem.subtotal, Order.total_amount)."""

    LEGAL_TRANSITIONS = "legal_transitions"
    """Order status changes only along ORDER_WORKFLOW transitions. Enforced
    by domain.order.check_transition."""

    ORDER_NUMBER_UNIQUENESS = "order_number_uniqueness"
    """Order numbers are unique. Enforced by SequenceService's locked
    per-day counter and a unique constraint on orders.order_number."""

    WORKFLOW_ATOMICITY = "workflow_atomicity"
    """Ledger mutations, the order mutation, and log entries of one workflow
    commit together or not at all. Enforced by OrderOrchestrator."""

    AUDIT_DELTA_CONSISTENCY = "audit_delta_consistency"
    """new_quantity - previous_quantity of a log entry matches its type and
    quantity. Enforced by domain.transaction_log.build_transaction."""

    LOG_IMMUTABILITY = "log_immutability"
    """Inventory transactions are append-only. Enforced by ORM listeners
    (db.immutability)."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The domain layer may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_DOMAIN_IMPORTS: tuple[str, ...] = (
    "sqlalchemy",
    "wholesale_kernel.db",
    "wholesale_kernel.models",
    "wholesale_kernel.services",
    "wholesale_kernel.selectors",
    "wholesale_config",
)
