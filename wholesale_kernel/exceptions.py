"""
Typed Exception Hierarchy for the Wholesale Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Stock and order errors are shown to people ("Insufficient stock. Available:
12, Requested: 50") and handled by programs (HTTP status mapping, retries).
Callers must never parse message strings to tell one failure from another.

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Every exception has an ERROR KIND (not_found / conflict / forbidden /
     invalid / infrastructure) so the outer layer can map it to a status
  4. Exceptions carry structured DATA (quantities, states, ids)

Example - WRONG way to handle errors:
    try:
        orchestrator.place_order(command)
    except Exception as e:
        if "Insufficient" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    except InsufficientStockError as e:
        api_response(code=e.code, available=e.available, requested=e.requested)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    WholesaleKernelError (base)
    |
    +-- NotFoundError
    |   +-- ProductNotFoundError
    |   +-- OrderNotFoundError
    |   +-- InventoryNotFoundError
    |   +-- NoInventoryError
    |
    +-- StockError
    |   +-- InsufficientStockError
    |   +-- NegativeStockError
    |   +-- InvalidReleaseError
    |   +-- InvalidConfirmError
    |
    +-- OrderError
    |   +-- InvalidStateTransitionError
    |   +-- ProductInactiveError
    |   +-- EmptyOrderError
    |
    +-- ValidationError
    |   +-- InvalidQuantityError
    |   +-- MissingReasonError
    |   +-- TransactionDeltaMismatchError
    |
    +-- AuthorizationError
    |   +-- NotOrderOwnerError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |   +-- LockConflictError
    |
    +-- StoreUnavailableError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Kind            | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
not_found       | PRODUCT_NOT_FOUND           | Product id unknown to the catalog
                | ORDER_NOT_FOUND             | Order id doesn't exist
                | INVENTORY_NOT_FOUND         | No inventory record for product
                | NO_INVENTORY                | Order line names product with no record
----------------|-----------------------------|-----------------------------------------
conflict        | INSUFFICIENT_STOCK          | available < requested
                | NEGATIVE_STOCK              | Adjustment would make available < 0
                | INVALID_RELEASE             | Release more than reserved
                | INVALID_CONFIRM             | Confirm more than reserved
                | INVALID_STATE_TRANSITION    | Order status change not in workflow
                | PRODUCT_INACTIVE            | Ordering a deactivated product
----------------|-----------------------------|-----------------------------------------
invalid         | EMPTY_ORDER                 | Order without lines
                | INVALID_QUANTITY            | Non-positive quantity / zero delta
                | MISSING_REASON              | Reject / cancel / adjust without reason
                | TRANSACTION_DELTA_MISMATCH  | Log entry delta disagrees with type
----------------|-----------------------------|-----------------------------------------
forbidden       | NOT_ORDER_OWNER             | Wholesaler cancelling another's order
----------------|-----------------------------|-----------------------------------------
infrastructure  | OPTIMISTIC_LOCK_CONFLICT    | Concurrent modification detected
                | LOCK_CONFLICT               | Deadlock or lock timeout in the store
                | STORE_UNAVAILABLE           | Database error during a workflow
                | IMMUTABILITY_VIOLATION      | Update/delete of a log entry

===============================================================================
DESIGN DECISIONS
===============================================================================

1. WHY INHERIT FROM Exception (not ValueError, etc.)?
   Domain exceptions should be catchable as a group. Inheriting from
   built-in types mixes domain errors with programming errors.

2. WHY code AND error_kind AS CLASS ATTRIBUTES?
   Both are static per exception type, so they can be read without an
   instance (API docs, status tables).

3. WHY A details() METHOD?
   The orchestrator returns failures as values.  ``details()`` gives the
   structured context as a plain dict for the result object and logs.
===============================================================================
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Coarse failure category used by outer layers to pick a status code."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID = "invalid"
    FORBIDDEN = "forbidden"
    INFRASTRUCTURE = "infrastructure"


class WholesaleKernelError(Exception):
    """
    Base exception for all wholesale kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification and an ``error_kind`` for status mapping.
    """

    code: str = "WHOLESALE_KERNEL_ERROR"
    error_kind: ErrorKind = ErrorKind.INFRASTRUCTURE

    def details(self) -> dict[str, Any]:
        """Structured context carried by this error (public attributes only)."""
        return {
            k: v for k, v in vars(self).items()
            if not k.startswith("_") and k != "args"
        }


# Not-found exceptions


class NotFoundError(WholesaleKernelError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"
    error_kind: ErrorKind = ErrorKind.NOT_FOUND


class ProductNotFoundError(NotFoundError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class OrderNotFoundError(NotFoundError):
    """Order with given ID was not found."""

    code: str = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class InventoryNotFoundError(NotFoundError):
    """No inventory record exists for the product."""

    code: str = "INVENTORY_NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Inventory not found for product: {product_id}")


class NoInventoryError(NotFoundError):
    """An order line references a product that has never been stocked."""

    code: str = "NO_INVENTORY"

    def __init__(self, product_id: str, product_name: str):
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(f"No inventory found for product: {product_name}")


# Stock-related exceptions


class StockError(WholesaleKernelError):
    """Base exception for ledger quantity violations."""

    code: str = "STOCK_ERROR"
    error_kind: ErrorKind = ErrorKind.CONFLICT


class InsufficientStockError(StockError):
    """Requested quantity exceeds available quantity."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        product_id: str,
        available: int,
        requested: int,
        product_name: str | None = None,
    ):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        self.product_name = product_name
        subject = f" for {product_name}" if product_name else ""
        super().__init__(
            f"Insufficient stock{subject}. "
            f"Available: {available}, Requested: {requested}"
        )


class NegativeStockError(StockError):
    """Adjustment would drive available quantity below zero."""

    code: str = "NEGATIVE_STOCK"

    def __init__(self, product_id: str, available: int, delta: int):
        self.product_id = product_id
        self.available = available
        self.delta = delta
        super().__init__(
            f"Adjustment would result in negative stock. "
            f"Available: {available}, Adjustment: {delta}"
        )


class InvalidReleaseError(StockError):
    """Attempted to release more than is reserved."""

    code: str = "INVALID_RELEASE"

    def __init__(self, product_id: str, reserved: int, requested: int):
        self.product_id = product_id
        self.reserved = reserved
        self.requested = requested
        super().__init__(
            f"Cannot release more than reserved quantity. "
            f"Reserved: {reserved}, Requested: {requested}"
        )


class InvalidConfirmError(StockError):
    """Attempted to confirm more than is reserved."""

    code: str = "INVALID_CONFIRM"

    def __init__(self, product_id: str, reserved: int, requested: int):
        self.product_id = product_id
        self.reserved = reserved
        self.requested = requested
        super().__init__(
            f"Cannot confirm more than reserved quantity. "
            f"Reserved: {reserved}, Requested: {requested}"
        )


# Order-related exceptions


class OrderError(WholesaleKernelError):
    """Base exception for order lifecycle errors."""

    code: str = "ORDER_ERROR"
    error_kind: ErrorKind = ErrorKind.CONFLICT


class InvalidStateTransitionError(OrderError):
    """Order status change is not permitted by the order workflow."""

    code: str = "INVALID_STATE_TRANSITION"

    def __init__(self, order_id: str, current_status: str, target_status: str):
        self.order_id = order_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Invalid status transition for order {order_id}: "
            f"{current_status} -> {target_status}"
        )


class ProductInactiveError(OrderError):
    """Product exists but is not available for ordering."""

    code: str = "PRODUCT_INACTIVE"

    def __init__(self, product_id: str, product_name: str):
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(f"Product is not available: {product_name}")


class EmptyOrderError(OrderError):
    """Order must contain at least one item."""

    code: str = "EMPTY_ORDER"
    error_kind: ErrorKind = ErrorKind.INVALID

    def __init__(self):
        super().__init__("Order must contain at least one item")


# Validation exceptions


class ValidationError(WholesaleKernelError):
    """Base exception for malformed values that reached the kernel."""

    code: str = "VALIDATION_ERROR"
    error_kind: ErrorKind = ErrorKind.INVALID


class InvalidQuantityError(ValidationError):
    """Quantity is zero, negative, or otherwise unusable for the operation."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, operation: str, quantity: int):
        self.operation = operation
        self.quantity = quantity
        super().__init__(f"Invalid quantity for {operation}: {quantity}")


class MissingReasonError(ValidationError):
    """Operation requires a non-blank reason or note."""

    code: str = "MISSING_REASON"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"A reason is required to {operation}")


class TransactionDeltaMismatchError(ValidationError):
    """Log entry previous/new quantities disagree with its type and quantity."""

    code: str = "TRANSACTION_DELTA_MISMATCH"

    def __init__(
        self,
        transaction_type: str,
        quantity: int,
        previous_quantity: int,
        new_quantity: int,
    ):
        self.transaction_type = transaction_type
        self.quantity = quantity
        self.previous_quantity = previous_quantity
        self.new_quantity = new_quantity
        super().__init__(
            f"{transaction_type} of {quantity} cannot move on-hand quantity "
            f"from {previous_quantity} to {new_quantity}"
        )


# Authorization exceptions


class AuthorizationError(WholesaleKernelError):
    """Base exception for role/ownership violations."""

    code: str = "AUTHORIZATION_ERROR"
    error_kind: ErrorKind = ErrorKind.FORBIDDEN


class NotOrderOwnerError(AuthorizationError):
    """A wholesaler attempted to act on an order it does not own."""

    code: str = "NOT_ORDER_OWNER"

    def __init__(self, order_id: str, actor_id: str):
        self.order_id = order_id
        self.actor_id = actor_id
        super().__init__("You can only cancel your own orders")


# Concurrency / infrastructure exceptions


class ConcurrencyError(WholesaleKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"
    error_kind: ErrorKind = ErrorKind.INFRASTRUCTURE


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )


class LockConflictError(ConcurrencyError):
    """The store aborted the transaction on a lock (deadlock, lock timeout)."""

    code: str = "LOCK_CONFLICT"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Lock conflict during {operation}")


class StoreUnavailableError(WholesaleKernelError):
    """The backing store failed while a workflow was running.

    Carries only the operation name; the driver error is logged, never
    returned to callers.
    """

    code: str = "STORE_UNAVAILABLE"
    error_kind: ErrorKind = ErrorKind.INFRASTRUCTURE

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Store unavailable during {operation}")


class ImmutabilityError(WholesaleKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"
    error_kind: ErrorKind = ErrorKind.INFRASTRUCTURE


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
