"""Services for the wholesale kernel (write side)."""

from wholesale_kernel.services.catalog import SqlProductLookup, StaticAdminDirectory
from wholesale_kernel.services.inventory_ledger_service import InventoryLedgerService
from wholesale_kernel.services.notification_service import (
    LoggingNotifier,
    SqlNotificationSink,
)
from wholesale_kernel.services.order_orchestrator import (
    OrchestratorOptions,
    OrderOrchestrator,
    WorkflowResult,
    WorkflowStatus,
)
from wholesale_kernel.services.order_service import OrderService
from wholesale_kernel.services.retry import retry_on_conflict
from wholesale_kernel.services.sequence_service import SequenceService
from wholesale_kernel.services.transaction_log_service import TransactionLogService

__all__ = [
    "InventoryLedgerService",
    "LoggingNotifier",
    "OrchestratorOptions",
    "OrderOrchestrator",
    "OrderService",
    "SequenceService",
    "SqlNotificationSink",
    "SqlProductLookup",
    "StaticAdminDirectory",
    "TransactionLogService",
    "WorkflowResult",
    "WorkflowStatus",
    "retry_on_conflict",
]
