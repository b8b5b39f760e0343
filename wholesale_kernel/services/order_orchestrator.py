"""
OrderOrchestrator -- atomic stock and order workflows.

Responsibility:
    Runs every command that touches inventory or order state: opens one
    session per command, loads the aggregates under row locks, applies the
    pure domain transforms, stores the results, appends inventory log
    entries, and commits.  After a successful commit it dispatches
    notifications through the injected ``Notifier``.

Architecture position:
    Kernel > Services -- imperative shell.  The only place that owns a
    transaction boundary for stock and order workflows.  Collaborators
    (catalog, notification channel, admin roster) are ports injected at
    construction.

Invariants enforced:
    WORKFLOW_ATOMICITY -- all ledger mutations, the order mutation and the
        log entries of one command commit together; the first error rolls
        everything back.
    RESERVATION_RECONCILIATION -- a pending order's reservations are
        confirmed (approve) or released (reject / cancel) while the order
        row is locked, so exactly one transition reconciles them.
    NON_NEGATIVE_STOCK -- delegated to ``domain.inventory`` transforms.
    ORDER_NUMBER_UNIQUENESS -- delegated to SequenceService.

Failure modes:
    Kernel errors never escape: every command returns a ``WorkflowResult``.
    Store exceptions are mapped: StaleDataError -> OptimisticLockError,
    lock aborts -> LockConflictError, any other SQLAlchemyError ->
    StoreUnavailableError.  Notification failures after commit are logged
    as ``notification_dispatch_failed`` and swallowed.

Usage:
    orchestrator = OrderOrchestrator(
        session_factory=get_session_factory(),
        product_lookup=SqlProductLookup(get_session_factory()),
        notifier=LoggingNotifier(),
        admin_directory=StaticAdminDirectory(admin_ids),
        clock=SystemClock(),
    )
    result = orchestrator.place_order(PlaceOrder(wholesaler_id, items))
    if not result.is_success:
        ...  # result.error_code, result.message
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from wholesale_kernel.domain import inventory as ledger
from wholesale_kernel.domain import order as orders
from wholesale_kernel.domain.clock import Clock, SystemClock
from wholesale_kernel.domain.commands import (
    ActorRole,
    AdjustInventory,
    ApproveOrder,
    CancelOrder,
    PlaceOrder,
    RejectOrder,
    StockIn,
    StockOut,
    UpdateOrderStatus,
    UpdateReorderLevel,
)
from wholesale_kernel.domain.inventory import InventoryRecord
from wholesale_kernel.domain.order import Order, OrderItem, OrderStatus
from wholesale_kernel.domain.ports import (
    AdminDirectory,
    Notifier,
    OrderEventKind,
    ProductLookup,
    ProductSnapshot,
)
from wholesale_kernel.domain.transaction_log import (
    InventoryTransaction,
    TransactionContext,
    TransactionType,
)
from wholesale_kernel.exceptions import (
    EmptyOrderError,
    ErrorKind,
    InsufficientStockError,
    InventoryNotFoundError,
    InvalidStateTransitionError,
    LockConflictError,
    NoInventoryError,
    NotOrderOwnerError,
    OptimisticLockError,
    OrderNotFoundError,
    ProductInactiveError,
    ProductNotFoundError,
    StoreUnavailableError,
    WholesaleKernelError,
)
from wholesale_kernel.logging_config import LogContext, get_logger
from wholesale_kernel.services.inventory_ledger_service import InventoryLedgerService
from wholesale_kernel.services.order_service import OrderService
from wholesale_kernel.services.sequence_service import SequenceService
from wholesale_kernel.services.transaction_log_service import TransactionLogService

logger = get_logger("services.order_orchestrator")


class WorkflowStatus(str, Enum):
    """Outcome of an orchestrated command."""

    COMPLETED = "completed"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID = "invalid"
    FORBIDDEN = "forbidden"
    INFRASTRUCTURE_ERROR = "infrastructure_error"


_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: WorkflowStatus.NOT_FOUND,
    ErrorKind.CONFLICT: WorkflowStatus.CONFLICT,
    ErrorKind.INVALID: WorkflowStatus.INVALID,
    ErrorKind.FORBIDDEN: WorkflowStatus.FORBIDDEN,
    ErrorKind.INFRASTRUCTURE: WorkflowStatus.INFRASTRUCTURE_ERROR,
}


@dataclass(frozen=True)
class WorkflowResult:
    """Result of an orchestrated command.

    On success ``order`` / ``inventory`` / ``transactions`` hold the
    committed state.  On failure they are empty and ``error_code``,
    ``error_kind``, ``message`` and ``details`` describe the typed error.
    """

    status: WorkflowStatus
    command: str
    order: Order | None = None
    inventory: tuple[InventoryRecord, ...] = ()
    transactions: tuple[InventoryTransaction, ...] = ()
    low_stock_warning: bool = False
    error_code: str | None = None
    error_kind: ErrorKind | None = None
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status is WorkflowStatus.COMPLETED

    @property
    def record(self) -> InventoryRecord | None:
        """The single inventory record of a stock command."""
        return self.inventory[0] if self.inventory else None

    @classmethod
    def failed(cls, command: str, error: WholesaleKernelError) -> "WorkflowResult":
        return cls(
            status=_STATUS_BY_KIND[error.error_kind],
            command=command,
            error_code=error.code,
            error_kind=error.error_kind,
            message=str(error),
            details=error.details(),
        )


@dataclass(frozen=True)
class OrchestratorOptions:
    """Behaviour switches; built from settings by ``wholesale_config.bridges``."""

    default_reorder_level: int = 100
    low_stock_alerts_enabled: bool = True
    notify_admins_on_new_order: bool = True
    notify_wholesaler_on_update: bool = True


class _Workflow:
    """Services bound to one command's session, plus post-commit work."""

    def __init__(self, session: Session):
        self.session = session
        self.inventory = InventoryLedgerService(session)
        self.log = TransactionLogService(session)
        self.orders = OrderService(session)
        self.sequence = SequenceService(session)
        self.after_commit: list[tuple[str, Callable[[], None]]] = []
        self.records: dict[UUID, InventoryRecord] = {}
        self.transactions: list[InventoryTransaction] = []

    def store(self, record: InventoryRecord, actor_id: UUID) -> InventoryRecord:
        saved = self.inventory.save(record, actor_id)
        self.records[saved.product_id] = saved
        return saved


_LOCK_MARKERS = ("deadlock", "could not serialize", "lock timeout", "database is locked")


def _by_product(items):
    """Lock inventory rows in a fixed order across concurrent workflows."""
    return sorted(items, key=lambda item: str(item.product_id))


class OrderOrchestrator:
    """
    Single entry point for stock and order commands.

    Contract:
        Every public method takes a command DTO and returns a
        ``WorkflowResult``.  Each call runs in its own session and
        transaction obtained from ``session_factory``.

    Non-goals:
        - Authentication and request validation (done by the caller).
        - Notification delivery guarantees (fire-and-forget after commit).
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        product_lookup: ProductLookup,
        notifier: Notifier,
        admin_directory: AdminDirectory,
        clock: Clock | None = None,
        options: OrchestratorOptions | None = None,
    ):
        self._session_factory = session_factory
        self._products = product_lookup
        self._notifier = notifier
        self._admins = admin_directory
        self._clock = clock or SystemClock()
        self._options = options or OrchestratorOptions()

    # =====================================================================
    # Transaction boundary
    # =====================================================================

    def _run(
        self,
        command: str,
        work: Callable[[_Workflow], WorkflowResult],
        **log_fields: Any,
    ) -> WorkflowResult:
        with LogContext.bind(command=command, **log_fields):
            logger.info("workflow_started")
            session = self._session_factory()
            wf = _Workflow(session)
            try:
                result = work(wf)
                session.commit()
            except WholesaleKernelError as exc:
                session.rollback()
                return self._rejected(command, exc)
            except StaleDataError as exc:
                session.rollback()
                return self._rejected(
                    command, OptimisticLockError("InventoryRecord", "unknown"), cause=exc
                )
            except OperationalError as exc:
                session.rollback()
                reason = str(exc.orig) if exc.orig is not None else str(exc)
                if any(marker in reason.lower() for marker in _LOCK_MARKERS):
                    return self._rejected(command, LockConflictError(command), cause=exc)
                return self._rejected(command, StoreUnavailableError(command), cause=exc)
            except SQLAlchemyError as exc:
                session.rollback()
                return self._rejected(command, StoreUnavailableError(command), cause=exc)
            except Exception:
                session.rollback()
                logger.exception("workflow_crashed")
                raise
            finally:
                session.close()

            logger.info(
                "workflow_committed",
                extra={
                    "order_number": result.order.order_number if result.order else None,
                    "transaction_count": len(result.transactions),
                },
            )
            self._dispatch(wf.after_commit)
            return result

    def _rejected(
        self,
        command: str,
        exc: WholesaleKernelError,
        cause: Exception | None = None,
    ) -> WorkflowResult:
        extra = {"error_code": exc.code, "error_kind": exc.error_kind.value}
        if cause is not None:
            # Driver text stays in the log; the result only names the command.
            extra["store_error"] = str(cause)
        logger.warning(
            "workflow_rejected",
            extra=extra,
            exc_info=cause or exc.error_kind is ErrorKind.INFRASTRUCTURE,
        )
        return WorkflowResult.failed(command, exc)

    def _dispatch(self, callbacks: list[tuple[str, Callable[[], None]]]) -> None:
        for name, callback in callbacks:
            try:
                callback()
            except Exception:
                logger.warning(
                    "notification_dispatch_failed",
                    extra={"notification": name},
                    exc_info=True,
                )

    def _completed(
        self,
        command: str,
        wf: _Workflow,
        order: Order | None = None,
        low_stock_warning: bool = False,
    ) -> WorkflowResult:
        return WorkflowResult(
            status=WorkflowStatus.COMPLETED,
            command=command,
            order=order,
            inventory=tuple(wf.records.values()),
            transactions=tuple(wf.transactions),
            low_stock_warning=low_stock_warning,
        )

    # =====================================================================
    # Lookups
    # =====================================================================

    def _require_product(self, product_id: UUID) -> ProductSnapshot:
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFoundError(str(product_id))
        return product

    def _require_order(self, wf: _Workflow, order_id: UUID) -> Order:
        order = wf.orders.load_for_update(order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id))
        return order

    def _require_record(self, wf: _Workflow, product_id: UUID) -> InventoryRecord:
        record = wf.inventory.load_for_update(product_id)
        if record is None:
            raise InventoryNotFoundError(str(product_id))
        return record

    def _notify_wholesaler(self, wf: _Workflow, kind: OrderEventKind, order: Order) -> None:
        if not self._options.notify_wholesaler_on_update:
            return
        wf.after_commit.append((
            f"order_{kind.value}",
            lambda: self._notifier.order_event(kind, order, (order.wholesaler_id,)),
        ))

    # =====================================================================
    # Order workflows
    # =====================================================================

    def place_order(self, command: PlaceOrder) -> WorkflowResult:
        """Reserve stock for every line and create a pending order."""

        def work(wf: _Workflow) -> WorkflowResult:
            if not command.items:
                raise EmptyOrderError()

            # Catalog reads happen before any row is locked.
            products: dict[UUID, ProductSnapshot] = {}
            for line in command.items:
                if line.product_id in products:
                    continue
                product = self._require_product(line.product_id)
                if not product.is_active:
                    raise ProductInactiveError(str(product.id), product.name)
                products[line.product_id] = product

            now = self._clock.now()
            for line in _by_product(command.items):
                product = products[line.product_id]
                record = wf.inventory.load_for_update(line.product_id)
                if record is None:
                    raise NoInventoryError(str(product.id), product.name)
                if not record.has_available_stock(line.quantity):
                    raise InsufficientStockError(
                        str(product.id),
                        record.available_quantity,
                        line.quantity,
                        product_name=product.name,
                    )
                wf.store(ledger.reserve_stock(record, line.quantity), command.wholesaler_id)

            items = tuple(
                OrderItem(
                    product_id=line.product_id,
                    product_name=products[line.product_id].name,
                    sku=products[line.product_id].sku,
                    quantity=line.quantity,
                    unit_price=products[line.product_id].base_price,
                )
                for line in command.items
            )
            order = orders.build_order(
                order_id=uuid4(),
                order_number=wf.sequence.next_order_number(now.date()),
                wholesaler_id=command.wholesaler_id,
                items=items,
                created_at=now,
                shipping_address=command.shipping_address,
                notes=command.notes,
            )
            wf.orders.insert(order, command.wholesaler_id)

            if self._options.notify_admins_on_new_order:
                wf.after_commit.append((
                    "order_new-order",
                    lambda: self._notifier.order_event(
                        OrderEventKind.NEW_ORDER, order, self._admins.list_admin_ids()
                    ),
                ))
            return self._completed("place_order", wf, order=order)

        return self._run("place_order", work, actor_id=command.wholesaler_id)

    def approve_order(self, command: ApproveOrder) -> WorkflowResult:
        """Approve a pending order and turn its reservations into stock-outs."""

        def work(wf: _Workflow) -> WorkflowResult:
            order = self._require_order(wf, command.order_id)
            now = self._clock.now()
            approved = orders.approve(order, command.admin_id, now)

            for item in _by_product(order.items):
                before = self._require_record(wf, item.product_id)
                after = wf.store(
                    ledger.confirm_stock_out(
                        before, item.quantity, at=now, reference=order.order_number
                    ),
                    command.admin_id,
                )
                wf.transactions.append(wf.log.record_movement(
                    before=before,
                    after=after,
                    transaction_type=TransactionType.STOCK_OUT,
                    quantity=item.quantity,
                    performed_by=command.admin_id,
                    occurred_at=now,
                    context=TransactionContext(
                        order_id=order.id,
                        reference_number=order.order_number,
                        approved_by=command.admin_id,
                        approved_at=now,
                    ),
                ))

            wf.orders.save(approved, command.admin_id)
            self._notify_wholesaler(wf, OrderEventKind.APPROVED, approved)
            return self._completed("approve_order", wf, order=approved)

        return self._run(
            "approve_order", work,
            actor_id=command.admin_id, order_id=command.order_id,
        )

    def reject_order(self, command: RejectOrder) -> WorkflowResult:
        """Reject a pending order and release its reservations."""

        def work(wf: _Workflow) -> WorkflowResult:
            order = self._require_order(wf, command.order_id)
            rejected = orders.reject(order, command.admin_id, command.reason, self._clock.now())

            for item in _by_product(order.items):
                record = self._require_record(wf, item.product_id)
                wf.store(ledger.release_stock(record, item.quantity), command.admin_id)

            wf.orders.save(rejected, command.admin_id)
            self._notify_wholesaler(wf, OrderEventKind.REJECTED, rejected)
            return self._completed("reject_order", wf, order=rejected)

        return self._run(
            "reject_order", work,
            actor_id=command.admin_id, order_id=command.order_id,
        )

    def cancel_order(self, command: CancelOrder) -> WorkflowResult:
        """Cancel a pending or approved order.

        Pending: the reservation is released.  Approved: the stock already
        left the ledger, so it is added back and logged as a return.
        """

        def work(wf: _Workflow) -> WorkflowResult:
            order = self._require_order(wf, command.order_id)
            if command.actor_role is not ActorRole.ADMIN and not order.is_owned_by(command.actor_id):
                raise NotOrderOwnerError(str(order.id), str(command.actor_id))

            now = self._clock.now()
            cancelled = orders.cancel(order, command.reason, now)

            for item in _by_product(order.items):
                before = self._require_record(wf, item.product_id)
                if order.status is OrderStatus.PENDING:
                    wf.store(ledger.release_stock(before, item.quantity), command.actor_id)
                    continue
                after = wf.store(
                    ledger.add_stock(
                        before, item.quantity, at=now,
                        reference=f"Cancelled {order.order_number}",
                    ),
                    command.actor_id,
                )
                wf.transactions.append(wf.log.record_movement(
                    before=before,
                    after=after,
                    transaction_type=TransactionType.RETURN,
                    quantity=item.quantity,
                    performed_by=command.actor_id,
                    occurred_at=now,
                    context=TransactionContext(
                        order_id=order.id,
                        reference_number=order.order_number,
                        notes=cancelled.cancellation_reason,
                    ),
                ))

            wf.orders.save(cancelled, command.actor_id)
            self._notify_wholesaler(wf, OrderEventKind.CANCELLED, cancelled)
            return self._completed("cancel_order", wf, order=cancelled)

        return self._run(
            "cancel_order", work,
            actor_id=command.actor_id, order_id=command.order_id,
        )

    def update_order_status(self, command: UpdateOrderStatus) -> WorkflowResult:
        """Fulfilment progress (processing, shipped, delivered); no stock effect."""

        def work(wf: _Workflow) -> WorkflowResult:
            order = self._require_order(wf, command.order_id)
            try:
                target = OrderStatus(command.target_status)
            except ValueError:
                raise InvalidStateTransitionError(
                    str(order.id), order.status.value, str(command.target_status)
                ) from None
            if target not in orders.STATUS_UPDATE_TARGETS:
                raise InvalidStateTransitionError(
                    str(order.id), order.status.value, target.value
                )
            updated = orders.apply_status_update(order, target, self._clock.now())
            wf.orders.save(updated, command.actor_id)
            self._notify_wholesaler(wf, OrderEventKind.STATUS_CHANGED, updated)
            return self._completed("update_order_status", wf, order=updated)

        return self._run(
            "update_order_status", work,
            actor_id=command.actor_id, order_id=command.order_id,
        )

    def mark_processing(self, order_id: UUID, actor_id: UUID | None = None) -> WorkflowResult:
        return self.update_order_status(
            UpdateOrderStatus(order_id, OrderStatus.PROCESSING, actor_id)
        )

    def mark_shipped(self, order_id: UUID, actor_id: UUID | None = None) -> WorkflowResult:
        return self.update_order_status(
            UpdateOrderStatus(order_id, OrderStatus.SHIPPED, actor_id)
        )

    def mark_delivered(self, order_id: UUID, actor_id: UUID | None = None) -> WorkflowResult:
        return self.update_order_status(
            UpdateOrderStatus(order_id, OrderStatus.DELIVERED, actor_id)
        )

    # =====================================================================
    # Stock workflows
    # =====================================================================

    def stock_in(self, command: StockIn) -> WorkflowResult:
        """Receive stock, creating the product's record on first receipt."""

        def work(wf: _Workflow) -> WorkflowResult:
            self._require_product(command.product_id)
            now = self._clock.now()
            before = wf.inventory.get_or_create(
                command.product_id,
                self._options.default_reorder_level,
                command.actor_id,
            )
            after = wf.store(
                ledger.add_stock(
                    before, command.quantity, at=now,
                    reference=command.reference_number or "Manual",
                ),
                command.actor_id,
            )
            wf.transactions.append(wf.log.record_movement(
                before=before,
                after=after,
                transaction_type=TransactionType.STOCK_IN,
                quantity=command.quantity,
                performed_by=command.actor_id,
                occurred_at=now,
                context=TransactionContext(
                    supplier_id=command.supplier_id,
                    reference_number=command.reference_number,
                    unit_cost=command.unit_cost,
                    notes=command.notes,
                ),
            ))
            return self._completed("stock_in", wf)

        return self._run(
            "stock_in", work,
            actor_id=command.actor_id, product_id=command.product_id,
        )

    def stock_out(self, command: StockOut) -> WorkflowResult:
        """Direct, non-order removal; raises the low-stock alert once."""

        def work(wf: _Workflow) -> WorkflowResult:
            before = self._require_record(wf, command.product_id)
            now = self._clock.now()
            after = ledger.remove_stock(
                before, command.quantity, at=now,
                reference=command.reference_number or "Stock-Out",
            )
            if self._options.low_stock_alerts_enabled and ledger.needs_low_stock_alert(after):
                after = ledger.mark_low_stock_alert_sent(after)
                alerted = after
                wf.after_commit.append((
                    "low-stock",
                    lambda: self._send_low_stock_alert(alerted),
                ))
            after = wf.store(after, command.actor_id)
            wf.transactions.append(wf.log.record_movement(
                before=before,
                after=after,
                transaction_type=TransactionType.STOCK_OUT,
                quantity=command.quantity,
                performed_by=command.actor_id,
                occurred_at=now,
                context=TransactionContext(
                    order_id=command.order_id,
                    reference_number=command.reference_number,
                    notes=command.notes,
                ),
            ))
            return self._completed("stock_out", wf, low_stock_warning=after.is_low_stock)

        return self._run(
            "stock_out", work,
            actor_id=command.actor_id, product_id=command.product_id,
        )

    def _send_low_stock_alert(self, record: InventoryRecord) -> None:
        product = self._products.get(record.product_id) or ProductSnapshot(
            id=record.product_id,
            name="Unknown Product",
            sku="N/A",
            unit="",
            base_price=Decimal("0"),
        )
        self._notifier.low_stock(record, product, self._admins.list_admin_ids())

    def adjust_inventory(self, command: AdjustInventory) -> WorkflowResult:
        """Manual correction by a signed delta, logged as an adjustment."""

        def work(wf: _Workflow) -> WorkflowResult:
            before = self._require_record(wf, command.product_id)
            after = wf.store(
                ledger.adjust_quantity(before, command.delta, command.notes),
                command.actor_id,
            )
            wf.transactions.append(wf.log.record_movement(
                before=before,
                after=after,
                transaction_type=TransactionType.ADJUSTMENT,
                quantity=abs(command.delta),
                performed_by=command.actor_id,
                occurred_at=self._clock.now(),
                context=TransactionContext(notes=after.notes),
            ))
            return self._completed("adjust_inventory", wf)

        return self._run(
            "adjust_inventory", work,
            actor_id=command.actor_id, product_id=command.product_id,
        )

    def update_reorder_level(self, command: UpdateReorderLevel) -> WorkflowResult:
        """Change the reorder threshold and re-arm the low-stock alert."""

        def work(wf: _Workflow) -> WorkflowResult:
            record = self._require_record(wf, command.product_id)
            wf.store(ledger.set_reorder_level(record, command.reorder_level), command.actor_id)
            return self._completed("update_reorder_level", wf)

        return self._run(
            "update_reorder_level", work,
            actor_id=command.actor_id, product_id=command.product_id,
        )

    def ensure_inventory(self, product_id: UUID, actor_id: UUID) -> WorkflowResult:
        """Create the zero-quantity record for a new product (idempotent)."""

        def work(wf: _Workflow) -> WorkflowResult:
            self._require_product(product_id)
            record = wf.inventory.get_or_create(
                product_id, self._options.default_reorder_level, actor_id
            )
            wf.records[product_id] = record
            return self._completed("ensure_inventory", wf)

        return self._run(
            "ensure_inventory", work,
            actor_id=actor_id, product_id=product_id,
        )
