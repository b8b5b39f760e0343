"""
Pytest fixtures for the wholesale kernel test suite.

Provides:
- A session-scoped engine with all tables created once
- Per-test cleanup by deleting every row (Core DELETE, bypasses ORM listeners)
- Deterministic clock, in-memory product catalog and recording notifier
- A wired OrderOrchestrator plus helpers to create stocked products

Environment Variables:
- DATABASE_URL: a ``postgresql://`` URL runs the suite (and the
  ``postgres``-marked concurrency tests) against PostgreSQL.  Anything else
  uses an in-memory SQLite database.
"""

import json
import logging
import os
from collections.abc import Callable
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from wholesale_kernel.db.base import Base
from wholesale_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from wholesale_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from wholesale_kernel.domain.clock import DeterministicClock
from wholesale_kernel.domain.commands import OrderLineRequest, PlaceOrder, StockIn
from wholesale_kernel.domain.inventory import InventoryRecord
from wholesale_kernel.domain.order import Order
from wholesale_kernel.domain.ports import OrderEventKind, ProductSnapshot
from wholesale_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from wholesale_kernel.services.catalog import StaticAdminDirectory
from wholesale_kernel.services.order_orchestrator import (
    OrchestratorOptions,
    OrderOrchestrator,
)

SQLITE_URL = "sqlite:///:memory:"


def get_database_url() -> str:
    url = os.environ.get("DATABASE_URL", "")
    return url if url.startswith("postgresql") else SQLITE_URL


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "postgres: mark test as requiring PostgreSQL"
    )
    config.addinivalue_line(
        "markers", "slow_locks: mark test as potentially waiting for DB locks"
    )


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture wholesale_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.place_order(...)
            logs = captured_logs()
            assert any(r["message"] == "workflow_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("wholesale_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database infrastructure
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the whole test session, tables created once."""
    eng = init_engine_from_url(
        get_database_url(), echo=False,
        pool_size=30, max_overflow=20, pool_timeout=10,
    )
    create_tables(eng)
    register_immutability_listeners()
    yield eng
    unregister_immutability_listeners()
    reset_engine()


def _delete_all_rows(engine) -> None:
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def session_factory(db_engine) -> Callable[[], Session]:
    """Session factory bound to the test engine; every row is removed afterwards."""
    yield get_session_factory()
    _delete_all_rows(db_engine)


@pytest.fixture
def read(session_factory):
    """Run ``fn(session)`` in a short session of its own.

    The in-memory SQLite engine shares one connection, so a test must not
    keep a session open while the orchestrator runs.
    """

    def _read(fn):
        with session_factory() as s:
            return fn(s)

    return _read


# =============================================================================
# Collaborator fakes
# =============================================================================


class InMemoryCatalog:
    """ProductLookup backed by a dict."""

    def __init__(self):
        self.products: dict[UUID, ProductSnapshot] = {}

    def add(
        self,
        name: str = "Sunflower Oil 20L",
        sku: str | None = None,
        base_price: Decimal = Decimal("10.00"),
        is_active: bool = True,
        unit: str = "L",
    ) -> ProductSnapshot:
        product = ProductSnapshot(
            id=uuid4(),
            name=name,
            sku=sku or f"SKU-{len(self.products) + 1:04d}",
            unit=unit,
            base_price=base_price,
            is_active=is_active,
        )
        self.products[product.id] = product
        return product

    def get(self, product_id: UUID) -> ProductSnapshot | None:
        return self.products.get(product_id)


class RecordingNotifier:
    """Notifier that keeps every call for assertions."""

    def __init__(self):
        self.order_events: list[tuple[OrderEventKind, Order, tuple[UUID, ...]]] = []
        self.low_stock_alerts: list[tuple[InventoryRecord, ProductSnapshot, tuple[UUID, ...]]] = []
        self.account_events: list[tuple[UUID, bool, str | None]] = []

    def order_event(self, kind, order, recipients):
        self.order_events.append((kind, order, tuple(recipients)))

    def low_stock(self, record, product, recipients):
        self.low_stock_alerts.append((record, product, tuple(recipients)))

    def account_status(self, user_id, approved, reason=None):
        self.account_events.append((user_id, approved, reason))

    def kinds(self) -> list[OrderEventKind]:
        return [kind for kind, _, _ in self.order_events]


class FailingNotifier:
    """Notifier whose every call raises."""

    def order_event(self, kind, order, recipients):
        raise RuntimeError("notification channel down")

    def low_stock(self, record, product, recipients):
        raise RuntimeError("notification channel down")

    def account_status(self, user_id, approved, reason=None):
        raise RuntimeError("notification channel down")


# =============================================================================
# Actors, clock, orchestrator
# =============================================================================


@pytest.fixture
def admin_id() -> UUID:
    return uuid4()


@pytest.fixture
def wholesaler_id() -> UUID:
    return uuid4()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> FailingNotifier:
    return FailingNotifier()


@pytest.fixture
def orchestrator_options() -> OrchestratorOptions:
    return OrchestratorOptions(default_reorder_level=10)


@pytest.fixture
def orchestrator(
    session_factory, catalog, notifier, admin_id, clock, orchestrator_options
) -> OrderOrchestrator:
    return OrderOrchestrator(
        session_factory=session_factory,
        product_lookup=catalog,
        notifier=notifier,
        admin_directory=StaticAdminDirectory([admin_id]),
        clock=clock,
        options=orchestrator_options,
    )


@pytest.fixture
def stocked_product(orchestrator, catalog, admin_id):
    """Factory: register a product and receive ``quantity`` units of it."""

    def _create(
        quantity: int = 100,
        name: str = "Sunflower Oil 20L",
        base_price: Decimal = Decimal("10.00"),
    ) -> ProductSnapshot:
        product = catalog.add(name=name, base_price=base_price)
        result = orchestrator.stock_in(
            StockIn(product_id=product.id, quantity=quantity, actor_id=admin_id)
        )
        assert result.is_success, result.message
        return product

    return _create


@pytest.fixture
def place_order(orchestrator, wholesaler_id):
    """Factory: place an order of ``(product, quantity)`` pairs."""

    def _place(*lines, wholesaler: UUID | None = None):
        return orchestrator.place_order(
            PlaceOrder(
                wholesaler_id=wholesaler or wholesaler_id,
                items=tuple(OrderLineRequest(p.id, q) for p, q in lines),
            )
        )

    return _place
