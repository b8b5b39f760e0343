"""Tests for the order aggregate and its lifecycle (wholesale_kernel/domain/order.py)."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from wholesale_kernel.domain.order import (
    CANCELLABLE_STATUSES,
    ORDER_TRANSITIONS,
    ORDER_WORKFLOW,
    TERMINAL_ORDER_STATUSES,
    Order,
    OrderItem,
    OrderStatus,
    apply_status_update,
    approve,
    build_order,
    cancel,
    check_transition,
    mark_delivered,
    mark_processing,
    mark_shipped,
    reject,
)
from wholesale_kernel.exceptions import (
    EmptyOrderError,
    InvalidQuantityError,
    InvalidStateTransitionError,
    MissingReasonError,
)

AT = datetime(2024, 5, 10, 8, 0, tzinfo=timezone.utc)
ADMIN = uuid4()


def _item(quantity=3, price="12.50") -> OrderItem:
    return OrderItem(
        product_id=uuid4(),
        product_name="Palm Oil 5L",
        sku="PALM-5",
        quantity=quantity,
        unit_price=Decimal(price),
    )


def _order(*items: OrderItem) -> Order:
    return build_order(
        order_id=uuid4(),
        order_number="ORD-240510-0001",
        wholesaler_id=uuid4(),
        items=items or (_item(),),
        created_at=AT,
    )


def _in_status(status: OrderStatus) -> Order:
    order = _order()
    path = {
        OrderStatus.PENDING: [],
        OrderStatus.APPROVED: [lambda o: approve(o, ADMIN, AT)],
        OrderStatus.REJECTED: [lambda o: reject(o, ADMIN, "no credit", AT)],
        OrderStatus.CANCELLED: [lambda o: cancel(o, "changed mind", AT)],
        OrderStatus.PROCESSING: [lambda o: approve(o, ADMIN, AT), mark_processing],
        OrderStatus.SHIPPED: [
            lambda o: approve(o, ADMIN, AT), mark_processing, lambda o: mark_shipped(o, AT)
        ],
        OrderStatus.DELIVERED: [
            lambda o: approve(o, ADMIN, AT),
            lambda o: mark_shipped(o, AT),
            lambda o: mark_delivered(o, AT),
        ],
    }[status]
    for step in path:
        order = step(order)
    assert order.status is status
    return order


class TestOrderValueObjects:

    def test_total_is_sum_of_line_subtotals(self):
        order = _order(_item(2, "10.00"), _item(3, "1.25"))
        assert order.total_amount == Decimal("23.75")
        assert order.item_count == 5

    def test_empty_order_rejected(self):
        with pytest.raises(EmptyOrderError):
            Order(id=uuid4(), order_number="ORD-240510-0001", wholesaler_id=uuid4(), items=())

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_line_quantity_must_be_positive(self, quantity):
        with pytest.raises(InvalidQuantityError):
            _item(quantity=quantity)

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            _item(price="-0.01")

    def test_new_order_is_pending_and_modifiable(self):
        order = _order()
        assert order.status is OrderStatus.PENDING
        assert order.can_be_modified()
        assert order.can_be_cancelled()

    def test_ownership(self):
        order = _order()
        assert order.is_owned_by(order.wholesaler_id)
        assert not order.is_owned_by(uuid4())


class TestWorkflowTable:

    def test_terminal_states_have_no_targets(self):
        for status in TERMINAL_ORDER_STATUSES:
            assert ORDER_TRANSITIONS[status] == frozenset()

    def test_pending_targets(self):
        assert ORDER_TRANSITIONS[OrderStatus.PENDING] == {
            OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CANCELLED,
        }

    def test_inventory_touching_edges(self):
        touching = {
            (t.from_state, t.to_state)
            for t in ORDER_WORKFLOW.transitions
            if t.touches_inventory
        }
        assert touching == {
            ("pending", "approved"),
            ("pending", "rejected"),
            ("pending", "cancelled"),
            ("approved", "cancelled"),
        }

    def test_check_transition_returns_error_for_illegal_edge(self):
        error = check_transition(_in_status(OrderStatus.DELIVERED), OrderStatus.PENDING)
        assert isinstance(error, InvalidStateTransitionError)
        assert error.current_status == "delivered"
        assert check_transition(_order(), OrderStatus.APPROVED) is None


class TestTransitions:

    def test_approve_records_admin_and_time(self):
        approved = approve(_order(), ADMIN, AT)
        assert approved.status is OrderStatus.APPROVED
        assert approved.approved_by == ADMIN
        assert approved.approved_at == AT

    def test_approve_twice_fails(self):
        with pytest.raises(InvalidStateTransitionError):
            approve(approve(_order(), ADMIN, AT), ADMIN, AT)

    def test_reject_requires_reason(self):
        with pytest.raises(MissingReasonError):
            reject(_order(), ADMIN, "   ", AT)

    def test_reject_stores_stripped_reason(self):
        rejected = reject(_order(), ADMIN, " out of region ", AT)
        assert rejected.rejection_reason == "out of region"
        assert rejected.approved_by == ADMIN

    def test_cancel_requires_reason(self):
        with pytest.raises(MissingReasonError):
            cancel(_order(), "", AT)

    @pytest.mark.parametrize("status", sorted(CANCELLABLE_STATUSES, key=lambda s: s.value))
    def test_cancel_from_cancellable_states(self, status):
        cancelled = cancel(_in_status(status), "customer request", AT)
        assert cancelled.status is OrderStatus.CANCELLED
        assert cancelled.cancelled_at == AT

    @pytest.mark.parametrize("status", [
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.REJECTED,
        OrderStatus.CANCELLED,
    ])
    def test_cancel_refused_outside_cancellable_states(self, status):
        with pytest.raises(InvalidStateTransitionError):
            cancel(_in_status(status), "too late", AT)

    def test_fulfilment_path(self):
        order = _in_status(OrderStatus.APPROVED)
        order = apply_status_update(order, OrderStatus.PROCESSING, AT)
        order = apply_status_update(order, OrderStatus.SHIPPED, AT)
        assert order.shipped_at == AT
        order = apply_status_update(order, OrderStatus.DELIVERED, AT)
        assert order.delivered_at == AT
        assert order.fulfilled_at == AT

    def test_approved_may_ship_directly(self):
        assert mark_shipped(_in_status(OrderStatus.APPROVED), AT).status is OrderStatus.SHIPPED

    def test_pending_cannot_ship(self):
        with pytest.raises(InvalidStateTransitionError):
            apply_status_update(_order(), OrderStatus.SHIPPED, AT)

    def test_status_update_refuses_non_fulfilment_target(self):
        with pytest.raises(InvalidStateTransitionError):
            apply_status_update(_order(), OrderStatus.APPROVED, AT)

    def test_transitions_do_not_mutate_input(self):
        order = _order()
        approve(order, ADMIN, AT)
        assert order.status is OrderStatus.PENDING
