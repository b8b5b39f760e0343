"""Read-side queries over inventory, the inventory log and orders."""

from datetime import timedelta

from wholesale_kernel.domain.commands import ApproveOrder, StockOut
from wholesale_kernel.domain.order import OrderStatus
from wholesale_kernel.domain.transaction_log import TransactionType
from wholesale_kernel.selectors.inventory_selector import InventorySelector
from wholesale_kernel.selectors.order_selector import OrderSelector


class TestInventorySelector:

    def test_low_stock_listing(self, orchestrator, stocked_product, admin_id, read):
        healthy = stocked_product(100, name="Healthy")
        low = stocked_product(12, name="Low")
        orchestrator.stock_out(StockOut(low.id, 5, admin_id))

        low_only = read(lambda s: InventorySelector(s).list_inventory(low_stock_only=True))
        everything = read(lambda s: InventorySelector(s).list_inventory())

        assert [r.product_id for r in low_only] == [low.id]
        assert {r.product_id for r in everything} == {healthy.id, low.id}
        assert read(lambda s: InventorySelector(s).count_inventory(low_stock_only=True)) == 1
        assert [r.product_id for r in read(lambda s: InventorySelector(s).list_low_stock())] == [low.id]

    def test_paging_is_stable(self, stocked_product, read):
        for i in range(5):
            stocked_product(100, name=f"Oil {i}")

        first = read(lambda s: InventorySelector(s).list_inventory(limit=3))
        rest = read(lambda s: InventorySelector(s).list_inventory(limit=3, offset=3))

        assert len(first) == 3 and len(rest) == 2
        assert not {r.product_id for r in first} & {r.product_id for r in rest}

    def test_transaction_filters(self, orchestrator, stocked_product, admin_id, clock, read):
        product = stocked_product(50)
        start = clock.now()
        clock.advance(60)
        orchestrator.stock_out(StockOut(product.id, 5, admin_id))
        clock.advance(60)
        orchestrator.stock_out(StockOut(product.id, 5, admin_id))

        outs = read(lambda s: InventorySelector(s).list_transactions(
            product_id=product.id, transaction_type=TransactionType.STOCK_OUT,
        ))
        window = read(lambda s: InventorySelector(s).list_transactions(
            start=start + timedelta(seconds=30), end=start + timedelta(seconds=90),
        ))

        assert len(outs) == 2
        assert outs[0].new_quantity == 40
        assert [(e.previous_quantity, e.new_quantity) for e in window] == [(50, 45)]

    def test_same_timestamp_entries_come_back_newest_first(
        self, orchestrator, stocked_product, place_order, admin_id, read
    ):
        product = stocked_product(100)
        for _ in range(6):
            order = place_order((product, 1)).order
            orchestrator.approve_order(ApproveOrder(order.id, admin_id))

        entries = read(lambda s: InventorySelector(s).list_transactions(product_id=product.id))

        assert len({e.occurred_at for e in entries}) == 1
        assert [e.new_quantity for e in entries] == [94, 95, 96, 97, 98, 99, 100]
        assert entries[-1].transaction_type is TransactionType.STOCK_IN

    def test_transactions_for_order(self, orchestrator, stocked_product, place_order, admin_id, read):
        product = stocked_product(50)
        order = place_order((product, 5)).order
        orchestrator.approve_order(ApproveOrder(order.id, admin_id))

        entries = read(lambda s: InventorySelector(s).transactions_for_order(order.id))

        assert [e.transaction_type for e in entries] == [TransactionType.STOCK_OUT]


class TestOrderSelector:

    def test_lookup_by_id_and_number(self, stocked_product, place_order, read):
        order = place_order((stocked_product(10), 2)).order

        by_id = read(lambda s: OrderSelector(s).get(order.id))
        by_number = read(lambda s: OrderSelector(s).get_by_number(order.order_number))

        assert by_id.id == by_number.id == order.id
        assert by_id.items == order.items
        assert by_id.total_amount == order.total_amount

    def test_filters(self, orchestrator, stocked_product, place_order, admin_id, wholesaler_id, clock, read):
        product = stocked_product(100)
        mine = place_order((product, 1)).order
        clock.advance(60)
        other = place_order((product, 1), wholesaler=admin_id).order
        clock.advance(60)
        approved = place_order((product, 1)).order
        orchestrator.approve_order(ApproveOrder(approved.id, admin_id))

        pending = read(lambda s: OrderSelector(s).list_pending())
        own = read(lambda s: OrderSelector(s).list_for_wholesaler(wholesaler_id))
        own_approved = read(
            lambda s: OrderSelector(s).list_for_wholesaler(wholesaler_id, status=OrderStatus.APPROVED)
        )

        assert [o.id for o in pending] == [other.id, mine.id]
        assert [o.id for o in own] == [approved.id, mine.id]
        assert [o.id for o in own_approved] == [approved.id]
        assert read(lambda s: OrderSelector(s).count_orders(status=OrderStatus.PENDING)) == 2

    def test_date_window(self, stocked_product, place_order, clock, read):
        product = stocked_product(100)
        place_order((product, 1))
        clock.advance(86400)
        late = place_order((product, 1)).order

        since = clock.now() - timedelta(hours=1)
        window = read(lambda s: OrderSelector(s).list_orders(start=since))

        assert [o.id for o in window] == [late.id]

    def test_unknown_number(self, read):
        assert read(lambda s: OrderSelector(s).get_by_number("ORD-000101-0001")) is None
