"""Tests for the pure inventory ledger transforms (wholesale_kernel/domain/inventory.py)."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from wholesale_kernel.domain.inventory import (
    InventoryRecord,
    add_stock,
    adjust_quantity,
    confirm_stock_out,
    mark_low_stock_alert_sent,
    needs_low_stock_alert,
    new_inventory_record,
    release_stock,
    remove_stock,
    reserve_stock,
    set_reorder_level,
)
from wholesale_kernel.exceptions import (
    InsufficientStockError,
    InvalidConfirmError,
    InvalidQuantityError,
    InvalidReleaseError,
    MissingReasonError,
    NegativeStockError,
)

AT = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def _record(available=100, reserved=0, reorder_level=10, **kwargs) -> InventoryRecord:
    return InventoryRecord(
        product_id=uuid4(),
        available_quantity=available,
        reserved_quantity=reserved,
        reorder_level=reorder_level,
        **kwargs,
    )


class TestInventoryRecord:

    def test_new_record_is_empty(self):
        record = new_inventory_record(uuid4(), reorder_level=100)
        assert record.available_quantity == 0
        assert record.reserved_quantity == 0
        assert record.reorder_level == 100
        assert record.low_stock_alert_sent is False

    def test_negative_reorder_level_rejected_on_creation(self):
        with pytest.raises(InvalidQuantityError):
            new_inventory_record(uuid4(), reorder_level=-1)

    def test_negative_quantities_cannot_be_constructed(self):
        with pytest.raises(ValueError):
            _record(available=-1)
        with pytest.raises(ValueError):
            _record(reserved=-1)

    def test_total_is_available_plus_reserved(self):
        assert _record(available=70, reserved=30).total_quantity == 100

    def test_low_stock_is_inclusive_of_reorder_level(self):
        assert _record(available=10, reorder_level=10).is_low_stock
        assert not _record(available=11, reorder_level=10).is_low_stock

    def test_has_available_stock(self):
        record = _record(available=5)
        assert record.has_available_stock(5)
        assert not record.has_available_stock(6)


class TestAddStock:

    def test_increments_available_and_records_movement(self):
        after = add_stock(_record(available=20), 30, at=AT, reference="PO-7")
        assert after.available_quantity == 50
        assert after.last_stock_in.quantity == 30
        assert after.last_stock_in.reference == "PO-7"
        assert after.last_stock_in.at == AT

    def test_rearms_low_stock_alert(self):
        record = _record(available=5, low_stock_alert_sent=True)
        assert add_stock(record, 1, at=AT).low_stock_alert_sent is False

    @pytest.mark.parametrize("quantity", [0, -5, 1.5, True])
    def test_rejects_non_positive_or_non_integer(self, quantity):
        with pytest.raises(InvalidQuantityError):
            add_stock(_record(), quantity, at=AT)


class TestReserveReleaseConfirm:

    def test_reserve_moves_available_to_reserved(self):
        after = reserve_stock(_record(available=100), 30)
        assert (after.available_quantity, after.reserved_quantity) == (70, 30)
        assert after.total_quantity == 100

    def test_reserve_more_than_available_fails_and_leaves_input(self):
        record = _record(available=10)
        with pytest.raises(InsufficientStockError) as exc_info:
            reserve_stock(record, 11)
        assert exc_info.value.available == 10
        assert exc_info.value.requested == 11
        assert record.available_quantity == 10

    def test_release_restores_available(self):
        after = release_stock(_record(available=70, reserved=30), 30)
        assert (after.available_quantity, after.reserved_quantity) == (100, 0)

    def test_release_more_than_reserved_fails(self):
        with pytest.raises(InvalidReleaseError):
            release_stock(_record(available=70, reserved=30), 31)

    def test_confirm_only_decrements_reserved(self):
        after = confirm_stock_out(_record(available=70, reserved=30), 30, at=AT, reference="ORD-1")
        assert (after.available_quantity, after.reserved_quantity) == (70, 0)
        assert after.last_stock_out.reference == "ORD-1"

    def test_confirm_more_than_reserved_fails(self):
        with pytest.raises(InvalidConfirmError):
            confirm_stock_out(_record(available=70, reserved=30), 40, at=AT)

    def test_reserve_then_release_is_identity(self):
        record = _record(available=42, reserved=8)
        assert release_stock(reserve_stock(record, 12), 12) == record


class TestRemoveStock:

    def test_direct_removal_from_available(self):
        after = remove_stock(_record(available=50), 20, at=AT)
        assert after.available_quantity == 30
        assert after.last_stock_out.quantity == 20

    def test_cannot_remove_reserved_units(self):
        with pytest.raises(InsufficientStockError):
            remove_stock(_record(available=5, reserved=50), 6, at=AT)


class TestAdjustQuantity:

    def test_positive_and_negative_deltas(self):
        assert adjust_quantity(_record(available=10), 5, "recount").available_quantity == 15
        assert adjust_quantity(_record(available=10), -10, "spill").available_quantity == 0

    def test_notes_are_stored_stripped(self):
        assert adjust_quantity(_record(), 1, "  recount  ").notes == "recount"

    def test_cannot_go_negative(self):
        with pytest.raises(NegativeStockError) as exc_info:
            adjust_quantity(_record(available=3), -4, "damage")
        assert exc_info.value.delta == -4

    def test_zero_delta_rejected(self):
        with pytest.raises(InvalidQuantityError):
            adjust_quantity(_record(), 0, "noop")

    @pytest.mark.parametrize("notes", ["", "   ", None])
    def test_notes_required(self, notes):
        with pytest.raises(MissingReasonError):
            adjust_quantity(_record(), 1, notes)


class TestLowStockAlert:

    def test_alert_needed_once_until_restock(self):
        low = _record(available=5, reorder_level=10)
        assert needs_low_stock_alert(low)
        sent = mark_low_stock_alert_sent(low)
        assert not needs_low_stock_alert(sent)
        assert needs_low_stock_alert(remove_stock(add_stock(sent, 1, at=AT), 1, at=AT))

    def test_not_needed_above_reorder_level(self):
        assert not needs_low_stock_alert(_record(available=50, reorder_level=10))

    def test_set_reorder_level_rearms_alert(self):
        record = _record(available=5, reorder_level=10, low_stock_alert_sent=True)
        after = set_reorder_level(record, 20)
        assert after.reorder_level == 20
        assert after.low_stock_alert_sent is False

    def test_negative_reorder_level_rejected(self):
        with pytest.raises(InvalidQuantityError):
            set_reorder_level(_record(), -1)
