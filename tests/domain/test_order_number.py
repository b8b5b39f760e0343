"""Tests for order number formatting (wholesale_kernel/domain/order_number.py)."""

from datetime import date

import pytest

from wholesale_kernel.domain.order_number import (
    format_order_number,
    order_sequence_name,
    parse_order_number,
)

DAY = date(2024, 7, 4)


class TestOrderNumber:

    def test_format(self):
        assert format_order_number(DAY, 1) == "ORD-240704-0001"
        assert format_order_number(DAY, 42) == "ORD-240704-0042"

    def test_suffix_widens_past_9999(self):
        assert format_order_number(DAY, 10000) == "ORD-240704-10000"

    def test_sequence_must_be_positive(self):
        with pytest.raises(ValueError):
            format_order_number(DAY, 0)

    def test_parse(self):
        assert parse_order_number("ORD-240704-0042") == ("240704", 42)

    @pytest.mark.parametrize("value", ["ORD-240704-42", "SO-240704-0001", "ORD-2407-0001", ""])
    def test_parse_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_order_number(value)

    def test_sequence_name_is_per_day(self):
        assert order_sequence_name(DAY) == "order_number:240704"
        assert order_sequence_name(date(2024, 7, 5)) != order_sequence_name(DAY)
