"""Tests for the locked counter behind order numbers."""

from datetime import date

from wholesale_kernel.services.sequence_service import SequenceService


class TestSequenceService:

    def test_first_value_is_one_and_increments(self, session_factory):
        with session_factory() as s:
            svc = SequenceService(s)
            assert svc.current_value("demo") is None
            assert [svc.next_value("demo") for _ in range(3)] == [1, 2, 3]
            assert svc.current_value("demo") == 3
            s.commit()

    def test_counters_are_independent(self, session_factory):
        with session_factory() as s:
            svc = SequenceService(s)
            svc.next_value("a")
            svc.next_value("a")
            assert svc.next_value("b") == 1

    def test_rolled_back_allocation_is_reused(self, session_factory):
        with session_factory() as s:
            SequenceService(s).next_value("demo")
            s.rollback()
        with session_factory() as s:
            assert SequenceService(s).next_value("demo") == 1

    def test_next_order_number(self, session_factory):
        day = date(2025, 12, 31)
        with session_factory() as s:
            svc = SequenceService(s)
            assert svc.next_order_number(day) == "ORD-251231-0001"
            assert svc.next_order_number(day) == "ORD-251231-0002"
            assert svc.next_order_number(date(2026, 1, 1)) == "ORD-260101-0001"
