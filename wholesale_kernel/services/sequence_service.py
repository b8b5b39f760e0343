"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Provides strictly increasing sequence numbers per name.  Order numbers
    draw from one counter per calendar day (``order_number:YYMMDD``); the
    inventory log draws from a single ``inventory_transaction`` counter.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by the order orchestrator while placing an order and by
    TransactionLogService for every appended log entry.

Invariants enforced:
    ORDER_NUMBER_UNIQUENESS -- the locked counter row is the sole source of
        the next value.  Counting existing orders (count-plus-one) is
        FORBIDDEN: two concurrent placements would read the same count.
    Transactional -- the increment is only visible after the caller's
        transaction commits.  Rollback returns the value.

Failure modes:
    - IntegrityError: concurrent counter creation race (handled via
      savepoint rollback and retry).
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wholesale_kernel.domain.order_number import format_order_number, order_sequence_name
from wholesale_kernel.logging_config import get_logger
from wholesale_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")

INVENTORY_TRANSACTION_SEQUENCE = "inventory_transaction"


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Guarantees:
        - ``SELECT ... FOR UPDATE`` serializes concurrent allocations for the
          same sequence.
        - No gaps under normal operation; a rolled-back allocation is
          returned to the counter.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.

    Usage:
        seq = SequenceService(session)
        number = seq.next_order_number(clock.now().date())
    """

    def __init__(self, session: Session):
        self._session = session

    def _lock_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, sequence_name: str) -> int:
        """
        Lock the named counter (creating it on first use), increment it and
        return the new value (always > 0).
        """
        counter = self._lock_counter(sequence_name)

        if counter is None:
            # Another transaction may create the same counter concurrently;
            # the savepoint keeps the rest of the caller's work intact.
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=sequence_name, current_value=1)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": 1},
                )
                return 1
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": sequence_name},
                )
                savepoint.rollback()
                counter = self._lock_counter(sequence_name)
                if counter is None:
                    raise

        # INVARIANT: ORDER_NUMBER_UNIQUENESS -- increment the locked row
        counter.current_value += 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Current value without incrementing, or None if never used."""
        counter = self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()

        return counter.current_value if counter else None

    def next_order_number(self, day: date) -> str:
        """Allocate the next ``ORD-YYMMDD-NNNN`` for ``day``."""
        return format_order_number(day, self.next_value(order_sequence_name(day)))

    def next_transaction_seq(self) -> int:
        """Allocate the next inventory log position."""
        return self.next_value(INVENTORY_TRANSACTION_SEQUENCE)
