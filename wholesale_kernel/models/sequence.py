"""
Module: wholesale_kernel.models.sequence
Responsibility: Named counter rows behind SequenceService.  Each row is
    locked ``FOR UPDATE`` while its value is incremented.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from wholesale_kernel.db.base import Base


class SequenceCounter(Base):
    """One named sequence (e.g. ``order_number:240101``) and its current value."""

    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    current_value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )
