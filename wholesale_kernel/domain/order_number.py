"""
Order number format.

``ORD-YYMMDD-NNNN``: the order's creation date and its 1-indexed position
among that day's orders, zero-padded to four digits.  Past 9999 the
sequence keeps counting and the suffix simply grows wider.

Allocation of the sequence value is the sequence service's job; this
module only formats and parses.
"""

from __future__ import annotations

import re
from datetime import date

ORDER_NUMBER_PREFIX = "ORD"

_ORDER_NUMBER_RE = re.compile(r"^ORD-(\d{6})-(\d{4,})$")


def order_sequence_name(day: date) -> str:
    """Name of the per-day counter that allocates order numbers."""
    return f"order_number:{day:%y%m%d}"


def format_order_number(day: date, sequence: int) -> str:
    if sequence < 1:
        raise ValueError(f"Order sequence must be >= 1 (got {sequence})")
    return f"{ORDER_NUMBER_PREFIX}-{day:%y%m%d}-{sequence:04d}"


def parse_order_number(order_number: str) -> tuple[str, int]:
    """Split an order number into its ``YYMMDD`` stamp and sequence."""
    match = _ORDER_NUMBER_RE.match(order_number)
    if match is None:
        raise ValueError(f"Malformed order number: {order_number!r}")
    return match.group(1), int(match.group(2))
