"""
Module: wholesale_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.  Selectors
    are the query side next to the write-side services: listings and lookups
    of inventory, orders, the transaction log and notifications.
Architecture position: Kernel > Selectors.  May import from db/ and models/.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(), delete(),
      flush() or commit().
    - DTO return convention: selectors return frozen dataclasses from
      ``wholesale_kernel.domain``, never ORM instances.
    - Session ownership: the caller owns the session and its transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from wholesale_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

DEFAULT_PAGE_SIZE = 50


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        self.session = session
