"""
Catalog and directory adapters for the ``ProductLookup`` and
``AdminDirectory`` ports.

``SqlProductLookup`` reads the reference ``products`` table in a short
session of its own.  The orchestrator resolves products before it opens
its workflow transaction, so lookups never nest inside one.
"""

from collections.abc import Callable, Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from wholesale_kernel.domain.ports import ProductSnapshot
from wholesale_kernel.models.product import ProductModel


class SqlProductLookup:

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, product_id: UUID) -> ProductSnapshot | None:
        session = self._session_factory()
        try:
            row = session.get(ProductModel, product_id)
            return row.to_dto() if row is not None else None
        finally:
            session.close()


class StaticAdminDirectory:
    """Fixed admin roster, e.g. from configuration."""

    def __init__(self, admin_ids: Iterable[UUID] = ()):
        self._admin_ids = tuple(admin_ids)

    def list_admin_ids(self) -> tuple[UUID, ...]:
        return self._admin_ids
