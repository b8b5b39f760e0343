"""NotificationSelector -- a recipient's notification feed."""

from uuid import UUID

from sqlalchemy import func, select

from wholesale_kernel.domain.notification import Notification
from wholesale_kernel.models.notification import NotificationModel
from wholesale_kernel.selectors.base import DEFAULT_PAGE_SIZE, BaseSelector


class NotificationSelector(BaseSelector[NotificationModel]):

    def list_for_user(
        self,
        user_id: UUID,
        unread_only: bool = False,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Notification]:
        stmt = select(NotificationModel).where(NotificationModel.recipient_id == user_id)
        if unread_only:
            stmt = stmt.where(NotificationModel.is_read.is_(False))
        stmt = (
            stmt.order_by(NotificationModel.created_at.desc(), NotificationModel.id)
            .limit(limit)
            .offset(offset)
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]

    def unread_count(self, user_id: UUID) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(NotificationModel)
            .where(
                NotificationModel.recipient_id == user_id,
                NotificationModel.is_read.is_(False),
            )
        ).scalar_one()
