import uuid
from typing import List, Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from models.enums import NotificationType
from models.models import Notification


class NotificationRepo:
    def __init__(self, db):
        self.db = db

    async def create(
        self,
        user_id: uuid.UUID,
        type: NotificationType,
        message: str,
        source_id: uuid.UUID | None = None,
    ) -> Notification:
        try:
            notification = Notification(
                user_id=user_id, type=type, message=message, source_id=source_id
            )
            self.db.add(notification)
            await self.db.commit()
            return notification
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def get_by_id(self, notification_id: uuid.UUID) -> Optional[Notification]:
        result = await self.db.execute(
            select(Notification).where(Notification.id == notification_id)
        )
        return result.scalar_one_or_none()

    async def get_many(self, ids: Sequence[uuid.UUID]) -> List[Notification]:
        result = await self.db.execute(
            select(Notification).where(Notification.id.in_(list(ids)))
        )
        return list(result.scalars().all())

    async def find_by_user(
        self,
        user_id: uuid.UUID,
        is_read: bool | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if is_read is not None:
            stmt = stmt.where(Notification.is_read == is_read)
        result = await self.db.execute(
            stmt.order_by(Notification.created_at.desc(), Notification.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def mark_read(self, ids: Sequence[uuid.UUID]) -> int:
        try:
            result = await self.db.execute(
                update(Notification)
                .where(Notification.id.in_(list(ids)))
                .values(is_read=True)
                .execution_options(synchronize_session="fetch")
            )
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        try:
            result = await self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
                .values(is_read=True)
                .execution_options(synchronize_session="fetch")
            )
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete_many(self, ids: Sequence[uuid.UUID]) -> int:
        try:
            result = await self.db.execute(
                delete(Notification)
                .where(Notification.id.in_(list(ids)))
                .execution_options(synchronize_session="fetch")
            )
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete_all_for_user(self, user_id: uuid.UUID) -> int:
        try:
            result = await self.db.execute(
                delete(Notification)
                .where(Notification.user_id == user_id)
                .execution_options(synchronize_session="fetch")
            )
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError:
            await self.db.rollback()
            raise
