import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.enums import ReminderType
from models.models import RentReminder


class RentReminderRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, reminder_id: uuid.UUID) -> Optional[RentReminder]:
        result = await self.db.execute(
            select(RentReminder).where(RentReminder.id == reminder_id)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 10,
        type: ReminderType | None = None,
        is_sent: bool | None = None,
        house_id: uuid.UUID | None = None,
        tenant_id: uuid.UUID | None = None,
        landlord_id: uuid.UUID | None = None,
        reminder_date_before: datetime | None = None,
        reminder_date_after: datetime | None = None,
    ) -> Tuple[List[RentReminder], int]:
        stmt = select(RentReminder)
        if type is not None:
            stmt = stmt.where(RentReminder.type == type)
        if is_sent is not None:
            stmt = stmt.where(RentReminder.is_sent == is_sent)
        if house_id is not None:
            stmt = stmt.where(RentReminder.house_id == house_id)
        if tenant_id is not None:
            stmt = stmt.where(RentReminder.tenant_id == tenant_id)
        if landlord_id is not None:
            stmt = stmt.where(RentReminder.landlord_id == landlord_id)
        if reminder_date_before is not None:
            stmt = stmt.where(RentReminder.reminder_date <= reminder_date_before)
        if reminder_date_after is not None:
            stmt = stmt.where(RentReminder.reminder_date >= reminder_date_after)

        total = await self.db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await self.db.execute(
            stmt.order_by(RentReminder.reminder_date.asc(), RentReminder.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def due(self, now: datetime, limit: int = 100) -> List[RentReminder]:
        result = await self.db.execute(
            select(RentReminder)
            .options(selectinload(RentReminder.tenant), selectinload(RentReminder.house))
            .where(RentReminder.is_sent.is_(False), RentReminder.reminder_date <= now)
            .order_by(RentReminder.reminder_date.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(self, data: dict) -> RentReminder:
        try:
            reminder = RentReminder(**data)
            self.db.add(reminder)
            await self.db.commit()
            return reminder
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def update_fields(self, reminder: RentReminder, values: dict) -> RentReminder:
        try:
            for field, value in values.items():
                setattr(reminder, field, value)
            await self.db.commit()
            return reminder
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete(self, reminder: RentReminder) -> None:
        try:
            await self.db.delete(reminder)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def claim_unsent(self, reminder_id: uuid.UUID, sent_at: datetime) -> bool:
        """Flip is_sent only if still unsent; True for the one caller that wins."""
        try:
            result = await self.db.execute(
                update(RentReminder)
                .where(RentReminder.id == reminder_id, RentReminder.is_sent.is_(False))
                .values(is_sent=True, sent_at=sent_at)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount == 1
        except SQLAlchemyError:
            await self.db.rollback()
            raise
