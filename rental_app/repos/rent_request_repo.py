import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update

from core.date_helper import utcnow
from models.enums import RentRequestStatus
from models.models import House, RentRequest


class RentRequestRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, request_id: uuid.UUID) -> Optional[RentRequest]:
        result = await self.db.execute(
            select(RentRequest)
            .where(RentRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def has_pending(
        self,
        user_id: uuid.UUID,
        house_id: uuid.UUID,
        exclude_id: uuid.UUID | None = None,
    ) -> bool:
        stmt = select(RentRequest.id).where(
            RentRequest.user_id == user_id,
            RentRequest.house_id == house_id,
            RentRequest.status == RentRequestStatus.PENDING,
        )
        if exclude_id is not None:
            stmt = stmt.where(RentRequest.id != exclude_id)
        result = await self.db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def add(self, data: dict) -> RentRequest:
        request = RentRequest(**data)
        self.db.add(request)
        await self.db.flush()
        return request

    async def set_status(
        self, request: RentRequest, status: RentRequestStatus
    ) -> RentRequest:
        request.status = status
        await self.db.flush()
        return request

    async def reject_pending_siblings(
        self, house_id: uuid.UUID, keep_id: uuid.UUID
    ) -> List[RentRequest]:
        siblings = (
            await self.db.execute(
                select(RentRequest).where(
                    RentRequest.house_id == house_id,
                    RentRequest.status == RentRequestStatus.PENDING,
                    RentRequest.id != keep_id,
                )
            )
        ).scalars().all()
        if not siblings:
            return []

        await self.db.execute(
            update(RentRequest)
            .where(RentRequest.id.in_([s.id for s in siblings]))
            .values(status=RentRequestStatus.REJECTED, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return list(siblings)

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 10,
        user_id: uuid.UUID | None = None,
        landlord_id: uuid.UUID | None = None,
        house_id: uuid.UUID | None = None,
        status: RentRequestStatus | None = None,
    ) -> Tuple[List[RentRequest], int]:
        stmt = select(RentRequest)
        if landlord_id is not None:
            stmt = stmt.join(House, House.id == RentRequest.house_id).where(
                House.landlord_id == landlord_id
            )
        if user_id is not None:
            stmt = stmt.where(RentRequest.user_id == user_id)
        if house_id is not None:
            stmt = stmt.where(RentRequest.house_id == house_id)
        if status is not None:
            stmt = stmt.where(RentRequest.status == status)

        total = await self.db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await self.db.execute(
            stmt.order_by(RentRequest.created_at.desc(), RentRequest.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def delete(self, request: RentRequest) -> None:
        await self.db.delete(request)
        await self.db.flush()
