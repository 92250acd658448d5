import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from models.enums import MaintenancePriority, MaintenanceStatus
from models.models import MaintenanceRequest


class MaintenanceRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, request_id: uuid.UUID) -> Optional[MaintenanceRequest]:
        result = await self.db.execute(
            select(MaintenanceRequest).where(MaintenanceRequest.id == request_id)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 10,
        tenant_id: uuid.UUID | None = None,
        landlord_id: uuid.UUID | None = None,
        house_id: uuid.UUID | None = None,
        status: MaintenanceStatus | None = None,
        priority: MaintenancePriority | None = None,
    ) -> Tuple[List[MaintenanceRequest], int]:
        stmt = select(MaintenanceRequest)
        if tenant_id is not None:
            stmt = stmt.where(MaintenanceRequest.tenant_id == tenant_id)
        if landlord_id is not None:
            stmt = stmt.where(MaintenanceRequest.landlord_id == landlord_id)
        if house_id is not None:
            stmt = stmt.where(MaintenanceRequest.house_id == house_id)
        if status is not None:
            stmt = stmt.where(MaintenanceRequest.status == status)
        if priority is not None:
            stmt = stmt.where(MaintenanceRequest.priority == priority)

        total = await self.db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await self.db.execute(
            stmt.order_by(MaintenanceRequest.requested_at.desc(), MaintenanceRequest.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def create(self, data: dict) -> MaintenanceRequest:
        try:
            request = MaintenanceRequest(**data)
            self.db.add(request)
            await self.db.commit()
            return request
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def update_fields(
        self, request: MaintenanceRequest, values: dict
    ) -> MaintenanceRequest:
        try:
            for field, value in values.items():
                setattr(request, field, value)
            await self.db.commit()
            return request
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete(self, request: MaintenanceRequest) -> None:
        try:
            await self.db.delete(request)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
