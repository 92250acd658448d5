import uuid
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from models.enums import LeaseStatus
from models.models import LeaseAgreement


class LeaseRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, lease_id: uuid.UUID) -> Optional[LeaseAgreement]:
        result = await self.db.execute(
            select(LeaseAgreement).where(LeaseAgreement.id == lease_id)
        )
        return result.scalar_one_or_none()

    async def find_overlapping(
        self,
        house_id: uuid.UUID,
        start_date: date,
        end_date: date,
        exclude_id: uuid.UUID | None = None,
    ) -> List[LeaseAgreement]:
        stmt = select(LeaseAgreement).where(
            LeaseAgreement.house_id == house_id,
            LeaseAgreement.status.in_([LeaseStatus.PENDING, LeaseStatus.ACTIVE]),
            LeaseAgreement.start_date < end_date,
            LeaseAgreement.end_date > start_date,
        )
        if exclude_id is not None:
            stmt = stmt.where(LeaseAgreement.id != exclude_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 10,
        tenant_id: uuid.UUID | None = None,
        landlord_id: uuid.UUID | None = None,
        house_id: uuid.UUID | None = None,
        status: LeaseStatus | None = None,
    ) -> Tuple[List[LeaseAgreement], int]:
        stmt = select(LeaseAgreement)
        if tenant_id is not None:
            stmt = stmt.where(LeaseAgreement.tenant_id == tenant_id)
        if landlord_id is not None:
            stmt = stmt.where(LeaseAgreement.landlord_id == landlord_id)
        if house_id is not None:
            stmt = stmt.where(LeaseAgreement.house_id == house_id)
        if status is not None:
            stmt = stmt.where(LeaseAgreement.status == status)

        total = await self.db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await self.db.execute(
            stmt.order_by(LeaseAgreement.created_at.desc(), LeaseAgreement.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def create(self, data: dict) -> LeaseAgreement:
        try:
            lease = LeaseAgreement(**data)
            self.db.add(lease)
            await self.db.commit()
            return lease
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def update_fields(self, lease: LeaseAgreement, values: dict) -> LeaseAgreement:
        try:
            for field, value in values.items():
                setattr(lease, field, value)
            await self.db.commit()
            return lease
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete(self, lease: LeaseAgreement) -> None:
        try:
            await self.db.delete(lease)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
