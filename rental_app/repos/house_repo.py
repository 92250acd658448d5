import uuid
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from models.enums import HouseStatus
from models.models import House


class HouseRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, house_id: uuid.UUID) -> Optional[House]:
        result = await self.db.execute(select(House).where(House.id == house_id))
        return result.scalar_one_or_none()

    async def get_for_update(self, house_id: uuid.UUID) -> Optional[House]:
        stmt = (
            select(House)
            .where(House.id == house_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    def _filtered(
        self,
        stmt,
        *,
        landlord_id: uuid.UUID | None = None,
        status: HouseStatus | None = None,
        min_rent: Decimal | None = None,
        max_rent: Decimal | None = None,
        bedrooms: int | None = None,
        bathrooms: int | None = None,
        is_active: bool | None = None,
    ):
        if landlord_id is not None:
            stmt = stmt.where(House.landlord_id == landlord_id)
        if status is not None:
            stmt = stmt.where(House.status == status)
        if min_rent is not None:
            stmt = stmt.where(House.rent_amount >= min_rent)
        if max_rent is not None:
            stmt = stmt.where(House.rent_amount <= max_rent)
        if bedrooms is not None:
            stmt = stmt.where(House.bedrooms == bedrooms)
        if bathrooms is not None:
            stmt = stmt.where(House.bathrooms == bathrooms)
        if is_active is not None:
            stmt = stmt.where(House.is_active == is_active)
        return stmt

    async def list(
        self, *, offset: int = 0, limit: int = 10, **filters
    ) -> Tuple[List[House], int]:
        stmt = self._filtered(select(House), **filters)
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        )
        result = await self.db.execute(
            stmt.order_by(House.created_at.desc(), House.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def create(self, data: dict) -> House:
        try:
            house = House(**data)
            self.db.add(house)
            await self.db.commit()
            return house
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def update_fields(self, house: House, values: dict) -> House:
        try:
            for field, value in values.items():
                setattr(house, field, value)
            await self.db.commit()
            return house
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def set_occupancy(
        self, house: House, status: HouseStatus, tenant_id: uuid.UUID | None
    ) -> House:
        house.status = status
        house.tenant_id = tenant_id
        await self.db.flush()
        return house

    async def delete(self, house: House) -> None:
        try:
            await self.db.delete(house)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
