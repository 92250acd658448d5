import uuid
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from core.date_helper import utcnow
from models.enums import PaymentStatus
from models.models import House, RentPayment


class RentPaymentRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, payment_id: uuid.UUID) -> Optional[RentPayment]:
        result = await self.db.execute(
            select(RentPayment).where(RentPayment.id == payment_id)
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, payment_id: uuid.UUID) -> Optional[RentPayment]:
        result = await self.db.execute(
            select(RentPayment)
            .where(RentPayment.id == payment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
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
        status: PaymentStatus | None = None,
    ) -> Tuple[List[RentPayment], int]:
        stmt = select(RentPayment)
        if landlord_id is not None:
            stmt = stmt.join(House, House.id == RentPayment.house_id).where(
                House.landlord_id == landlord_id
            )
        if tenant_id is not None:
            stmt = stmt.where(RentPayment.tenant_id == tenant_id)
        if house_id is not None:
            stmt = stmt.where(RentPayment.house_id == house_id)
        if status is not None:
            stmt = stmt.where(RentPayment.status == status)

        total = await self.db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await self.db.execute(
            stmt.order_by(RentPayment.due_date.desc(), RentPayment.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def create(self, data: dict) -> RentPayment:
        try:
            payment = RentPayment(**data)
            self.db.add(payment)
            await self.db.commit()
            return payment
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def create_many(self, rows: List[dict]) -> List[RentPayment]:
        try:
            payments = [RentPayment(**row) for row in rows]
            self.db.add_all(payments)
            await self.db.commit()
            return payments
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def update_fields(self, payment: RentPayment, values: dict) -> RentPayment:
        try:
            for field, value in values.items():
                setattr(payment, field, value)
            await self.db.commit()
            return payment
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def mark_overdue(self, today: date) -> int:
        try:
            result = await self.db.execute(
                update(RentPayment)
                .where(
                    RentPayment.status == PaymentStatus.PENDING,
                    RentPayment.due_date < today,
                )
                .values(status=PaymentStatus.OVERDUE, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete(self, payment: RentPayment) -> None:
        try:
            await self.db.delete(payment)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
