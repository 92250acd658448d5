import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.paginate import Page
from core.safe_handler import safe_handler
from core.throttling import rate_limit
from core.validators import validate_csrf_dependency
from models.enums import PaymentStatus
from models.models import User
from schemas.schema import (
    ApplyPayment,
    MessageOut,
    RentPaymentCreate,
    RentPaymentOut,
    RentPaymentUpdate,
)
from services.rent_payment_service import RentPaymentService

router = APIRouter(tags=["Rent Payments"])


@cbv(router=router)
class RentPaymentRoutes:
    @router.post(
        "", dependencies=[rate_limit], response_model=RentPaymentOut, status_code=201
    )
    @safe_handler
    async def create(
        self,
        payload: RentPaymentCreate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentPaymentService(db).create(payload=payload, current_user=current_user)

    @router.get("", dependencies=[rate_limit], response_model=Page[RentPaymentOut])
    @safe_handler
    async def list_payments(
        self,
        status: Optional[PaymentStatus] = Query(None),
        house_id: Optional[uuid.UUID] = Query(None),
        tenant_id: Optional[uuid.UUID] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentPaymentService(db).list_payments(
            current_user=current_user,
            status=status,
            house_id=house_id,
            tenant_id=tenant_id,
            page=page,
            limit=limit,
        )

    @router.get("/{payment_id}", dependencies=[rate_limit], response_model=RentPaymentOut)
    @safe_handler
    async def get_payment(
        self,
        payment_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentPaymentService(db).get_payment(
            payment_id=payment_id, current_user=current_user
        )

    @router.patch("/{payment_id}", dependencies=[rate_limit], response_model=RentPaymentOut)
    @safe_handler
    async def update(
        self,
        payment_id: uuid.UUID,
        payload: RentPaymentUpdate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentPaymentService(db).update(
            payment_id=payment_id, payload=payload, current_user=current_user
        )

    @router.post(
        "/{payment_id}/apply", dependencies=[rate_limit], response_model=RentPaymentOut
    )
    @safe_handler
    async def apply_payment(
        self,
        payment_id: uuid.UUID,
        payload: ApplyPayment,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentPaymentService(db).apply_payment(
            payment_id=payment_id, payload=payload, current_user=current_user
        )

    @router.delete("/{payment_id}", dependencies=[rate_limit], response_model=MessageOut)
    @safe_handler
    async def delete(
        self,
        payment_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentPaymentService(db).delete(
            payment_id=payment_id, current_user=current_user
        )
