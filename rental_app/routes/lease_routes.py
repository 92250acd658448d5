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
from models.enums import LeaseStatus
from models.models import User
from schemas.schema import LeaseCreate, LeaseOut, LeaseUpdate, MessageOut, RentPaymentOut
from services.lease_service import LeaseService
from services.rent_payment_service import RentPaymentService

router = APIRouter(tags=["Lease Agreements"])


@cbv(router=router)
class LeaseRoutes:
    @router.post("", dependencies=[rate_limit], response_model=LeaseOut, status_code=201)
    @safe_handler
    async def create(
        self,
        payload: LeaseCreate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await LeaseService(db).create(payload=payload, current_user=current_user)

    @router.get("", dependencies=[rate_limit], response_model=Page[LeaseOut])
    @safe_handler
    async def list_leases(
        self,
        status: Optional[LeaseStatus] = Query(None),
        house_id: Optional[uuid.UUID] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await LeaseService(db).list_leases(
            current_user=current_user,
            status=status,
            house_id=house_id,
            page=page,
            limit=limit,
        )

    @router.get("/{lease_id}", dependencies=[rate_limit], response_model=LeaseOut)
    @safe_handler
    async def get_lease(
        self,
        lease_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await LeaseService(db).get_lease(lease_id=lease_id, current_user=current_user)

    @router.patch("/{lease_id}", dependencies=[rate_limit], response_model=LeaseOut)
    @safe_handler
    async def update(
        self,
        lease_id: uuid.UUID,
        payload: LeaseUpdate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await LeaseService(db).update(
            lease_id=lease_id, payload=payload, current_user=current_user
        )

    @router.post(
        "/{lease_id}/schedule-payments",
        dependencies=[rate_limit],
        response_model=list[RentPaymentOut],
        status_code=201,
    )
    @safe_handler
    async def schedule_payments(
        self,
        lease_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentPaymentService(db).schedule_for_lease(
            lease_id=lease_id, current_user=current_user
        )

    @router.delete("/{lease_id}", dependencies=[rate_limit], response_model=MessageOut)
    @safe_handler
    async def delete(
        self,
        lease_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await LeaseService(db).delete(lease_id=lease_id, current_user=current_user)
