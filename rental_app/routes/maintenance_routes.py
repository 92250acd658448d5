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
from models.enums import MaintenancePriority, MaintenanceStatus
from models.models import User
from schemas.schema import MaintenanceCreate, MaintenanceOut, MaintenanceUpdate, MessageOut
from services.maintenance_service import MaintenanceService

router = APIRouter(tags=["Maintenance Requests"])


@cbv(router=router)
class MaintenanceRoutes:
    @router.post(
        "", dependencies=[rate_limit], response_model=MaintenanceOut, status_code=201
    )
    @safe_handler
    async def create(
        self,
        payload: MaintenanceCreate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await MaintenanceService(db).create(payload=payload, current_user=current_user)

    @router.get("", dependencies=[rate_limit], response_model=Page[MaintenanceOut])
    @safe_handler
    async def list_requests(
        self,
        status: Optional[MaintenanceStatus] = Query(None),
        priority: Optional[MaintenancePriority] = Query(None),
        house_id: Optional[uuid.UUID] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await MaintenanceService(db).list_requests(
            current_user=current_user,
            status=status,
            priority=priority,
            house_id=house_id,
            page=page,
            limit=limit,
        )

    @router.get("/{request_id}", dependencies=[rate_limit], response_model=MaintenanceOut)
    @safe_handler
    async def get_request(
        self,
        request_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await MaintenanceService(db).get_request(
            request_id=request_id, current_user=current_user
        )

    @router.patch("/{request_id}", dependencies=[rate_limit], response_model=MaintenanceOut)
    @safe_handler
    async def update(
        self,
        request_id: uuid.UUID,
        payload: MaintenanceUpdate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await MaintenanceService(db).update(
            request_id=request_id, payload=payload, current_user=current_user
        )

    @router.delete("/{request_id}", dependencies=[rate_limit], response_model=MessageOut)
    @safe_handler
    async def delete(
        self,
        request_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await MaintenanceService(db).delete(
            request_id=request_id, current_user=current_user
        )
