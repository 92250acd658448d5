import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.paginate import Page
from core.safe_handler import safe_handler
from core.throttling import rate_limit
from core.validators import validate_csrf_dependency
from models.models import User
from schemas.schema import (
    MessageOut,
    RentRequestCreate,
    RentRequestFilters,
    RentRequestOut,
    RentRequestStatusUpdate,
)
from services.rent_request_service import RentRequestService

router = APIRouter(tags=["Rent Requests"])


@cbv(router=router)
class RentRequestRoutes:
    @router.post(
        "", dependencies=[rate_limit], response_model=RentRequestOut, status_code=201
    )
    @safe_handler
    async def create(
        self,
        payload: RentRequestCreate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentRequestService(db).create_request(
            payload=payload, current_user=current_user
        )

    @router.get("", dependencies=[rate_limit], response_model=Page[RentRequestOut])
    @safe_handler
    async def list_requests(
        self,
        filters: Annotated[RentRequestFilters, Query()],
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentRequestService(db).list_requests(
            current_user=current_user, filters=filters, page=page, limit=limit
        )

    @router.get("/{request_id}", dependencies=[rate_limit], response_model=RentRequestOut)
    @safe_handler
    async def get_request(
        self,
        request_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentRequestService(db).get_request(
            request_id=request_id, current_user=current_user
        )

    @router.patch(
        "/{request_id}/status", dependencies=[rate_limit], response_model=RentRequestOut
    )
    @safe_handler
    async def update_status(
        self,
        request_id: uuid.UUID,
        payload: RentRequestStatusUpdate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentRequestService(db).transition_status(
            request_id=request_id, new_status=payload.status, current_user=current_user
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
        return await RentRequestService(db).delete_request(
            request_id=request_id, current_user=current_user
        )
