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
from schemas.schema import HouseCreate, HouseFilters, HouseOut, HouseUpdate, MessageOut
from services.house_service import HouseService

router = APIRouter(tags=["Houses"])


@cbv(router=router)
class HouseRoutes:
    @router.post("", dependencies=[rate_limit], response_model=HouseOut, status_code=201)
    @safe_handler
    async def create(
        self,
        payload: HouseCreate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await HouseService(db).create(payload=payload, current_user=current_user)

    @router.get("", dependencies=[rate_limit], response_model=Page[HouseOut])
    @safe_handler
    async def list_houses(
        self,
        filters: Annotated[HouseFilters, Query()],
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await HouseService(db).list_houses(filters=filters, page=page, limit=limit)

    @router.get("/mine", dependencies=[rate_limit], response_model=Page[HouseOut])
    @safe_handler
    async def my_houses(
        self,
        filters: Annotated[HouseFilters, Query()],
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await HouseService(db).list_by_landlord(
            landlord_id=current_user.id, filters=filters, page=page, limit=limit
        )

    @router.get("/{house_id}", dependencies=[rate_limit], response_model=HouseOut)
    @safe_handler
    async def get_house(
        self,
        house_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await HouseService(db).get_house(house_id=house_id)

    @router.patch("/{house_id}", dependencies=[rate_limit], response_model=HouseOut)
    @safe_handler
    async def update(
        self,
        house_id: uuid.UUID,
        payload: HouseUpdate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await HouseService(db).update(
            house_id=house_id, payload=payload, current_user=current_user
        )

    @router.delete("/{house_id}", dependencies=[rate_limit], response_model=MessageOut)
    @safe_handler
    async def delete(
        self,
        house_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        await HouseService(db).delete(house_id=house_id, current_user=current_user)
        return MessageOut(message="House deleted successfully")
