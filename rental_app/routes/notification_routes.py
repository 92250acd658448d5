import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from core.throttling import rate_limit
from core.validators import validate_csrf_dependency
from models.models import User
from schemas.schema import CountOut, NotificationIds, NotificationOut
from services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


@cbv(router=router)
class NotificationRoutes:
    @router.get("", dependencies=[rate_limit], response_model=List[NotificationOut])
    @safe_handler
    async def list_notifications(
        self,
        is_read: Optional[bool] = Query(None),
        limit: int = Query(10, ge=1, le=100),
        offset: int = Query(0, ge=0),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await NotificationService(db).list_for_user(
            current_user=current_user, is_read=is_read, limit=limit, offset=offset
        )

    @router.get(
        "/{notification_id}", dependencies=[rate_limit], response_model=NotificationOut
    )
    @safe_handler
    async def get_notification(
        self,
        notification_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await NotificationService(db).get(
            notification_id=notification_id, current_user=current_user
        )

    @router.post("/mark-read", dependencies=[rate_limit], response_model=CountOut)
    @safe_handler
    async def mark_read(
        self,
        payload: NotificationIds,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await NotificationService(db).mark_read(
            ids=payload.ids, current_user=current_user
        )

    @router.post("/read-all", dependencies=[rate_limit], response_model=CountOut)
    @safe_handler
    async def mark_all_read(
        self,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await NotificationService(db).mark_all_read(current_user=current_user)

    @router.post("/delete", dependencies=[rate_limit], response_model=CountOut)
    @safe_handler
    async def delete_many(
        self,
        payload: NotificationIds,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await NotificationService(db).delete(
            ids=payload.ids, current_user=current_user
        )

    @router.delete("", dependencies=[rate_limit], response_model=CountOut)
    @safe_handler
    async def delete_all(
        self,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await NotificationService(db).delete_all_for_user(current_user=current_user)
