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
    RentReminderCreate,
    RentReminderFilters,
    RentReminderOut,
    RentReminderUpdate,
)
from services.rent_reminder_service import RentReminderService

router = APIRouter(tags=["Rent Reminders"])


@cbv(router=router)
class RentReminderRoutes:
    @router.post(
        "", dependencies=[rate_limit], response_model=RentReminderOut, status_code=201
    )
    @safe_handler
    async def create(
        self,
        payload: RentReminderCreate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentReminderService(db).create(payload=payload, current_user=current_user)

    @router.get("", dependencies=[rate_limit], response_model=Page[RentReminderOut])
    @safe_handler
    async def list_reminders(
        self,
        filters: Annotated[RentReminderFilters, Query()],
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentReminderService(db).list_reminders(
            current_user=current_user, filters=filters, page=page, limit=limit
        )

    @router.get("/{reminder_id}", dependencies=[rate_limit], response_model=RentReminderOut)
    @safe_handler
    async def get_reminder(
        self,
        reminder_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentReminderService(db).get_reminder(
            reminder_id=reminder_id, current_user=current_user
        )

    @router.patch(
        "/{reminder_id}", dependencies=[rate_limit], response_model=RentReminderOut
    )
    @safe_handler
    async def update(
        self,
        reminder_id: uuid.UUID,
        payload: RentReminderUpdate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentReminderService(db).update(
            reminder_id=reminder_id, payload=payload, current_user=current_user
        )

    @router.post(
        "/{reminder_id}/mark-sent",
        dependencies=[rate_limit],
        response_model=RentReminderOut,
    )
    @safe_handler
    async def mark_sent(
        self,
        reminder_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentReminderService(db).mark_sent(
            reminder_id=reminder_id, current_user=current_user
        )

    @router.delete("/{reminder_id}", dependencies=[rate_limit], response_model=MessageOut)
    @safe_handler
    async def delete(
        self,
        reminder_id: uuid.UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_async),
        _: None = Depends(validate_csrf_dependency),
    ):
        return await RentReminderService(db).delete(
            reminder_id=reminder_id, current_user=current_user
        )
