import logging
import uuid
from typing import List, Sequence

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.settings import settings
from models.enums import NotificationType
from models.models import Notification
from policy.notification_policy import NotificationPolicy
from repos.notification_repo import NotificationRepo
from schemas.schema import CountOut, NotificationOut

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db):
        self.db = db
        self.repo: NotificationRepo = NotificationRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()

    async def create(
        self,
        user_id: uuid.UUID,
        type: NotificationType,
        message: str,
        source_id: uuid.UUID | None = None,
    ) -> Notification:
        if not message or not message.strip():
            raise ValidationError("Notification message cannot be empty.")
        return await self.repo.create(
            user_id=user_id, type=type, message=message.strip(), source_id=source_id
        )

    async def notify(
        self,
        user_id: uuid.UUID,
        type: NotificationType,
        message: str,
        source_id: uuid.UUID | None = None,
    ) -> Notification | None:
        """Best-effort create; delivery problems are logged and never raised."""
        try:
            return await self.create(user_id, type, message, source_id)
        except Exception as e:
            logger.warning(
                "Failed to notify user %s (%s): %s", user_id, type.value, e
            )
            return None

    async def list_for_user(
        self,
        current_user,
        is_read: bool | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> List[NotificationOut]:
        async def handler():
            await self.permission.check_authenticated(current_user=current_user)
            page_limit = limit or settings.DEFAULT_PAGE_LIMIT
            if page_limit < 1 or page_limit > settings.MAX_PAGE_LIMIT or offset < 0:
                raise ValidationError("Invalid limit or offset.")
            items = await self.repo.find_by_user(
                current_user.id, is_read=is_read, limit=page_limit, offset=offset
            )
            return [NotificationOut.model_validate(item) for item in items]

        return await breaker.call(handler)

    async def get(self, notification_id: uuid.UUID, current_user) -> NotificationOut:
        async def handler():
            notification = await self.repo.get_by_id(notification_id)
            if not notification:
                raise NotFoundError("Notification not found")
            if not await NotificationPolicy.owns_all([notification], current_user):
                raise AuthorizationError("You are not authorized to view this notification.")
            return NotificationOut.model_validate(notification)

        return await breaker.call(handler)

    async def _owned(self, ids: Sequence[uuid.UUID], current_user) -> List[Notification]:
        unique_ids = list(dict.fromkeys(ids))
        notifications = await self.repo.get_many(unique_ids)
        if len(notifications) != len(unique_ids):
            raise NotFoundError("One or more notifications not found")
        if not await NotificationPolicy.owns_all(notifications, current_user):
            raise AuthorizationError(
                "You are not authorized to modify one or more of these notifications."
            )
        return notifications

    async def mark_read(self, ids: Sequence[uuid.UUID], current_user) -> CountOut:
        async def handler():
            notifications = await self._owned(ids, current_user)
            count = await self.repo.mark_read([n.id for n in notifications])
            return CountOut(count=count)

        return await breaker.call(handler)

    async def mark_all_read(self, current_user) -> CountOut:
        async def handler():
            await self.permission.check_authenticated(current_user=current_user)
            return CountOut(count=await self.repo.mark_all_read(current_user.id))

        return await breaker.call(handler)

    async def delete(self, ids: Sequence[uuid.UUID], current_user) -> CountOut:
        async def handler():
            notifications = await self._owned(ids, current_user)
            count = await self.repo.delete_many([n.id for n in notifications])
            return CountOut(count=count)

        return await breaker.call(handler)

    async def delete_all_for_user(self, current_user) -> CountOut:
        async def handler():
            await self.permission.check_authenticated(current_user=current_user)
            return CountOut(count=await self.repo.delete_all_for_user(current_user.id))

        return await breaker.call(handler)
