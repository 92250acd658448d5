from typing import Iterable

from models.models import Notification


class NotificationPolicy:
    @staticmethod
    async def owns_all(notifications: Iterable[Notification], actor) -> bool:
        return all(n.user_id == actor.id for n in notifications)
