from models.enums import UserRole
from models.models import House, RentReminder


class RentReminderPolicy:
    @staticmethod
    async def can_write(house: House, actor) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        return actor.role == UserRole.LANDLORD and house.landlord_id == actor.id

    @staticmethod
    async def can_read(reminder: RentReminder, actor) -> bool:
        return actor.role == UserRole.ADMIN or actor.id in {
            reminder.landlord_id,
            reminder.tenant_id,
        }
