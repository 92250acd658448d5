from models.enums import UserRole
from models.models import House


class HousePolicy:
    @staticmethod
    async def can_create(actor) -> bool:
        return actor.role in {UserRole.LANDLORD, UserRole.ADMIN}

    @staticmethod
    async def can_manage(house: House, actor) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        return actor.role == UserRole.LANDLORD and house.landlord_id == actor.id
