from models.enums import UserRole
from models.models import House, LeaseAgreement


class LeasePolicy:
    @staticmethod
    async def can_write(house: House, actor) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        return actor.role == UserRole.LANDLORD and house.landlord_id == actor.id

    @staticmethod
    async def can_read(lease: LeaseAgreement, actor) -> bool:
        return actor.role == UserRole.ADMIN or actor.id in {
            lease.landlord_id,
            lease.tenant_id,
        }
