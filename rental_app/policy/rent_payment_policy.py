from models.enums import UserRole
from models.models import House, RentPayment


class RentPaymentPolicy:
    @staticmethod
    async def can_manage(house: House, actor) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        return actor.role == UserRole.LANDLORD and house.landlord_id == actor.id

    @staticmethod
    async def can_read(payment: RentPayment, house: House, actor) -> bool:
        if await RentPaymentPolicy.can_manage(house, actor):
            return True
        return actor.role == UserRole.TENANT and payment.tenant_id == actor.id

    @staticmethod
    async def can_pay(payment: RentPayment, house: House, actor) -> bool:
        return await RentPaymentPolicy.can_read(payment, house, actor)
