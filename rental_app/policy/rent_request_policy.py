from enum import Enum

from models.enums import RentRequestStatus, UserRole
from models.models import House, RentRequest


class RequestActor(str, Enum):
    LANDLORD = "landlord"
    TENANT = "tenant"
    ADMIN = "admin"


TRANSITION_RIGHTS = {
    RequestActor.LANDLORD: {RentRequestStatus.ACCEPTED, RentRequestStatus.REJECTED},
    RequestActor.TENANT: {RentRequestStatus.CANCELLED},
    RequestActor.ADMIN: set(RentRequestStatus),
}


class RentRequestPolicy:
    @staticmethod
    async def can_create(actor) -> bool:
        return actor.role == UserRole.TENANT

    @staticmethod
    async def actor_kind(actor, request: RentRequest, house: House) -> RequestActor | None:
        """How the actor relates to this request, or None when unrelated."""
        if actor.role == UserRole.ADMIN:
            return RequestActor.ADMIN
        if actor.role == UserRole.LANDLORD and house.landlord_id == actor.id:
            return RequestActor.LANDLORD
        if actor.role == UserRole.TENANT and request.user_id == actor.id:
            return RequestActor.TENANT
        return None

    @staticmethod
    async def can_set_status(kind: RequestActor, new_status: RentRequestStatus) -> bool:
        return new_status in TRANSITION_RIGHTS[kind]

    @staticmethod
    async def can_view(actor, request: RentRequest, house: House) -> bool:
        return await RentRequestPolicy.actor_kind(actor, request, house) is not None

    @staticmethod
    async def can_delete(actor, request: RentRequest, house: House) -> bool:
        return await RentRequestPolicy.actor_kind(actor, request, house) is not None
