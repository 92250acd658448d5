from typing import FrozenSet

from models.enums import MaintenanceStatus, UserRole
from models.models import MaintenanceRequest

ALL_FIELDS = frozenset(
    {
        "house_id",
        "tenant_id",
        "landlord_id",
        "title",
        "description",
        "category",
        "priority",
        "status",
        "scheduled_date",
        "resolution_notes",
        "media_urls",
    }
)
LANDLORD_FIELDS = ALL_FIELDS - {"house_id", "tenant_id", "landlord_id"}
TENANT_FIELDS = frozenset({"description", "media_urls"})


class MaintenancePolicy:
    @staticmethod
    async def can_create(actor) -> bool:
        return actor.role == UserRole.TENANT

    @staticmethod
    async def can_read(request: MaintenanceRequest, actor) -> bool:
        return actor.role == UserRole.ADMIN or actor.id in {
            request.landlord_id,
            request.tenant_id,
        }

    @staticmethod
    async def editable_fields(request: MaintenanceRequest, actor) -> FrozenSet[str]:
        """Fields this actor may change right now; empty when no update is allowed."""
        if actor.role == UserRole.ADMIN:
            return ALL_FIELDS
        if actor.role == UserRole.LANDLORD and request.landlord_id == actor.id:
            return LANDLORD_FIELDS
        if (
            actor.role == UserRole.TENANT
            and request.tenant_id == actor.id
            and request.status == MaintenanceStatus.NEW
        ):
            return TENANT_FIELDS
        return frozenset()

    @staticmethod
    async def can_delete(request: MaintenanceRequest, actor) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        if actor.role == UserRole.LANDLORD:
            return request.landlord_id == actor.id
        if actor.role == UserRole.TENANT:
            return (
                request.tenant_id == actor.id
                and request.status == MaintenanceStatus.NEW
            )
        return False
