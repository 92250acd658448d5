import logging
import uuid

from core.breaker import breaker
from core.date_helper import utcnow
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.paginate import Page, PaginatePage
from models.enums import MaintenancePriority, MaintenanceStatus, NotificationType, UserRole
from models.models import MaintenanceRequest
from policy.maintenance_policy import MaintenancePolicy
from repos.house_repo import HouseRepo
from repos.maintenance_repo import MaintenanceRepo
from schemas.schema import MaintenanceCreate, MaintenanceOut, MaintenanceUpdate, MessageOut
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

NON_NULLABLE = frozenset(
    {
        "house_id",
        "tenant_id",
        "landlord_id",
        "title",
        "description",
        "priority",
        "status",
        "media_urls",
    }
)


class MaintenanceService:
    def __init__(self, db, notifier: NotificationService | None = None):
        self.repo: MaintenanceRepo = MaintenanceRepo(db)
        self.house_repo: HouseRepo = HouseRepo(db)
        self.notifier: NotificationService = notifier or NotificationService(db)
        self.paginate: PaginatePage = PaginatePage()

    async def _get(self, request_id: uuid.UUID) -> MaintenanceRequest:
        request = await self.repo.get_by_id(request_id)
        if not request:
            raise NotFoundError("Maintenance request not found")
        return request

    async def create(self, payload: MaintenanceCreate, current_user) -> MaintenanceOut:
        async def handler():
            if not await MaintenancePolicy.can_create(current_user):
                raise AuthorizationError("Only tenants can submit maintenance requests.")
            house = await self.house_repo.get_by_id(payload.house_id)
            if not house:
                raise NotFoundError("House not found")
            if house.tenant_id != current_user.id:
                raise AuthorizationError("You can only report issues for the house you rent.")

            request = await self.repo.create(
                {
                    **payload.model_dump(),
                    "tenant_id": current_user.id,
                    "landlord_id": house.landlord_id,
                    "status": MaintenanceStatus.NEW,
                }
            )
            out = MaintenanceOut.model_validate(request)
            await self.notifier.notify(
                out.landlord_id,
                NotificationType.MAINTENANCE_UPDATE,
                f"New maintenance request: {out.title}",
                out.id,
            )
            return out

        return await breaker.call(handler)

    async def get_request(self, request_id: uuid.UUID, current_user) -> MaintenanceOut:
        async def handler():
            request = await self._get(request_id)
            if not await MaintenancePolicy.can_read(request, current_user):
                raise AuthorizationError(
                    "You are not authorized to view this maintenance request."
                )
            return MaintenanceOut.model_validate(request)

        return await breaker.call(handler)

    async def list_requests(
        self,
        current_user,
        status: MaintenanceStatus | None = None,
        priority: MaintenancePriority | None = None,
        house_id: uuid.UUID | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[MaintenanceOut]:
        async def handler():
            page_no, page_limit = self.paginate.normalize(page, limit)
            scope = {}
            if current_user.role == UserRole.TENANT:
                scope["tenant_id"] = current_user.id
            elif current_user.role == UserRole.LANDLORD:
                scope["landlord_id"] = current_user.id
            elif current_user.role != UserRole.ADMIN:
                raise AuthorizationError("Access Denied")

            items, total = await self.repo.list(
                offset=self.paginate.offset(page_no, page_limit),
                limit=page_limit,
                status=status,
                priority=priority,
                house_id=house_id,
                **scope,
            )
            return self.paginate.build(items, total, page_no, page_limit, MaintenanceOut)

        return await breaker.call(handler)

    async def update(
        self, request_id: uuid.UUID, payload: MaintenanceUpdate, current_user
    ) -> MaintenanceOut:
        async def handler():
            request = await self._get(request_id)
            allowed = await MaintenancePolicy.editable_fields(request, current_user)
            if not allowed:
                raise AuthorizationError(
                    "You are not authorized to update this maintenance request."
                )

            given = payload.model_dump(exclude_unset=True)
            refused = set(given) - allowed
            if refused:
                raise AuthorizationError(
                    f"You cannot update: {', '.join(sorted(refused))}."
                )
            if not given:
                raise ValidationError("No valid fields provided for update.")
            nulls = {k for k, v in given.items() if v is None} & NON_NULLABLE
            if nulls:
                raise ValidationError(f"Fields cannot be null: {', '.join(sorted(nulls))}.")
            if "house_id" in given and not await self.house_repo.get_by_id(given["house_id"]):
                raise NotFoundError("House not found")

            previous_status = request.status
            new_status = given.get("status", previous_status)
            if new_status != previous_status:
                given["completed_at"] = (
                    utcnow() if new_status == MaintenanceStatus.COMPLETED else None
                )

            request = await self.repo.update_fields(request, given)
            out = MaintenanceOut.model_validate(request)

            if new_status != previous_status and current_user.id != out.tenant_id:
                await self.notifier.notify(
                    out.tenant_id,
                    NotificationType.MAINTENANCE_UPDATE,
                    f"Maintenance request '{out.title}' is now {new_status.value}.",
                    out.id,
                )
            return out

        return await breaker.call(handler)

    async def delete(self, request_id: uuid.UUID, current_user) -> MessageOut:
        async def handler():
            request = await self._get(request_id)
            if not await MaintenancePolicy.can_delete(request, current_user):
                raise AuthorizationError(
                    "You are not authorized to delete this maintenance request."
                )
            await self.repo.delete(request)
            logger.info("Maintenance request %s deleted by %s", request_id, current_user.id)
            return MessageOut(message="Maintenance request deleted successfully")

        return await breaker.call(handler)
