import logging
import uuid

from core.breaker import breaker
from core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from core.event_publish import publish_event
from core.paginate import Page, PaginatePage
from models.enums import LeaseStatus, UserRole
from models.models import LeaseAgreement
from policy.lease_policy import LeasePolicy
from repos.house_repo import HouseRepo
from repos.lease_repo import LeaseRepo
from repos.user_repo import UserRepo
from schemas.schema import LeaseCreate, LeaseOut, LeaseUpdate, MessageOut

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "start_date",
    "end_date",
    "rent_amount",
    "deposit_amount",
    "terms",
    "status",
    "document_url",
}
BLOCKING_STATUSES = {LeaseStatus.PENDING, LeaseStatus.ACTIVE}


class LeaseService:
    def __init__(self, db, events=publish_event):
        self.repo: LeaseRepo = LeaseRepo(db)
        self.house_repo: HouseRepo = HouseRepo(db)
        self.user_repo: UserRepo = UserRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.events = events

    async def _get(self, lease_id: uuid.UUID) -> LeaseAgreement:
        lease = await self.repo.get_by_id(lease_id)
        if not lease:
            raise NotFoundError("Lease agreement not found")
        return lease

    async def _writable(self, lease_id: uuid.UUID, current_user) -> LeaseAgreement:
        lease = await self._get(lease_id)
        house = await self.house_repo.get_by_id(lease.house_id)
        if not house or not await LeasePolicy.can_write(house, current_user):
            raise AuthorizationError("You are not authorized to modify this lease.")
        return lease

    async def _ensure_no_overlap(self, house_id, start_date, end_date, exclude_id=None):
        overlapping = await self.repo.find_overlapping(
            house_id, start_date, end_date, exclude_id=exclude_id
        )
        if overlapping:
            raise ConflictError(
                "Lease dates overlap an existing pending or active lease for this house."
            )

    async def create(self, payload: LeaseCreate, current_user) -> LeaseOut:
        async def handler():
            house = await self.house_repo.get_by_id(payload.house_id)
            if not house:
                raise NotFoundError("House not found")
            if not await LeasePolicy.can_write(house, current_user):
                raise AuthorizationError(
                    "Only the landlord of this house can create a lease for it."
                )

            tenant = await self.user_repo.get_by_id(payload.tenant_id)
            if not tenant or tenant.role != UserRole.TENANT:
                raise NotFoundError("Tenant not found")

            if payload.status in BLOCKING_STATUSES:
                await self._ensure_no_overlap(
                    house.id, payload.start_date, payload.end_date
                )

            lease = await self.repo.create(
                {**payload.model_dump(), "landlord_id": house.landlord_id}
            )
            out = LeaseOut.model_validate(lease)
            logger.info("Lease %s created for house %s", out.id, out.house_id)
            await self.events(
                "lease.created",
                {"lease_id": str(out.id), "house_id": str(out.house_id)},
            )
            return out

        return await breaker.call(handler)

    async def get_lease(self, lease_id: uuid.UUID, current_user) -> LeaseOut:
        async def handler():
            lease = await self._get(lease_id)
            if not await LeasePolicy.can_read(lease, current_user):
                raise AuthorizationError("You are not authorized to view this lease.")
            return LeaseOut.model_validate(lease)

        return await breaker.call(handler)

    async def list_leases(
        self,
        current_user,
        status: LeaseStatus | None = None,
        house_id: uuid.UUID | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[LeaseOut]:
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
                house_id=house_id,
                **scope,
            )
            return self.paginate.build(items, total, page_no, page_limit, LeaseOut)

        return await breaker.call(handler)

    async def update(self, lease_id: uuid.UUID, payload: LeaseUpdate, current_user) -> LeaseOut:
        async def handler():
            lease = await self._writable(lease_id, current_user)
            values = {
                k: v
                for k, v in payload.model_dump(exclude_unset=True).items()
                if k in UPDATABLE_FIELDS
            }
            if not values:
                raise ValidationError("No valid fields provided for update.")
            if any(v is None for k, v in values.items() if k not in {"terms", "document_url"}):
                raise ValidationError("Lease fields cannot be set to null.")

            start = values.get("start_date", lease.start_date)
            end = values.get("end_date", lease.end_date)
            if start >= end:
                raise ValidationError("start_date must be before end_date")
            if values.get("status", lease.status) in BLOCKING_STATUSES:
                await self._ensure_no_overlap(lease.house_id, start, end, exclude_id=lease.id)

            lease = await self.repo.update_fields(lease, values)
            return LeaseOut.model_validate(lease)

        return await breaker.call(handler)

    async def delete(self, lease_id: uuid.UUID, current_user) -> MessageOut:
        async def handler():
            lease = await self._writable(lease_id, current_user)
            await self.repo.delete(lease)
            logger.info("Lease %s deleted by %s", lease_id, current_user.id)
            return MessageOut(message="Lease agreement deleted successfully")

        return await breaker.call(handler)
