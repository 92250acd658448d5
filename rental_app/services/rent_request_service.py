import logging
import uuid
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from core.breaker import breaker
from core.cache import cache
from core.exceptions import (
    AuthorizationError,
    ConflictError,
    HouseNotAvailableError,
    NotFoundError,
    ServerError,
    ValidationError,
)
from core.event_publish import publish_event
from core.get_db import atomic
from core.house_lock import HouseLockRegistry, house_locks
from core.paginate import Page, PaginatePage
from core.validate_enum import validate_enum
from models.enums import HouseStatus, NotificationType, RentRequestStatus, UserRole
from models.models import House, RentRequest
from policy.rent_request_policy import RentRequestPolicy
from repos.house_repo import HouseRepo
from repos.rent_request_repo import RentRequestRepo
from schemas.schema import MessageOut, RentRequestCreate, RentRequestFilters, RentRequestOut
from services.house_service import HOUSE_CACHE_PATTERN, HouseService
from services.notification_service import NotificationService
from services.rent_request_machine import TransitionPlan, plan_transition

logger = logging.getLogger(__name__)

STATUS_NOTIFICATIONS = {
    RentRequestStatus.ACCEPTED: NotificationType.RENT_REQUEST_ACCEPTED,
    RentRequestStatus.REJECTED: NotificationType.RENT_REQUEST_REJECTED,
    RentRequestStatus.CANCELLED: NotificationType.RENT_REQUEST_CANCELLED,
    RentRequestStatus.PENDING: NotificationType.RENT_REQUEST_PENDING,
}

DUPLICATE_PENDING = "You already have a pending rent request for this house."


class RentRequestService:
    """Creates rent requests and drives their status changes.

    Every change that touches house occupancy runs under the per-house lock
    and inside a single transaction: the house row is re-read, occupancy is
    changed through ``HouseService.set_occupancy``, competing pending requests
    are rejected and the target request is updated, then everything commits
    together or not at all.
    """

    def __init__(
        self,
        db,
        locks: HouseLockRegistry = house_locks,
        events=publish_event,
        notifier: NotificationService | None = None,
    ):
        self.db = db
        self.repo: RentRequestRepo = RentRequestRepo(db)
        self.house_repo: HouseRepo = HouseRepo(db)
        self.houses: HouseService = HouseService(db, events=events)
        self.notifier: NotificationService = notifier or NotificationService(db)
        self.paginate: PaginatePage = PaginatePage()
        self.locks = locks
        self.events = events

    async def _load(self, request_id: uuid.UUID) -> tuple[RentRequest, House]:
        request = await self.repo.get_by_id(request_id)
        if not request:
            raise NotFoundError("Rent request not found")
        house = await self.house_repo.get_by_id(request.house_id)
        if not house:
            raise ServerError("Associated house not found for rent request")
        return request, house

    async def create_request(self, payload: RentRequestCreate, current_user) -> RentRequestOut:
        async def handler():
            if not await RentRequestPolicy.can_create(current_user):
                raise AuthorizationError("Only tenants can create rent requests.")

            async with self.locks.hold(payload.house_id):
                try:
                    async with atomic(self.db):
                        house = await self.house_repo.get_for_update(payload.house_id)
                        if not house:
                            raise NotFoundError("House not found")
                        if house.status != HouseStatus.AVAILABLE:
                            raise HouseNotAvailableError("House Not Available")
                        if house.landlord_id == current_user.id:
                            raise ValidationError(
                                "You cannot send a rent request for your own house."
                            )
                        if await self.repo.has_pending(current_user.id, house.id):
                            raise ConflictError(DUPLICATE_PENDING)

                        request = await self.repo.add(
                            {
                                "user_id": current_user.id,
                                "house_id": house.id,
                                "message": payload.message,
                                "status": RentRequestStatus.PENDING,
                            }
                        )
                except IntegrityError:
                    raise ConflictError(DUPLICATE_PENDING)

            out = RentRequestOut.model_validate(request)
            landlord_id, title = house.landlord_id, house.title
            logger.info(
                "Rent request %s created by %s for house %s",
                out.id,
                current_user.id,
                out.house_id,
            )

            await self.notifier.notify(
                landlord_id,
                NotificationType.RENT_REQUEST_CREATED,
                f"New rent request for '{title}'.",
                source_id=out.id,
            )
            await self.events(
                "rent_request.created",
                {
                    "request_id": str(out.id),
                    "house_id": str(out.house_id),
                    "user_id": str(out.user_id),
                },
            )
            return out

        return await breaker.call(handler)

    async def _apply(
        self, plan: TransitionPlan, request: RentRequest, house: House
    ) -> tuple[List[RentRequest], bool]:
        auto_rejected: List[RentRequest] = []
        occupancy_changed = False

        if plan.occupy_house:
            if house.status != HouseStatus.AVAILABLE:
                raise HouseNotAvailableError("House is no longer available.")
            await self.houses.set_occupancy(house, HouseStatus.RENTED, request.user_id)
            occupancy_changed = True

        if plan.reject_siblings:
            auto_rejected = await self.repo.reject_pending_siblings(house.id, request.id)

        if plan.release_if_occupant and house.tenant_id == request.user_id:
            await self.houses.set_occupancy(house, HouseStatus.AVAILABLE, None)
            occupancy_changed = True

        if plan.check_duplicate_pending and await self.repo.has_pending(
            request.user_id, house.id, exclude_id=request.id
        ):
            raise ConflictError(
                "The tenant already has another pending request for this house."
            )

        await self.repo.set_status(request, plan.target)
        return auto_rejected, occupancy_changed

    async def transition_status(
        self, request_id: uuid.UUID, new_status, current_user
    ) -> RentRequestOut:
        async def handler():
            target = validate_enum(new_status, RentRequestStatus, field="status")
            request, _ = await self._load(request_id)
            house_id = request.house_id

            async with self.locks.hold(house_id):
                try:
                    async with atomic(self.db):
                        request = await self.repo.get_by_id(request_id)
                        if not request:
                            raise NotFoundError("Rent request not found")
                        house = await self.house_repo.get_for_update(house_id)
                        if not house:
                            raise ServerError("Associated house not found for rent request")

                        kind = await RentRequestPolicy.actor_kind(current_user, request, house)
                        if kind is None:
                            raise AuthorizationError(
                                "You are not authorized to update this rent request."
                            )
                        if not await RentRequestPolicy.can_set_status(kind, target):
                            raise AuthorizationError(
                                f"As {kind.value} you cannot set a rent request to {target.value}."
                            )

                        plan = plan_transition(request.status, target, kind)
                        auto_rejected, occupancy_changed = await self._apply(
                            plan, request, house
                        )
                except StaleDataError:
                    raise ConflictError(
                        "The house was modified concurrently. Please retry."
                    )
                except IntegrityError:
                    raise ConflictError(DUPLICATE_PENDING)

            out = RentRequestOut.model_validate(request)
            landlord_id, title = house.landlord_id, house.title
            rejected_users = [(r.id, r.user_id) for r in auto_rejected]
            logger.info(
                "Rent request %s: %s -> %s by %s (%s auto-rejected)",
                out.id,
                plan.previous.value,
                plan.target.value,
                current_user.id,
                len(rejected_users),
            )

            await self._after_transition(
                out, plan, current_user, landlord_id, title, rejected_users
            )
            if occupancy_changed:
                await cache.delete_cache_keys_async(HOUSE_CACHE_PATTERN)
            return out

        return await breaker.call(handler)

    async def _after_transition(
        self, out, plan, current_user, landlord_id, title, rejected_users
    ) -> None:
        message = f"Rent request for '{title}' is now {plan.target.value}."
        if current_user.id != out.user_id:
            await self.notifier.notify(
                out.user_id, STATUS_NOTIFICATIONS[plan.target], message, out.id
            )
        if current_user.id != landlord_id and plan.target == RentRequestStatus.CANCELLED:
            await self.notifier.notify(
                landlord_id, STATUS_NOTIFICATIONS[plan.target], message, out.id
            )
        for sibling_id, user_id in rejected_users:
            await self.notifier.notify(
                user_id,
                NotificationType.RENT_REQUEST_REJECTED,
                f"Your rent request for '{title}' was rejected: the house is no longer available.",
                sibling_id,
            )

        await self.events(
            f"rent_request.{plan.target.value}",
            {
                "request_id": str(out.id),
                "house_id": str(out.house_id),
                "previous_status": plan.previous.value,
                "auto_rejected": [str(sid) for sid, _ in rejected_users],
            },
        )

    async def get_request(self, request_id: uuid.UUID, current_user) -> RentRequestOut:
        async def handler():
            request, house = await self._load(request_id)
            if not await RentRequestPolicy.can_view(current_user, request, house):
                raise AuthorizationError("You are not authorized to view this rent request.")
            return RentRequestOut.model_validate(request)

        return await breaker.call(handler)

    async def list_requests(
        self,
        current_user,
        filters: RentRequestFilters | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[RentRequestOut]:
        async def handler():
            page_no, page_limit = self.paginate.normalize(page, limit)
            criteria = (filters or RentRequestFilters()).model_dump(exclude_none=True)

            if current_user.role == UserRole.TENANT:
                if criteria.get("user_id", current_user.id) != current_user.id:
                    raise AuthorizationError("Tenants can only list their own requests.")
                criteria.pop("landlord_id", None)
                criteria["user_id"] = current_user.id
            elif current_user.role == UserRole.LANDLORD:
                if criteria.get("landlord_id", current_user.id) != current_user.id:
                    raise AuthorizationError(
                        "Landlords can only list requests for their own houses."
                    )
                criteria["landlord_id"] = current_user.id
            elif current_user.role != UserRole.ADMIN:
                raise AuthorizationError("Access Denied")

            items, total = await self.repo.list(
                offset=self.paginate.offset(page_no, page_limit),
                limit=page_limit,
                **criteria,
            )
            return self.paginate.build(items, total, page_no, page_limit, RentRequestOut)

        return await breaker.call(handler)

    async def delete_request(self, request_id: uuid.UUID, current_user) -> MessageOut:
        async def handler():
            request, house = await self._load(request_id)
            if not await RentRequestPolicy.can_delete(current_user, request, house):
                raise AuthorizationError("You are not authorized to delete this rent request.")

            released = False
            async with self.locks.hold(house.id):
                try:
                    async with atomic(self.db):
                        request = await self.repo.get_by_id(request_id)
                        if not request:
                            raise NotFoundError("Rent request not found")
                        house = await self.house_repo.get_for_update(request.house_id)
                        if (
                            request.status == RentRequestStatus.ACCEPTED
                            and house.tenant_id == request.user_id
                        ):
                            await self.houses.set_occupancy(
                                house, HouseStatus.AVAILABLE, None
                            )
                            released = True
                        await self.repo.delete(request)
                except StaleDataError:
                    raise ConflictError(
                        "The house was modified concurrently. Please retry."
                    )

            logger.info(
                "Rent request %s deleted by %s (house released: %s)",
                request_id,
                current_user.id,
                released,
            )
            if released:
                await cache.delete_cache_keys_async(HOUSE_CACHE_PATTERN)
            await self.events(
                "rent_request.deleted",
                {"request_id": str(request_id), "house_released": released},
            )
            return MessageOut(message="Rent request deleted successfully")

        return await breaker.call(handler)
