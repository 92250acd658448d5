import json
import logging
import uuid

from core.breaker import breaker
from core.cache import cache
from core.exceptions import AuthorizationError, NotFoundError, ServerError, ValidationError
from core.event_publish import publish_event
from core.paginate import Page, PaginatePage
from core.settings import settings
from models.enums import HouseStatus
from models.models import House
from policy.house_policy import HousePolicy
from repos.house_repo import HouseRepo
from schemas.schema import HouseCreate, HouseFilters, HouseOut, HouseUpdate

logger = logging.getLogger(__name__)

HOUSE_CACHE_PATTERN = "houses:*"
UPDATABLE_FIELDS = {
    "title",
    "description",
    "address",
    "rent_amount",
    "bedrooms",
    "bathrooms",
    "image_url",
    "is_active",
    "rental_start_date",
}
OCCUPANCY_FIELDS = {"tenant_id", "status"}
NON_NULLABLE = frozenset(
    {"title", "description", "address", "rent_amount", "bedrooms", "bathrooms", "is_active"}
)


class HouseService:
    def __init__(self, db, events=publish_event):
        self.repo: HouseRepo = HouseRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.events = events

    async def get_or_404(self, house_id: uuid.UUID) -> House:
        house = await self.repo.get_by_id(house_id)
        if not house:
            raise NotFoundError("House not found")
        return house

    async def _owned(self, house_id: uuid.UUID, current_user) -> House:
        house = await self.get_or_404(house_id)
        if not await HousePolicy.can_manage(house, current_user):
            raise AuthorizationError("You are not the landlord of this house.")
        return house

    async def create(self, payload: HouseCreate, current_user) -> HouseOut:
        async def handler():
            if not await HousePolicy.can_create(current_user):
                raise AuthorizationError("Only landlords can list houses.")

            house = await self.repo.create(
                {
                    **payload.model_dump(),
                    "landlord_id": current_user.id,
                    "status": HouseStatus.AVAILABLE,
                    "tenant_id": None,
                    "is_active": True,
                }
            )
            out = HouseOut.model_validate(house)
            logger.info("House %s listed by %s", house.id, current_user.id)

            await cache.delete_cache_keys_async(HOUSE_CACHE_PATTERN)
            await self.events(
                "house.created",
                {"house_id": str(house.id), "landlord_id": str(current_user.id)},
            )
            return out

        return await breaker.call(handler)

    async def get_house(self, house_id: uuid.UUID) -> HouseOut:
        async def handler():
            return HouseOut.model_validate(await self.get_or_404(house_id))

        return await breaker.call(handler)

    async def list_houses(
        self,
        filters: HouseFilters | None = None,
        page: int | None = None,
        limit: int | None = None,
        landlord_id: uuid.UUID | None = None,
    ) -> Page[HouseOut]:
        async def handler():
            page_no, page_limit = self.paginate.normalize(page, limit)
            criteria = (filters or HouseFilters()).model_dump(exclude_none=True)
            cache_key = "houses:list:{}:{}:{}:{}".format(
                landlord_id or "all",
                json.dumps(criteria, sort_keys=True, default=str),
                page_no,
                page_limit,
            )
            cached = await cache.get_json(cache_key)
            if cached:
                return Page[HouseOut].model_validate(cached)

            items, total = await self.repo.list(
                offset=self.paginate.offset(page_no, page_limit),
                limit=page_limit,
                landlord_id=landlord_id,
                **criteria,
            )
            result = self.paginate.build(items, total, page_no, page_limit, HouseOut)
            await cache.set_json(
                cache_key,
                self.paginate.get_single_json_dumps(result),
                ttl=settings.CACHE_TTL,
            )
            return result

        return await breaker.call(handler)

    async def list_by_landlord(
        self,
        landlord_id: uuid.UUID,
        filters: HouseFilters | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[HouseOut]:
        return await self.list_houses(
            filters=filters, page=page, limit=limit, landlord_id=landlord_id
        )

    async def update(
        self, house_id: uuid.UUID, payload: HouseUpdate, current_user
    ) -> HouseOut:
        async def handler():
            house = await self._owned(house_id, current_user)
            given = payload.model_dump(exclude_unset=True)
            if OCCUPANCY_FIELDS & given.keys():
                raise ValidationError(
                    "Tenant and status can only change through a rent request."
                )
            values = {k: v for k, v in given.items() if k in UPDATABLE_FIELDS}
            if not values:
                raise ValidationError("No valid fields provided for update.")
            nulled = sorted(f for f in NON_NULLABLE if f in values and values[f] is None)
            if nulled:
                raise ValidationError(f"{', '.join(nulled)} cannot be null.")

            house = await self.repo.update_fields(house, values)
            out = HouseOut.model_validate(house)
            await cache.delete_cache_keys_async(HOUSE_CACHE_PATTERN)
            return out

        return await breaker.call(handler)

    async def set_occupancy(
        self, house: House, status: HouseStatus, tenant_id: uuid.UUID | None
    ) -> House:
        """Change status and tenant together inside the caller's transaction."""
        if (status == HouseStatus.RENTED) != (tenant_id is not None):
            raise ServerError(
                f"Refusing inconsistent occupancy: status={status.value}, tenant={tenant_id}"
            )
        logger.info(
            "House %s occupancy %s -> %s (tenant=%s)",
            house.id,
            house.status.value,
            status.value,
            tenant_id,
        )
        return await self.repo.set_occupancy(house, status, tenant_id)

    async def delete(self, house_id: uuid.UUID, current_user) -> None:
        async def handler():
            house = await self._owned(house_id, current_user)
            await self.repo.delete(house)
            logger.info("House %s deleted by %s", house_id, current_user.id)
            await cache.delete_cache_keys_async(HOUSE_CACHE_PATTERN)
            await self.events("house.deleted", {"house_id": str(house_id)})

        return await breaker.call(handler)
