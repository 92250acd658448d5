"""Integration tests for the rent request lifecycle."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from core.exceptions import (
    AuthorizationError,
    ConflictError,
    HouseNotAvailableError,
    InvalidStateError,
    ValidationError,
)
from core.house_lock import HouseLockRegistry
from models.enums import HouseStatus, NotificationType, RentRequestStatus, UserRole
from models.models import RentRequest
from repos.notification_repo import NotificationRepo
from repos.rent_request_repo import RentRequestRepo
from schemas.schema import RentRequestCreate
from services.rent_request_service import RentRequestService

pytestmark = pytest.mark.integration


def service(db, events=None):
    return RentRequestService(db, locks=HouseLockRegistry(), events=events or AsyncMock())


async def count_requests(db, house_id):
    return await db.scalar(
        select(func.count()).select_from(RentRequest).where(RentRequest.house_id == house_id)
    )


@pytest.mark.asyncio
async def test_create_request_is_pending_and_notifies_landlord(db, house, tenant, landlord, events):
    """A tenant request starts pending, notifies the landlord and publishes an event."""
    out = await service(db, events).create_request(
        RentRequestCreate(house_id=house.id, message="Can I view it Saturday?"), tenant
    )

    assert out.status == RentRequestStatus.PENDING
    assert out.user_id == tenant.id
    notes = await NotificationRepo(db).find_by_user(landlord.id)
    assert [n.type for n in notes] == [NotificationType.RENT_REQUEST_CREATED]
    events.assert_awaited_once()
    assert events.await_args.args[0] == "rent_request.created"


@pytest.mark.asyncio
async def test_accepting_one_request_rejects_the_others(db, house, tenant, other_tenant, landlord):
    """T1 and T2 apply, the landlord accepts T1: the house is rented and T2 rejected."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)
    p2 = await svc.create_request(RentRequestCreate(house_id=house.id), other_tenant)

    accepted = await svc.transition_status(p1.id, RentRequestStatus.ACCEPTED, landlord)

    assert accepted.status == RentRequestStatus.ACCEPTED
    await db.refresh(house)
    assert house.status == HouseStatus.RENTED
    assert house.tenant_id == tenant.id
    second = await RentRequestRepo(db).get_by_id(p2.id)
    assert second.status == RentRequestStatus.REJECTED
    assert not await RentRequestRepo(db).has_pending(other_tenant.id, house.id)

    notes = await NotificationRepo(db).find_by_user(other_tenant.id)
    assert NotificationType.RENT_REQUEST_REJECTED in {n.type for n in notes}

    with pytest.raises(InvalidStateError):
        await svc.transition_status(p2.id, RentRequestStatus.ACCEPTED, landlord)


@pytest.mark.asyncio
async def test_cancelling_accepted_request_releases_house(db, house, tenant, other_tenant, landlord):
    """The occupant cancels, the house is free again and another tenant may apply."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)
    await svc.transition_status(p1.id, RentRequestStatus.ACCEPTED, landlord)

    cancelled = await svc.transition_status(p1.id, RentRequestStatus.CANCELLED, tenant)

    assert cancelled.status == RentRequestStatus.CANCELLED
    await db.refresh(house)
    assert house.status == HouseStatus.AVAILABLE
    assert house.tenant_id is None

    p2 = await svc.create_request(RentRequestCreate(house_id=house.id), other_tenant)
    assert p2.status == RentRequestStatus.PENDING


@pytest.mark.asyncio
async def test_cancelling_pending_request_leaves_house_alone(db, house, tenant):
    """Cancelling a pending request has no effect on the house."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)

    await svc.transition_status(p1.id, RentRequestStatus.CANCELLED, tenant)

    await db.refresh(house)
    assert house.status == HouseStatus.AVAILABLE
    assert house.tenant_id is None


@pytest.mark.asyncio
async def test_request_for_rented_house_creates_nothing(db, make_house, landlord, tenant, other_tenant):
    """A rented house refuses new requests and no row is written."""
    rented = await make_house(landlord, tenant=tenant)

    with pytest.raises(HouseNotAvailableError):
        await service(db).create_request(RentRequestCreate(house_id=rented.id), other_tenant)

    assert await count_requests(db, rented.id) == 0


@pytest.mark.asyncio
async def test_requesting_own_house_is_refused(db, make_house, make_user):
    """A requester who is also the house's landlord gets a validation error."""
    owner = await make_user(UserRole.TENANT, "owner-tenant")
    own_house = await make_house(owner)

    with pytest.raises(ValidationError):
        await service(db).create_request(RentRequestCreate(house_id=own_house.id), owner)

    assert await count_requests(db, own_house.id) == 0


@pytest.mark.asyncio
async def test_landlords_cannot_create_requests(db, house, landlord):
    """Only tenants send rent requests."""
    with pytest.raises(AuthorizationError):
        await service(db).create_request(RentRequestCreate(house_id=house.id), landlord)


@pytest.mark.asyncio
async def test_duplicate_pending_request_conflicts(db, house, tenant):
    """A second pending request for the same house is a conflict."""
    svc = service(db)
    await svc.create_request(RentRequestCreate(house_id=house.id), tenant)

    with pytest.raises(ConflictError):
        await svc.create_request(RentRequestCreate(house_id=house.id), tenant)

    assert await count_requests(db, house.id) == 1


@pytest.mark.asyncio
async def test_concurrent_duplicate_creates_leave_one_pending(session_factory, house, tenant):
    """Racing creates for the same pair yield one pending row and one conflict."""
    locks = HouseLockRegistry()

    async def attempt():
        async with session_factory() as session:
            svc = RentRequestService(session, locks=locks, events=AsyncMock())
            return await svc.create_request(RentRequestCreate(house_id=house.id), tenant)

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

    conflicts = [r for r in results if isinstance(r, ConflictError)]
    created = [r for r in results if not isinstance(r, Exception)]
    assert len(conflicts) == 1
    assert len(created) == 1
    async with session_factory() as session:
        assert await RentRequestRepo(session).has_pending(tenant.id, house.id)
        assert await count_requests(session, house.id) == 1


@pytest.mark.asyncio
async def test_failed_sibling_rejection_rolls_back_acceptance(db, house, tenant, other_tenant, landlord):
    """If rejecting siblings fails, the house and both requests are unchanged."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)
    p2 = await svc.create_request(RentRequestCreate(house_id=house.id), other_tenant)

    with patch.object(
        RentRequestRepo,
        "reject_pending_siblings",
        AsyncMock(side_effect=RuntimeError("database went away")),
    ):
        with pytest.raises(RuntimeError):
            await svc.transition_status(p1.id, RentRequestStatus.ACCEPTED, landlord)

    await db.refresh(house)
    assert house.status == HouseStatus.AVAILABLE
    assert house.tenant_id is None
    repo = RentRequestRepo(db)
    assert (await repo.get_by_id(p1.id)).status == RentRequestStatus.PENDING
    assert (await repo.get_by_id(p2.id)).status == RentRequestStatus.PENDING


@pytest.mark.asyncio
async def test_tenant_cannot_accept_own_request(db, house, tenant):
    """Tenants may only cancel."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)

    with pytest.raises(AuthorizationError):
        await svc.transition_status(p1.id, RentRequestStatus.ACCEPTED, tenant)


@pytest.mark.asyncio
async def test_unrelated_landlord_cannot_decide(db, house, tenant, make_user):
    """A landlord who does not own the house has no say."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)
    stranger = await make_user(UserRole.LANDLORD, "stranger")

    with pytest.raises(AuthorizationError):
        await svc.transition_status(p1.id, RentRequestStatus.REJECTED, stranger)


@pytest.mark.asyncio
async def test_invalid_status_value_is_a_validation_error(db, house, tenant, landlord):
    """Unknown status strings are refused before any state is touched."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)

    with pytest.raises(ValidationError):
        await svc.transition_status(p1.id, "approved", landlord)


@pytest.mark.asyncio
async def test_admin_can_revert_cancelled_request(db, house, tenant, admin):
    """An admin may put a cancelled request back to pending."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)
    await svc.transition_status(p1.id, RentRequestStatus.CANCELLED, tenant)

    reverted = await svc.transition_status(p1.id, RentRequestStatus.PENDING, admin)

    assert reverted.status == RentRequestStatus.PENDING


@pytest.mark.asyncio
async def test_admin_revert_refuses_second_pending(db, house, tenant, admin):
    """Reverting is refused when the tenant already has another pending request."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)
    await svc.transition_status(p1.id, RentRequestStatus.CANCELLED, tenant)
    await svc.create_request(RentRequestCreate(house_id=house.id), tenant)

    with pytest.raises(ConflictError):
        await svc.transition_status(p1.id, RentRequestStatus.PENDING, admin)

    assert (await RentRequestRepo(db).get_by_id(p1.id)).status == RentRequestStatus.CANCELLED


@pytest.mark.asyncio
async def test_deleting_accepted_request_releases_house(db, house, tenant, landlord):
    """Deleting the request that holds the house frees the house."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)
    await svc.transition_status(p1.id, RentRequestStatus.ACCEPTED, landlord)

    result = await svc.delete_request(p1.id, landlord)

    assert result.success is True
    await db.refresh(house)
    assert house.status == HouseStatus.AVAILABLE
    assert house.tenant_id is None
    assert await count_requests(db, house.id) == 0


@pytest.mark.asyncio
async def test_list_requests_is_scoped_by_role(db, make_house, landlord, tenant, other_tenant, make_user):
    """Tenants see their own requests and landlords see requests for their houses."""
    svc = service(db)
    first = await make_house(landlord)
    other_landlord = await make_user(UserRole.LANDLORD, "other-landlord")
    second = await make_house(other_landlord)
    await svc.create_request(RentRequestCreate(house_id=first.id), tenant)
    await svc.create_request(RentRequestCreate(house_id=second.id), tenant)
    await svc.create_request(RentRequestCreate(house_id=first.id), other_tenant)

    mine = await svc.list_requests(tenant)
    assert mine.total == 2
    assert {r.user_id for r in mine.items} == {tenant.id}

    theirs = await svc.list_requests(landlord)
    assert theirs.total == 2
    assert {r.house_id for r in theirs.items} == {first.id}


@pytest.mark.asyncio
async def test_get_request_hides_from_strangers(db, house, tenant, other_tenant):
    """Another tenant cannot read someone else's request."""
    svc = service(db)
    p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)

    assert (await svc.get_request(p1.id, tenant)).id == p1.id
    with pytest.raises(AuthorizationError):
        await svc.get_request(p1.id, other_tenant)


@pytest.mark.asyncio
@pytest.mark.parametrize("shared_lock", [True, False], ids=["shared-lock", "separate-locks"])
async def test_concurrent_sibling_accepts_rent_to_one_tenant(
    session_factory, house, tenant, other_tenant, landlord, shared_lock
):
    """Accepting two siblings at once rents the house to exactly one requester."""
    async with session_factory() as session:
        svc = service(session)
        p1 = await svc.create_request(RentRequestCreate(house_id=house.id), tenant)
        p2 = await svc.create_request(RentRequestCreate(house_id=house.id), other_tenant)
    locks = HouseLockRegistry()

    async def accept(request_id):
        async with session_factory() as session:
            svc = RentRequestService(
                session,
                locks=locks if shared_lock else HouseLockRegistry(),
                events=AsyncMock(),
            )
            return await svc.transition_status(request_id, RentRequestStatus.ACCEPTED, landlord)

    results = await asyncio.gather(accept(p1.id), accept(p2.id), return_exceptions=True)

    accepted = [r for r in results if not isinstance(r, Exception)]
    refused = [r for r in results if isinstance(r, (InvalidStateError, ConflictError))]
    assert len(accepted) == 1
    assert len(refused) == 1
    winner = p1 if accepted[0].id == p1.id else p2
    async with session_factory() as session:
        stored = await service(session).houses.get_house(house.id)
        assert stored.status == HouseStatus.RENTED
        assert stored.tenant_id == winner.user_id
        statuses = {
            r.id: r.status
            for r in (await session.scalars(select(RentRequest))).all()
        }
    assert sorted(statuses.values()) == sorted(
        [RentRequestStatus.ACCEPTED, RentRequestStatus.REJECTED]
    )
    assert statuses[winner.id] == RentRequestStatus.ACCEPTED
