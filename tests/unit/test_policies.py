"""Tests for authorization policies."""

import uuid
from types import SimpleNamespace

import pytest

from models.enums import MaintenanceStatus, RentRequestStatus, UserRole
from policy.house_policy import HousePolicy
from policy.maintenance_policy import (
    ALL_FIELDS,
    LANDLORD_FIELDS,
    TENANT_FIELDS,
    MaintenancePolicy,
)
from policy.notification_policy import NotificationPolicy
from policy.rent_request_policy import RentRequestPolicy, RequestActor


def actor(role: UserRole):
    return SimpleNamespace(id=uuid.uuid4(), role=role)


@pytest.fixture
def landlord():
    return actor(UserRole.LANDLORD)


@pytest.fixture
def tenant():
    return actor(UserRole.TENANT)


@pytest.fixture
def house(landlord):
    return SimpleNamespace(id=uuid.uuid4(), landlord_id=landlord.id, tenant_id=None)


@pytest.fixture
def rent_request(tenant, house):
    return SimpleNamespace(
        id=uuid.uuid4(),
        user_id=tenant.id,
        house_id=house.id,
        status=RentRequestStatus.PENDING,
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_actor_kind_resolves_relationships(landlord, tenant, house, rent_request):
    """Actors are classified by how they relate to the request."""
    assert await RentRequestPolicy.actor_kind(landlord, rent_request, house) == RequestActor.LANDLORD
    assert await RentRequestPolicy.actor_kind(tenant, rent_request, house) == RequestActor.TENANT
    admin = actor(UserRole.ADMIN)
    assert await RentRequestPolicy.actor_kind(admin, rent_request, house) == RequestActor.ADMIN


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unrelated_actors_have_no_kind(house, rent_request):
    """Another landlord or tenant is unrelated to the request."""
    assert await RentRequestPolicy.actor_kind(actor(UserRole.LANDLORD), rent_request, house) is None
    assert await RentRequestPolicy.actor_kind(actor(UserRole.TENANT), rent_request, house) is None
    assert await RentRequestPolicy.can_view(actor(UserRole.TENANT), rent_request, house) is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transition_rights_by_actor():
    """Landlords decide, tenants cancel, admins do anything."""
    assert await RentRequestPolicy.can_set_status(RequestActor.LANDLORD, RentRequestStatus.ACCEPTED)
    assert await RentRequestPolicy.can_set_status(RequestActor.LANDLORD, RentRequestStatus.REJECTED)
    assert not await RentRequestPolicy.can_set_status(RequestActor.LANDLORD, RentRequestStatus.CANCELLED)
    assert await RentRequestPolicy.can_set_status(RequestActor.TENANT, RentRequestStatus.CANCELLED)
    assert not await RentRequestPolicy.can_set_status(RequestActor.TENANT, RentRequestStatus.ACCEPTED)
    for status in RentRequestStatus:
        assert await RentRequestPolicy.can_set_status(RequestActor.ADMIN, status)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_only_tenants_create_rent_requests(landlord, tenant):
    """Rent requests come from tenants."""
    assert await RentRequestPolicy.can_create(tenant)
    assert not await RentRequestPolicy.can_create(landlord)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_house_management(landlord, tenant, house):
    """Only the owning landlord or an admin manages a house."""
    assert await HousePolicy.can_manage(house, landlord)
    assert await HousePolicy.can_manage(house, actor(UserRole.ADMIN))
    assert not await HousePolicy.can_manage(house, actor(UserRole.LANDLORD))
    assert not await HousePolicy.can_manage(house, tenant)
    assert not await HousePolicy.can_create(tenant)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_maintenance_editable_fields(landlord, tenant):
    """Field sets narrow from admin to landlord to tenant."""
    request = SimpleNamespace(
        landlord_id=landlord.id, tenant_id=tenant.id, status=MaintenanceStatus.NEW
    )

    assert await MaintenancePolicy.editable_fields(request, actor(UserRole.ADMIN)) == ALL_FIELDS
    assert await MaintenancePolicy.editable_fields(request, landlord) == LANDLORD_FIELDS
    assert await MaintenancePolicy.editable_fields(request, tenant) == TENANT_FIELDS

    request.status = MaintenanceStatus.IN_PROGRESS
    assert await MaintenancePolicy.editable_fields(request, tenant) == frozenset()
    assert not await MaintenancePolicy.can_delete(request, tenant)
    assert await MaintenancePolicy.can_delete(request, landlord)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_notification_ownership(tenant):
    """A user owns a batch only when every notification is theirs."""
    mine = SimpleNamespace(user_id=tenant.id)
    theirs = SimpleNamespace(user_id=uuid.uuid4())

    assert await NotificationPolicy.owns_all([mine], tenant)
    assert not await NotificationPolicy.owns_all([mine, theirs], tenant)
