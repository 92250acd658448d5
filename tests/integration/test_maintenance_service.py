"""Integration tests for maintenance requests."""

import pytest

from core.exceptions import AuthorizationError, ValidationError
from models.enums import MaintenancePriority, MaintenanceStatus, NotificationType
from repos.notification_repo import NotificationRepo
from schemas.schema import MaintenanceCreate, MaintenanceUpdate
from services.maintenance_service import MaintenanceService

pytestmark = pytest.mark.integration


def issue(house, **extra):
    return MaintenanceCreate(
        house_id=house.id,
        title="Leaking tap",
        description="The kitchen tap drips all night.",
        **extra,
    )


@pytest.mark.asyncio
async def test_occupant_reports_issue_and_landlord_is_told(db, make_house, landlord, tenant):
    """The current tenant opens a request; the landlord is notified."""
    rented = await make_house(landlord, tenant=tenant)

    out = await MaintenanceService(db).create(
        issue(rented, priority=MaintenancePriority.HIGH), tenant
    )

    assert out.status == MaintenanceStatus.NEW
    assert out.landlord_id == landlord.id
    assert out.priority == MaintenancePriority.HIGH
    notes = await NotificationRepo(db).find_by_user(landlord.id)
    assert [n.type for n in notes] == [NotificationType.MAINTENANCE_UPDATE]


@pytest.mark.asyncio
async def test_non_occupant_cannot_report(db, make_house, landlord, tenant, other_tenant):
    """Only the house's current tenant may open a request."""
    rented = await make_house(landlord, tenant=tenant)

    with pytest.raises(AuthorizationError):
        await MaintenanceService(db).create(issue(rented), other_tenant)


@pytest.mark.asyncio
async def test_completion_sets_timestamp_and_notifies_tenant(db, make_house, landlord, tenant):
    """Completing a request stamps completed_at and tells the tenant."""
    rented = await make_house(landlord, tenant=tenant)
    svc = MaintenanceService(db)
    request = await svc.create(issue(rented), tenant)

    done = await svc.update(
        request.id,
        MaintenanceUpdate(status=MaintenanceStatus.COMPLETED, resolution_notes="Washer replaced"),
        landlord,
    )

    assert done.status == MaintenanceStatus.COMPLETED
    assert done.completed_at is not None
    notes = await NotificationRepo(db).find_by_user(tenant.id)
    assert [n.type for n in notes] == [NotificationType.MAINTENANCE_UPDATE]

    reopened = await svc.update(
        request.id, MaintenanceUpdate(status=MaintenanceStatus.IN_PROGRESS), landlord
    )
    assert reopened.completed_at is None


@pytest.mark.asyncio
async def test_tenant_edits_are_limited(db, make_house, landlord, tenant):
    """Tenants may edit the description of a new request and nothing else."""
    rented = await make_house(landlord, tenant=tenant)
    svc = MaintenanceService(db)
    request = await svc.create(issue(rented), tenant)

    edited = await svc.update(
        request.id, MaintenanceUpdate(description="Now the bathroom tap too."), tenant
    )
    assert edited.description == "Now the bathroom tap too."

    with pytest.raises(AuthorizationError):
        await svc.update(
            request.id, MaintenanceUpdate(status=MaintenanceStatus.COMPLETED), tenant
        )


@pytest.mark.asyncio
async def test_null_required_fields_are_refused(db, make_house, landlord, tenant):
    """Required fields cannot be cleared."""
    rented = await make_house(landlord, tenant=tenant)
    svc = MaintenanceService(db)
    request = await svc.create(issue(rented), tenant)

    with pytest.raises(ValidationError):
        await svc.update(request.id, MaintenanceUpdate(title=None), landlord)


@pytest.mark.asyncio
async def test_tenant_cannot_delete_after_work_starts(db, make_house, landlord, tenant):
    """Once in progress, only the landlord may delete."""
    rented = await make_house(landlord, tenant=tenant)
    svc = MaintenanceService(db)
    request = await svc.create(issue(rented), tenant)
    await svc.update(request.id, MaintenanceUpdate(status=MaintenanceStatus.IN_PROGRESS), landlord)

    with pytest.raises(AuthorizationError):
        await svc.delete(request.id, tenant)

    result = await svc.delete(request.id, landlord)
    assert result.success is True
