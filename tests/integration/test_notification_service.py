"""Integration tests for notifications."""

import uuid

import pytest

from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from models.enums import NotificationType
from services.notification_service import NotificationService

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_notify_swallows_failures(db, tenant):
    """Best-effort notify never raises, even for an empty message."""
    svc = NotificationService(db)

    assert await svc.notify(tenant.id, NotificationType.GENERAL, "   ") is None
    created = await svc.notify(tenant.id, NotificationType.GENERAL, "Welcome")
    assert created is not None


@pytest.mark.asyncio
async def test_create_rejects_empty_message(db, tenant):
    """Direct creation validates the message."""
    with pytest.raises(ValidationError):
        await NotificationService(db).create(tenant.id, NotificationType.GENERAL, "")


@pytest.mark.asyncio
async def test_mark_read_and_filter(db, tenant):
    """Marked notifications drop out of the unread list."""
    svc = NotificationService(db)
    first = await svc.create(tenant.id, NotificationType.GENERAL, "One")
    await svc.create(tenant.id, NotificationType.GENERAL, "Two")

    marked = await svc.mark_read([first.id], tenant)
    unread = await svc.list_for_user(tenant, is_read=False)

    assert marked.count == 1
    assert [n.message for n in unread] == ["Two"]

    assert (await svc.mark_all_read(tenant)).count == 1
    assert await svc.list_for_user(tenant, is_read=False) == []


@pytest.mark.asyncio
async def test_users_cannot_touch_others_notifications(db, tenant, other_tenant):
    """Ownership is checked for reads and bulk changes."""
    svc = NotificationService(db)
    theirs = await svc.create(other_tenant.id, NotificationType.GENERAL, "Private")

    with pytest.raises(AuthorizationError):
        await svc.get(theirs.id, tenant)
    with pytest.raises(AuthorizationError):
        await svc.mark_read([theirs.id], tenant)
    with pytest.raises(NotFoundError):
        await svc.delete([uuid.uuid4()], tenant)


@pytest.mark.asyncio
async def test_delete_all_for_user(db, tenant, other_tenant):
    """Clearing a user's notifications leaves everyone else's."""
    svc = NotificationService(db)
    await svc.create(tenant.id, NotificationType.GENERAL, "Mine")
    await svc.create(other_tenant.id, NotificationType.GENERAL, "Theirs")

    assert (await svc.delete_all_for_user(tenant)).count == 1
    assert len(await svc.list_for_user(other_tenant)) == 1
