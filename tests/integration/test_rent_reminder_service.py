"""Integration tests for rent reminders."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from core.exceptions import AuthorizationError, InvalidStateError, ValidationError
from models.enums import NotificationType, ReminderType
from repos.notification_repo import NotificationRepo
from repos.rent_reminder_repo import RentReminderRepo
from schemas.schema import RentReminderCreate
from services.rent_reminder_service import RentReminderService

pytestmark = pytest.mark.integration

NOW = datetime(2026, 3, 1, 9, 0)


def reminder_payload(house, tenant, when=NOW - timedelta(hours=1)):
    return RentReminderCreate(
        house_id=house.id,
        tenant_id=tenant.id,
        type=ReminderType.PAYMENT_DUE,
        message="Rent for March is due on the 5th.",
        reminder_date=when,
    )


@pytest.mark.asyncio
async def test_mark_sent_twice_fails_and_keeps_state(db, make_house, landlord, tenant):
    """The second mark_sent is an invalid state and changes nothing."""
    rented = await make_house(landlord, tenant=tenant)
    svc = RentReminderService(db, mailer=AsyncMock())
    reminder = await svc.create(reminder_payload(rented, tenant), landlord)

    first = await svc.mark_sent(reminder.id, landlord)
    assert first.is_sent is True
    assert first.sent_at is not None

    with pytest.raises(InvalidStateError):
        await svc.mark_sent(reminder.id, landlord)

    stored = await RentReminderRepo(db).get_by_id(reminder.id)
    assert stored.is_sent is True
    assert stored.sent_at == first.sent_at


@pytest.mark.asyncio
async def test_reminder_needs_current_tenant(db, make_house, landlord, tenant, other_tenant):
    """Reminders target the house's current tenant."""
    rented = await make_house(landlord, tenant=tenant)

    with pytest.raises(ValidationError):
        await RentReminderService(db).create(reminder_payload(rented, other_tenant), landlord)


@pytest.mark.asyncio
async def test_tenants_cannot_create_reminders(db, make_house, landlord, tenant):
    """Reminders are written by landlords."""
    rented = await make_house(landlord, tenant=tenant)

    with pytest.raises(AuthorizationError):
        await RentReminderService(db).create(reminder_payload(rented, tenant), tenant)


@pytest.mark.asyncio
async def test_dispatch_due_sends_each_reminder_once(db, make_house, landlord, tenant):
    """Due reminders are mailed, marked sent and notified exactly once."""
    rented = await make_house(landlord, tenant=tenant)
    mailer = AsyncMock(return_value=True)
    svc = RentReminderService(db, mailer=mailer)
    due = await svc.create(reminder_payload(rented, tenant), landlord)
    await svc.create(reminder_payload(rented, tenant, when=NOW + timedelta(days=2)), landlord)

    result = await svc.dispatch_due(now=NOW)
    again = await svc.dispatch_due(now=NOW)

    assert result.count == 1
    assert again.count == 0
    mailer.assert_awaited_once()
    email, name, reminder_type, body, title = mailer.await_args.args
    assert email == tenant.email
    assert reminder_type == ReminderType.PAYMENT_DUE
    assert title == rented.title
    assert (await RentReminderRepo(db).get_by_id(due.id)).is_sent is True

    notes = await NotificationRepo(db).find_by_user(tenant.id)
    assert [n.type for n in notes] == [NotificationType.RENT_REMINDER]


@pytest.mark.asyncio
async def test_dispatch_marks_sent_when_email_fails(db, make_house, landlord, tenant):
    """A failing mail transport does not leave the reminder due forever."""
    rented = await make_house(landlord, tenant=tenant)
    svc = RentReminderService(db, mailer=AsyncMock(side_effect=ConnectionError("smtp down")))
    reminder = await svc.create(reminder_payload(rented, tenant), landlord)

    result = await svc.dispatch_due(now=NOW)

    assert result.count == 1
    assert (await RentReminderRepo(db).get_by_id(reminder.id)).is_sent is True


@pytest.mark.asyncio
async def test_tenant_lists_only_own_reminders(db, make_house, landlord, tenant, other_tenant):
    """Tenants see reminders addressed to them."""
    first = await make_house(landlord, tenant=tenant)
    second = await make_house(landlord, tenant=other_tenant)
    svc = RentReminderService(db)
    await svc.create(reminder_payload(first, tenant), landlord)
    await svc.create(reminder_payload(second, other_tenant), landlord)

    page = await svc.list_reminders(tenant)

    assert page.total == 1
    assert page.items[0].tenant_id == tenant.id


@pytest.mark.asyncio
async def test_overlapping_dispatch_runs_mail_once(session_factory, make_house, landlord, tenant):
    """A second run holding a stale due list does not mail a claimed reminder again."""
    rented = await make_house(landlord, tenant=tenant)
    mailed = []

    async with session_factory() as first_db, session_factory() as second_db:
        second = RentReminderService(
            second_db, mailer=AsyncMock(side_effect=lambda *args: mailed.append(args))
        )

        async def mail_and_overlap(*args):
            mailed.append(args)
            await second.dispatch_due(now=NOW)

        first = RentReminderService(first_db, mailer=mail_and_overlap)
        reminder = await first.create(reminder_payload(rented, tenant), landlord)
        stale = await second.repo.due(NOW)
        await second_db.commit()
        second.repo.due = AsyncMock(return_value=stale)

        result = await first.dispatch_due(now=NOW)

    assert result.count == 1
    assert len(mailed) == 1
    async with session_factory() as session:
        assert (await RentReminderRepo(session).get_by_id(reminder.id)).is_sent is True
        notes = await NotificationRepo(session).find_by_user(tenant.id)
        assert len(notes) == 1


@pytest.mark.asyncio
async def test_claim_unsent_has_one_winner(db, make_house, landlord, tenant):
    """Only the first claim on an unsent reminder succeeds."""
    rented = await make_house(landlord, tenant=tenant)
    reminder = await RentReminderService(db).create(reminder_payload(rented, tenant), landlord)
    repo = RentReminderRepo(db)

    assert await repo.claim_unsent(reminder.id, NOW) is True
    assert await repo.claim_unsent(reminder.id, NOW) is False
