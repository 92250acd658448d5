"""Tests for core helpers."""

import asyncio
import uuid
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from core.breaker import CircuitBreaker, CircuitOpenError
from core.cache import Cache
from core.date_helper import monthly_due_dates
from core.event_publish import publish_event
from core.exceptions import NotFoundError
from core.house_lock import HouseLockRegistry
from email_notify.email_service import build_reminder_message, send_rent_reminder_email
from models.enums import ReminderType


@pytest.mark.unit
@pytest.mark.asyncio
async def test_breaker_ignores_domain_errors():
    """HTTP errors are answers and never open the circuit."""
    breaker = CircuitBreaker(name="test", failure_threshold=1)

    for _ in range(3):
        with pytest.raises(NotFoundError):
            await breaker.call(AsyncMock(side_effect=NotFoundError("missing")))

    assert breaker.state == "CLOSED"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_breaker_opens_after_threshold():
    """Repeated unexpected failures open the circuit."""
    breaker = CircuitBreaker(name="test", failure_threshold=2, base_recovery_time=60)
    failing = AsyncMock(side_effect=RuntimeError("boom"))

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call(failing)

    with pytest.raises(CircuitOpenError):
        await breaker.call(AsyncMock(return_value="ok"))

    breaker.reset()
    assert await breaker.call(AsyncMock(return_value="ok")) == "ok"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_house_lock_serialises_same_house():
    """Holders of the same house lock never overlap."""
    locks = HouseLockRegistry()
    house_id = uuid.uuid4()
    active = []
    overlaps = []

    async def worker():
        async with locks.hold(house_id):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            await asyncio.sleep(0.01)
            active.pop()

    await asyncio.gather(*(worker() for _ in range(5)))

    assert overlaps == []
    assert not locks.is_locked(house_id)


@pytest.mark.unit
def test_monthly_due_dates_clamp_to_month_end():
    """Due dates keep the start day and clamp in short months."""
    assert monthly_due_dates(date(2026, 1, 31), date(2026, 3, 31)) == [
        date(2026, 1, 31),
        date(2026, 2, 28),
    ]
    assert monthly_due_dates(date(2026, 1, 1), date(2026, 1, 1)) == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cache_is_a_noop_without_upstash():
    """An unconfigured cache reads nothing and writes nowhere."""
    cache = Cache(None, None)

    assert cache.enabled is False
    await cache.set_json("houses:list", {"a": 1})
    assert await cache.get_json("houses:list") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_publish_event_skips_without_rabbitmq():
    """Events are dropped quietly when no broker is configured."""
    with patch("core.event_publish.rabbitmq") as rabbit:
        rabbit.configured = False
        rabbit.publish_json = AsyncMock()

        await publish_event("house.created", {"house_id": "x"})

        rabbit.publish_json.assert_not_awaited()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_publish_event_swallows_broker_errors():
    """A failing broker never fails the caller."""
    with patch("core.event_publish.rabbitmq") as rabbit:
        rabbit.configured = True
        rabbit.publish_json = AsyncMock(side_effect=ConnectionError("down"))

        await publish_event("house.created", {"house_id": "x"})

        rabbit.publish_json.assert_awaited_once()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_reminder_email_skipped_when_unconfigured():
    """Without SMTP settings nothing is sent."""
    with patch("email_notify.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
        sent = await send_rent_reminder_email(
            "t@example.com", "Tenant", ReminderType.PAYMENT_DUE, "Pay soon", "Flat 2"
        )

    assert sent is False
    send.assert_not_awaited()


@pytest.mark.unit
def test_reminder_message_escapes_html():
    """User text is escaped in the HTML part."""
    message = build_reminder_message(
        "t@example.com", "<b>Ann</b>", ReminderType.PAYMENT_OVERDUE, "Pay now", "Flat 2"
    )

    assert message["Subject"] == "Rent Payment Overdue"
    html_part = message.get_payload()[1].get_payload()
    assert "&lt;b&gt;Ann&lt;/b&gt;" in html_part
