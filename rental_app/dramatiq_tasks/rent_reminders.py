import logging

import dramatiq

from core.get_db import AsyncSessionLocal
from services.rent_payment_service import RentPaymentService
from services.rent_reminder_service import RentReminderService

logger = logging.getLogger(__name__)


def create_reminder_dispatch_task():
    @dramatiq.actor(
        actor_name="dispatch_rent_reminders",
        queue_name="rent_reminders",
        max_retries=3,
        time_limit=600_000,
    )
    async def dispatch_rent_reminders():
        async with AsyncSessionLocal() as db:
            result = await RentReminderService(db).dispatch_due()
            logger.info("Dispatched %s rent reminder(s)", result.count)
            return result.count

    return dispatch_rent_reminders


def create_overdue_payment_task():
    @dramatiq.actor(
        actor_name="mark_overdue_rent_payments",
        queue_name="rent_payments",
        max_retries=3,
        time_limit=600_000,
    )
    async def mark_overdue_rent_payments():
        async with AsyncSessionLocal() as db:
            result = await RentPaymentService(db).mark_overdue()
            logger.info("Marked %s rent payment(s) overdue", result.count)
            return result.count

    return mark_overdue_rent_payments
