import logging
import uuid
from datetime import datetime, time

from core.breaker import breaker
from core.date_helper import utcnow
from core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from core.paginate import Page, PaginatePage
from email_notify.email_service import send_rent_reminder_email
from models.enums import NotificationType, UserRole
from models.models import House, RentReminder
from policy.rent_reminder_policy import RentReminderPolicy
from repos.house_repo import HouseRepo
from repos.rent_payment_repo import RentPaymentRepo
from repos.rent_reminder_repo import RentReminderRepo
from schemas.schema import (
    CountOut,
    MessageOut,
    RentReminderCreate,
    RentReminderFilters,
    RentReminderOut,
    RentReminderUpdate,
)
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"type", "message", "reminder_date", "payment_id"}


class RentReminderService:
    def __init__(
        self,
        db,
        notifier: NotificationService | None = None,
        mailer=send_rent_reminder_email,
    ):
        self.repo: RentReminderRepo = RentReminderRepo(db)
        self.house_repo: HouseRepo = HouseRepo(db)
        self.payment_repo: RentPaymentRepo = RentPaymentRepo(db)
        self.notifier: NotificationService = notifier or NotificationService(db)
        self.paginate: PaginatePage = PaginatePage()
        self.mailer = mailer

    async def _get(self, reminder_id: uuid.UUID) -> RentReminder:
        reminder = await self.repo.get_by_id(reminder_id)
        if not reminder:
            raise NotFoundError("Rent reminder not found")
        return reminder

    async def _writable(self, reminder_id: uuid.UUID, current_user) -> RentReminder:
        reminder = await self._get(reminder_id)
        house = await self.house_repo.get_by_id(reminder.house_id)
        if not house or not await RentReminderPolicy.can_write(house, current_user):
            raise AuthorizationError("You are not authorized to modify this reminder.")
        return reminder

    async def _check_payment(
        self, payment_id: uuid.UUID | None, house: House, tenant_id: uuid.UUID
    ) -> None:
        if payment_id is None:
            return
        payment = await self.payment_repo.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Rent payment not found")
        if payment.house_id != house.id or payment.tenant_id != tenant_id:
            raise ValidationError("Payment does not belong to this house and tenant.")

    async def create(self, payload: RentReminderCreate, current_user) -> RentReminderOut:
        async def handler():
            if current_user.role not in {UserRole.LANDLORD, UserRole.ADMIN}:
                raise AuthorizationError("Only landlords can create rent reminders.")
            house = await self.house_repo.get_by_id(payload.house_id)
            if not house:
                raise NotFoundError("House not found")
            if not await RentReminderPolicy.can_write(house, current_user):
                raise AuthorizationError("You are not the landlord of this house.")
            if house.tenant_id != payload.tenant_id:
                raise ValidationError("Tenant is not assigned to this house.")
            await self._check_payment(payload.payment_id, house, payload.tenant_id)

            reminder = await self.repo.create(
                {
                    **payload.model_dump(),
                    "landlord_id": house.landlord_id,
                    "is_sent": False,
                }
            )
            return RentReminderOut.model_validate(reminder)

        return await breaker.call(handler)

    async def get_reminder(self, reminder_id: uuid.UUID, current_user) -> RentReminderOut:
        async def handler():
            reminder = await self._get(reminder_id)
            if not await RentReminderPolicy.can_read(reminder, current_user):
                raise AuthorizationError("You are not authorized to view this reminder.")
            return RentReminderOut.model_validate(reminder)

        return await breaker.call(handler)

    async def list_reminders(
        self,
        current_user,
        filters: RentReminderFilters | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[RentReminderOut]:
        async def handler():
            page_no, page_limit = self.paginate.normalize(page, limit)
            criteria = (filters or RentReminderFilters()).model_dump(exclude_none=True)
            if "reminder_date_before" in criteria:
                criteria["reminder_date_before"] = datetime.combine(
                    criteria["reminder_date_before"], time.max
                )
            if "reminder_date_after" in criteria:
                criteria["reminder_date_after"] = datetime.combine(
                    criteria["reminder_date_after"], time.min
                )

            if current_user.role == UserRole.TENANT:
                criteria["tenant_id"] = current_user.id
            elif current_user.role == UserRole.LANDLORD:
                criteria["landlord_id"] = current_user.id
            elif current_user.role != UserRole.ADMIN:
                raise AuthorizationError("Access Denied")

            items, total = await self.repo.list(
                offset=self.paginate.offset(page_no, page_limit),
                limit=page_limit,
                **criteria,
            )
            return self.paginate.build(items, total, page_no, page_limit, RentReminderOut)

        return await breaker.call(handler)

    async def update(
        self, reminder_id: uuid.UUID, payload: RentReminderUpdate, current_user
    ) -> RentReminderOut:
        async def handler():
            reminder = await self._writable(reminder_id, current_user)
            values = {
                k: v
                for k, v in payload.model_dump(exclude_unset=True).items()
                if k in UPDATABLE_FIELDS
            }
            if not values:
                raise ValidationError("No valid fields provided for update.")
            for field in ("type", "message", "reminder_date"):
                if field in values and not values[field]:
                    raise ValidationError(f"{field} cannot be empty.")
            if values.get("payment_id") is not None:
                house = await self.house_repo.get_by_id(reminder.house_id)
                await self._check_payment(values["payment_id"], house, reminder.tenant_id)

            reminder = await self.repo.update_fields(reminder, values)
            return RentReminderOut.model_validate(reminder)

        return await breaker.call(handler)

    async def mark_sent(self, reminder_id: uuid.UUID, current_user) -> RentReminderOut:
        async def handler():
            reminder = await self._writable(reminder_id, current_user)
            return await self._mark_sent(reminder)

        return await breaker.call(handler)

    async def _mark_sent(self, reminder: RentReminder) -> RentReminderOut:
        if reminder.is_sent:
            raise InvalidStateError("Reminder has already been sent.")
        reminder = await self.repo.update_fields(
            reminder, {"is_sent": True, "sent_at": utcnow()}
        )
        return RentReminderOut.model_validate(reminder)

    async def delete(self, reminder_id: uuid.UUID, current_user) -> MessageOut:
        async def handler():
            reminder = await self._writable(reminder_id, current_user)
            await self.repo.delete(reminder)
            return MessageOut(message="Rent reminder deleted successfully")

        return await breaker.call(handler)

    async def dispatch_due(self, now: datetime | None = None) -> CountOut:
        """Claim every unsent reminder whose time has come, then mail and notify it."""
        now = now or utcnow()
        batch = [
            (r.id, r.tenant_id, r.type, r.message, r.tenant.email, r.tenant.username, r.house.title)
            for r in await self.repo.due(now)
        ]
        sent = 0
        for reminder_id, tenant_id, reminder_type, message, email, name, title in batch:
            # an overlapping run may already own this reminder
            if not await self.repo.claim_unsent(reminder_id, utcnow()):
                continue
            try:
                await self.mailer(email, name, reminder_type, message, title)
            except Exception as e:
                logger.warning("Reminder email %s failed: %s", reminder_id, e)

            await self.notifier.notify(
                tenant_id, NotificationType.RENT_REMINDER, message, reminder_id
            )
            sent += 1

        if sent:
            logger.info("Dispatched %s rent reminders", sent)
        return CountOut(count=sent)
