import logging
import uuid
from datetime import date
from decimal import Decimal

from core.breaker import breaker
from core.date_helper import monthly_due_dates, utcnow
from core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ServerError,
    ValidationError,
)
from core.event_publish import publish_event
from core.get_db import atomic
from core.paginate import Page, PaginatePage
from models.enums import NotificationType, PaymentStatus, UserRole
from models.models import House, RentPayment
from policy.rent_payment_policy import RentPaymentPolicy
from repos.house_repo import HouseRepo
from repos.lease_repo import LeaseRepo
from repos.rent_payment_repo import RentPaymentRepo
from schemas.schema import (
    ApplyPayment,
    CountOut,
    MessageOut,
    RentPaymentCreate,
    RentPaymentOut,
    RentPaymentUpdate,
)
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "due_date",
    "amount",
    "status",
    "payment_method",
    "payment_date",
    "receipt_url",
}


class RentPaymentService:
    def __init__(self, db, events=publish_event, notifier: NotificationService | None = None):
        self.db = db
        self.repo: RentPaymentRepo = RentPaymentRepo(db)
        self.house_repo: HouseRepo = HouseRepo(db)
        self.lease_repo: LeaseRepo = LeaseRepo(db)
        self.notifier: NotificationService = notifier or NotificationService(db)
        self.paginate: PaginatePage = PaginatePage()
        self.events = events

    async def _payment_and_house(self, payment_id: uuid.UUID) -> tuple[RentPayment, House]:
        payment = await self.repo.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Rent payment not found")
        house = await self.house_repo.get_by_id(payment.house_id)
        if not house:
            raise ServerError("Associated house not found for rent payment")
        return payment, house

    @staticmethod
    def _settle(payment: RentPayment, amount: Decimal, due_date: date) -> dict:
        """Status changes implied by comparing paid_amount against amount."""
        paid = payment.paid_amount or Decimal("0")
        if paid >= amount:
            if payment.status == PaymentStatus.PAID:
                return {}
            return {"status": PaymentStatus.PAID, "payment_date": utcnow()}
        if payment.status == PaymentStatus.PAID:
            reopened = (
                PaymentStatus.OVERDUE if due_date < utcnow().date() else PaymentStatus.PENDING
            )
            return {"status": reopened, "payment_date": None}
        return {}

    async def _managed(self, payment_id: uuid.UUID, current_user) -> RentPayment:
        payment, house = await self._payment_and_house(payment_id)
        if not await RentPaymentPolicy.can_manage(house, current_user):
            raise AuthorizationError("Only the landlord of this house can manage its payments.")
        return payment

    async def create(self, payload: RentPaymentCreate, current_user) -> RentPaymentOut:
        async def handler():
            house = await self.house_repo.get_by_id(payload.house_id)
            if not house:
                raise NotFoundError("House not found")
            if not await RentPaymentPolicy.can_manage(house, current_user):
                raise AuthorizationError(
                    "Only the landlord of this house can record payments for it."
                )
            if house.tenant_id != payload.tenant_id:
                raise ValidationError("Tenant is not assigned to this house.")

            payment = await self.repo.create(payload.model_dump())
            out = RentPaymentOut.model_validate(payment)
            logger.info("Rent payment %s scheduled for house %s", out.id, out.house_id)
            return out

        return await breaker.call(handler)

    async def schedule_for_lease(self, lease_id: uuid.UUID, current_user) -> list[RentPaymentOut]:
        async def handler():
            lease = await self.lease_repo.get_by_id(lease_id)
            if not lease:
                raise NotFoundError("Lease agreement not found")
            house = await self.house_repo.get_by_id(lease.house_id)
            if not house:
                raise ServerError("Associated house not found for lease")
            if not await RentPaymentPolicy.can_manage(house, current_user):
                raise AuthorizationError(
                    "Only the landlord of this house can schedule its payments."
                )

            due_dates = monthly_due_dates(lease.start_date, lease.end_date)
            payments = await self.repo.create_many(
                [
                    {
                        "tenant_id": lease.tenant_id,
                        "house_id": lease.house_id,
                        "due_date": due,
                        "amount": lease.rent_amount,
                        "status": PaymentStatus.PENDING,
                    }
                    for due in due_dates
                ]
            )
            logger.info("Scheduled %s payments for lease %s", len(payments), lease_id)
            return [RentPaymentOut.model_validate(p) for p in payments]

        return await breaker.call(handler)

    async def get_payment(self, payment_id: uuid.UUID, current_user) -> RentPaymentOut:
        async def handler():
            payment, house = await self._payment_and_house(payment_id)
            if not await RentPaymentPolicy.can_read(payment, house, current_user):
                raise AuthorizationError("You are not authorized to view this payment.")
            return RentPaymentOut.model_validate(payment)

        return await breaker.call(handler)

    async def list_payments(
        self,
        current_user,
        status: PaymentStatus | None = None,
        house_id: uuid.UUID | None = None,
        tenant_id: uuid.UUID | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[RentPaymentOut]:
        async def handler():
            page_no, page_limit = self.paginate.normalize(page, limit)
            scope = {"tenant_id": tenant_id}
            if current_user.role == UserRole.TENANT:
                scope["tenant_id"] = current_user.id
            elif current_user.role == UserRole.LANDLORD:
                scope["landlord_id"] = current_user.id
            elif current_user.role != UserRole.ADMIN:
                raise AuthorizationError("Access Denied")

            items, total = await self.repo.list(
                offset=self.paginate.offset(page_no, page_limit),
                limit=page_limit,
                status=status,
                house_id=house_id,
                **scope,
            )
            return self.paginate.build(items, total, page_no, page_limit, RentPaymentOut)

        return await breaker.call(handler)

    async def update(
        self, payment_id: uuid.UUID, payload: RentPaymentUpdate, current_user
    ) -> RentPaymentOut:
        async def handler():
            payment = await self._managed(payment_id, current_user)
            values = {
                k: v
                for k, v in payload.model_dump(exclude_unset=True).items()
                if k in UPDATABLE_FIELDS
            }
            if not values:
                raise ValidationError("No valid fields provided for update.")
            for field in ("due_date", "amount", "status"):
                if field in values and values[field] is None:
                    raise ValidationError(f"{field} cannot be null.")
            if "amount" in values and "status" not in values:
                values.update(
                    self._settle(
                        payment,
                        values["amount"],
                        values.get("due_date") or payment.due_date,
                    )
                )

            payment = await self.repo.update_fields(payment, values)
            return RentPaymentOut.model_validate(payment)

        return await breaker.call(handler)

    async def delete(self, payment_id: uuid.UUID, current_user) -> MessageOut:
        async def handler():
            payment = await self._managed(payment_id, current_user)
            await self.repo.delete(payment)
            return MessageOut(message="Rent payment deleted successfully")

        return await breaker.call(handler)

    async def apply_payment(
        self, payment_id: uuid.UUID, payload: ApplyPayment, current_user
    ) -> RentPaymentOut:
        async def handler():
            if payload.amount <= 0:
                raise ValidationError("Payment amount must be greater than zero.")

            async with atomic(self.db):
                payment = await self.repo.get_for_update(payment_id)
                if not payment:
                    raise NotFoundError("Rent payment not found")
                house = await self.house_repo.get_by_id(payment.house_id)
                if not house:
                    raise ServerError("Associated house not found for rent payment")
                if not await RentPaymentPolicy.can_pay(payment, house, current_user):
                    raise AuthorizationError("You are not authorized to pay this rent.")
                if payment.status == PaymentStatus.PAID:
                    raise InvalidStateError("Payment is already fully paid.")

                payment.paid_amount = (payment.paid_amount or Decimal("0")) + payload.amount
                if payload.payment_method is not None:
                    payment.payment_method = payload.payment_method
                if payload.receipt_url is not None:
                    payment.receipt_url = payload.receipt_url
                for field, value in self._settle(payment, payment.amount, payment.due_date).items():
                    setattr(payment, field, value)
                await self.db.flush()

            out = RentPaymentOut.model_validate(payment)
            landlord_id = house.landlord_id
            logger.info(
                "Applied %s to payment %s (paid %s of %s, status %s)",
                payload.amount,
                out.id,
                out.paid_amount,
                out.amount,
                out.status.value,
            )
            if current_user.id != landlord_id:
                await self.notifier.notify(
                    landlord_id,
                    NotificationType.PAYMENT_RECORDED,
                    f"Payment of {payload.amount} recorded for rent due {out.due_date}.",
                    out.id,
                )
            await self.events(
                "rent_payment.applied",
                {
                    "payment_id": str(out.id),
                    "amount": str(payload.amount),
                    "status": out.status.value,
                },
            )
            return out

        return await breaker.call(handler)

    async def mark_overdue(self, today: date | None = None) -> CountOut:
        today = today or utcnow().date()
        count = await self.repo.mark_overdue(today)
        if count:
            logger.info("Marked %s rent payments overdue as of %s", count, today)
        return CountOut(count=count)
