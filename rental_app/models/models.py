import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.date_helper import utcnow
from core.get_db import Base

from .enums import (
    HouseStatus,
    LeaseStatus,
    MaintenancePriority,
    MaintenanceStatus,
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    ReminderType,
    RentRequestStatus,
    UserRole,
)


def enum_column(enum_cls):
    return Enum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    role: Mapped[UserRole] = mapped_column(enum_column(UserRole), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    houses: Mapped[List["House"]] = relationship(
        "House",
        back_populates="landlord",
        foreign_keys="House.landlord_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class House(Base):
    __tablename__ = "houses"
    __table_args__ = (
        CheckConstraint("rent_amount > 0", name="ck_houses_rent_positive"),
        CheckConstraint("bedrooms >= 0", name="ck_houses_bedrooms"),
        CheckConstraint("bathrooms >= 0", name="ck_houses_bathrooms"),
        CheckConstraint(
            "(status = 'rented' AND tenant_id IS NOT NULL) OR "
            "(status = 'available' AND tenant_id IS NULL)",
            name="ck_houses_occupancy",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[HouseStatus] = mapped_column(
        enum_column(HouseStatus),
        nullable=False,
        default=HouseStatus.AVAILABLE,
        index=True,
    )
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    rental_start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    __mapper_args__ = {"version_id_col": version_id}

    landlord: Mapped["User"] = relationship(
        "User", back_populates="houses", foreign_keys=[landlord_id]
    )
    tenant: Mapped[Optional["User"]] = relationship("User", foreign_keys=[tenant_id])
    rent_requests: Mapped[List["RentRequest"]] = relationship(
        "RentRequest",
        back_populates="house",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    leases: Mapped[List["LeaseAgreement"]] = relationship(
        "LeaseAgreement",
        back_populates="house",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payments: Mapped[List["RentPayment"]] = relationship(
        "RentPayment",
        back_populates="house",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reminders: Mapped[List["RentReminder"]] = relationship(
        "RentReminder",
        back_populates="house",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    maintenance_requests: Mapped[List["MaintenanceRequest"]] = relationship(
        "MaintenanceRequest",
        back_populates="house",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_occupied(self) -> bool:
        return self.status == HouseStatus.RENTED


class RentRequest(Base):
    __tablename__ = "rent_requests"
    __table_args__ = (
        Index(
            "uq_rent_requests_pending",
            "user_id",
            "house_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    house_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("houses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[RentRequestStatus] = mapped_column(
        enum_column(RentRequestStatus),
        nullable=False,
        default=RentRequestStatus.PENDING,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    house: Mapped["House"] = relationship("House", back_populates="rent_requests")
    user: Mapped["User"] = relationship("User")


class LeaseAgreement(Base):
    __tablename__ = "lease_agreements"
    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_leases_date_range"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    house_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("houses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    deposit_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    terms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[LeaseStatus] = mapped_column(
        enum_column(LeaseStatus), nullable=False, default=LeaseStatus.PENDING
    )
    document_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    house: Mapped["House"] = relationship("House", back_populates="leases")


class RentPayment(Base):
    __tablename__ = "rent_payments"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_payments_amount"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    house_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("houses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(
        enum_column(PaymentMethod), nullable=True
    )
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    receipt_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    house: Mapped["House"] = relationship("House", back_populates="payments")

    @property
    def balance(self) -> Decimal:
        return max(self.amount - (self.paid_amount or Decimal("0")), Decimal("0"))


class RentReminder(Base):
    __tablename__ = "rent_reminders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    house_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("houses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("rent_payments.id", ondelete="SET NULL"), nullable=True
    )
    type: Mapped[ReminderType] = mapped_column(enum_column(ReminderType), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    reminder_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    is_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    house: Mapped["House"] = relationship("House", back_populates="reminders")
    tenant: Mapped["User"] = relationship("User", foreign_keys=[tenant_id])


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    house_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("houses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    priority: Mapped[MaintenancePriority] = mapped_column(
        enum_column(MaintenancePriority),
        nullable=False,
        default=MaintenancePriority.MEDIUM,
    )
    status: Mapped[MaintenanceStatus] = mapped_column(
        enum_column(MaintenanceStatus),
        nullable=False,
        default=MaintenanceStatus.NEW,
        index=True,
    )
    requested_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    media_urls: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    house: Mapped["House"] = relationship("House", back_populates="maintenance_requests")


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[NotificationType] = mapped_column(
        enum_column(NotificationType), nullable=False
    )
    source_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
