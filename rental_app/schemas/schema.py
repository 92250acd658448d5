from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models.enums import (
    HouseStatus,
    LeaseStatus,
    MaintenancePriority,
    MaintenanceStatus,
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    ReminderType,
    RentRequestStatus,
)


def _strip_required(value: str, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{field} cannot be empty.")
    return str(value).strip()


# Houses


class HouseCreate(BaseModel):
    title: str
    description: str
    address: str
    rent_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    bedrooms: int = Field(ge=0)
    bathrooms: int = Field(ge=0)
    image_url: Optional[str] = None
    rental_start_date: Optional[date] = None

    @field_validator("title", "description", "address", mode="before")
    @classmethod
    def validate_text(cls, value, info):
        return _strip_required(value, info.field_name)


class HouseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    rent_amount: Optional[Decimal] = Field(
        default=None, gt=0, max_digits=10, decimal_places=2
    )
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    rental_start_date: Optional[date] = None
    # occupancy fields are accepted only so they can be refused explicitly
    tenant_id: Optional[uuid.UUID] = None
    status: Optional[HouseStatus] = None

    @field_validator("title", "description", "address", mode="before")
    @classmethod
    def validate_text(cls, value, info):
        if value is None:
            return value
        return _strip_required(value, info.field_name)


class HouseOut(BaseModel):
    id: uuid.UUID
    landlord_id: uuid.UUID
    tenant_id: Optional[uuid.UUID]
    title: str
    description: str
    address: str
    rent_amount: Decimal
    bedrooms: int
    bathrooms: int
    status: HouseStatus
    image_url: Optional[str]
    is_active: bool
    rental_start_date: Optional[date]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HouseFilters(BaseModel):
    status: Optional[HouseStatus] = None
    min_rent: Optional[Decimal] = Field(default=None, ge=0)
    max_rent: Optional[Decimal] = Field(default=None, ge=0)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def validate_rent_range(self):
        if (
            self.min_rent is not None
            and self.max_rent is not None
            and self.min_rent > self.max_rent
        ):
            raise ValueError("min_rent cannot be greater than max_rent")
        return self


# Rent requests


class RentRequestCreate(BaseModel):
    house_id: uuid.UUID
    message: Optional[str] = Field(default=None, max_length=2000)


class RentRequestStatusUpdate(BaseModel):
    status: RentRequestStatus


class RentRequestOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    house_id: uuid.UUID
    message: Optional[str]
    status: RentRequestStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RentRequestFilters(BaseModel):
    status: Optional[RentRequestStatus] = None
    house_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    landlord_id: Optional[uuid.UUID] = None


# Leases


class LeaseCreate(BaseModel):
    house_id: uuid.UUID
    tenant_id: uuid.UUID
    start_date: date
    end_date: date
    rent_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    deposit_amount: Decimal = Field(
        default=Decimal("0"), ge=0, max_digits=10, decimal_places=2
    )
    terms: Optional[str] = None
    status: LeaseStatus = LeaseStatus.PENDING
    document_url: Optional[str] = None

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date >= self.end_date:
            raise ValueError("start_date must be before end_date")
        return self


class LeaseUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rent_amount: Optional[Decimal] = Field(
        default=None, gt=0, max_digits=10, decimal_places=2
    )
    deposit_amount: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=10, decimal_places=2
    )
    terms: Optional[str] = None
    status: Optional[LeaseStatus] = None
    document_url: Optional[str] = None


class LeaseOut(BaseModel):
    id: uuid.UUID
    house_id: uuid.UUID
    tenant_id: uuid.UUID
    landlord_id: uuid.UUID
    start_date: date
    end_date: date
    rent_amount: Decimal
    deposit_amount: Decimal
    terms: Optional[str]
    status: LeaseStatus
    document_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# Rent payments


class RentPaymentCreate(BaseModel):
    tenant_id: uuid.UUID
    house_id: uuid.UUID
    due_date: date
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    receipt_url: Optional[str] = None


class RentPaymentUpdate(BaseModel):
    due_date: Optional[date] = None
    amount: Optional[Decimal] = Field(
        default=None, gt=0, max_digits=10, decimal_places=2
    )
    status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[datetime] = None
    receipt_url: Optional[str] = None


class ApplyPayment(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    payment_method: Optional[PaymentMethod] = None
    receipt_url: Optional[str] = None


class RentPaymentOut(BaseModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    house_id: uuid.UUID
    due_date: date
    amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: PaymentStatus
    payment_method: Optional[PaymentMethod]
    payment_date: Optional[datetime]
    receipt_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# Rent reminders


class RentReminderCreate(BaseModel):
    house_id: uuid.UUID
    tenant_id: uuid.UUID
    payment_id: Optional[uuid.UUID] = None
    type: ReminderType
    message: str
    reminder_date: datetime

    @field_validator("message", mode="before")
    @classmethod
    def validate_message(cls, value):
        return _strip_required(value, "message")


class RentReminderUpdate(BaseModel):
    type: Optional[ReminderType] = None
    message: Optional[str] = None
    reminder_date: Optional[datetime] = None
    payment_id: Optional[uuid.UUID] = None


class RentReminderOut(BaseModel):
    id: uuid.UUID
    landlord_id: uuid.UUID
    tenant_id: uuid.UUID
    house_id: uuid.UUID
    payment_id: Optional[uuid.UUID]
    type: ReminderType
    message: str
    reminder_date: datetime
    is_sent: bool
    sent_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class RentReminderFilters(BaseModel):
    type: Optional[ReminderType] = None
    is_sent: Optional[bool] = None
    house_id: Optional[uuid.UUID] = None
    tenant_id: Optional[uuid.UUID] = None
    landlord_id: Optional[uuid.UUID] = None
    reminder_date_before: Optional[date] = None
    reminder_date_after: Optional[date] = None


# Maintenance


class MaintenanceCreate(BaseModel):
    house_id: uuid.UUID
    title: str
    description: str
    category: Optional[str] = None
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    media_urls: List[str] = Field(default_factory=list)

    @field_validator("title", "description", mode="before")
    @classmethod
    def validate_text(cls, value, info):
        return _strip_required(value, info.field_name)


class MaintenanceUpdate(BaseModel):
    house_id: Optional[uuid.UUID] = None
    tenant_id: Optional[uuid.UUID] = None
    landlord_id: Optional[uuid.UUID] = None
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[MaintenancePriority] = None
    status: Optional[MaintenanceStatus] = None
    scheduled_date: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    media_urls: Optional[List[str]] = None


class MaintenanceOut(BaseModel):
    id: uuid.UUID
    house_id: uuid.UUID
    tenant_id: uuid.UUID
    landlord_id: uuid.UUID
    title: str
    description: str
    category: Optional[str]
    priority: MaintenancePriority
    status: MaintenanceStatus
    requested_at: datetime
    scheduled_date: Optional[datetime]
    completed_at: Optional[datetime]
    resolution_notes: Optional[str]
    media_urls: List[str]

    model_config = {"from_attributes": True}


# Notifications


class NotificationOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: NotificationType
    source_id: Optional[uuid.UUID]
    message: str
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationIds(BaseModel):
    ids: List[uuid.UUID] = Field(min_length=1)


class CountOut(BaseModel):
    count: int


class MessageOut(BaseModel):
    success: bool = True
    message: str
