from enum import Enum


class UserRole(str, Enum):
    TENANT = "Tenant"
    LANDLORD = "Landlord"
    ADMIN = "Admin"


class HouseStatus(str, Enum):
    AVAILABLE = "available"
    RENTED = "rented"


class RentRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LeaseStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    TERMINATED = "terminated"
    EXPIRED = "expired"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    MTN = "mtn"
    AIRTEL = "airtel"
    CREDIT_CARD = "credit_card"


class ReminderType(str, Enum):
    PAYMENT_DUE = "payment_due"
    PAYMENT_OVERDUE = "payment_overdue"


class MaintenancePriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class MaintenanceStatus(str, Enum):
    NEW = "New"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class NotificationType(str, Enum):
    RENT_REQUEST_CREATED = "rent_request_created"
    RENT_REQUEST_ACCEPTED = "rent_request_accepted"
    RENT_REQUEST_REJECTED = "rent_request_rejected"
    RENT_REQUEST_CANCELLED = "rent_request_cancelled"
    RENT_REQUEST_PENDING = "rent_request_pending"
    HOUSE_RELEASED = "house_released"
    MAINTENANCE_UPDATE = "maintenance_update"
    RENT_REMINDER = "rent_reminder"
    PAYMENT_RECORDED = "payment_recorded"
    GENERAL = "general"
