"""initial rental back office schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-18 09:12:41.118204
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name, *values):
    return sa.Enum(*values, name=name, native_enum=False, length=32)


user_role = _enum("userrole", "Tenant", "Landlord", "Admin")
house_status = _enum("housestatus", "available", "rented")
request_status = _enum("rentrequeststatus", "pending", "accepted", "rejected", "cancelled")
lease_status = _enum("leasestatus", "pending", "active", "terminated", "expired")
payment_status = _enum("paymentstatus", "pending", "paid", "overdue")
payment_method = _enum("paymentmethod", "mtn", "airtel", "credit_card")
reminder_type = _enum("remindertype", "payment_due", "payment_overdue")
maintenance_priority = _enum("maintenancepriority", "Low", "Medium", "High", "Urgent")
maintenance_status = _enum(
    "maintenancestatus", "New", "In Progress", "Completed", "Cancelled"
)
notification_type = _enum(
    "notificationtype",
    "rent_request_created",
    "rent_request_accepted",
    "rent_request_rejected",
    "rent_request_cancelled",
    "rent_request_pending",
    "house_released",
    "maintenance_update",
    "rent_reminder",
    "payment_recorded",
    "general",
)


def _timestamps(*, updated=True):
    cols = [sa.Column("created_at", sa.DateTime(), nullable=True)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(), nullable=True))
    return cols


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(150), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("role", user_role, nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "houses",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "landlord_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("rent_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False),
        sa.Column("bathrooms", sa.Integer(), nullable=False),
        sa.Column("status", house_status, nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("rental_start_date", sa.Date(), nullable=True),
        sa.Column("version_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("rent_amount > 0", name="ck_houses_rent_positive"),
        sa.CheckConstraint("bedrooms >= 0", name="ck_houses_bedrooms"),
        sa.CheckConstraint("bathrooms >= 0", name="ck_houses_bathrooms"),
        sa.CheckConstraint(
            "(status = 'rented' AND tenant_id IS NOT NULL) OR "
            "(status = 'available' AND tenant_id IS NULL)",
            name="ck_houses_occupancy",
        ),
    )
    op.create_index("ix_houses_landlord_id", "houses", ["landlord_id"])
    op.create_index("ix_houses_tenant_id", "houses", ["tenant_id"])
    op.create_index("ix_houses_status", "houses", ["status"])
    op.create_index("ix_houses_created_at", "houses", ["created_at"])

    op.create_table(
        "rent_requests",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "house_id", sa.Uuid(), sa.ForeignKey("houses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", request_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_rent_requests_user_id", "rent_requests", ["user_id"])
    op.create_index("ix_rent_requests_house_id", "rent_requests", ["house_id"])
    op.create_index("ix_rent_requests_status", "rent_requests", ["status"])
    op.create_index("ix_rent_requests_created_at", "rent_requests", ["created_at"])
    op.create_index(
        "uq_rent_requests_pending",
        "rent_requests",
        ["user_id", "house_id"],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "lease_agreements",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "house_id", sa.Uuid(), sa.ForeignKey("houses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "tenant_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "landlord_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("rent_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("deposit_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("terms", sa.Text(), nullable=True),
        sa.Column("status", lease_status, nullable=False),
        sa.Column("document_url", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("start_date < end_date", name="ck_leases_date_range"),
    )
    op.create_index("ix_lease_agreements_house_id", "lease_agreements", ["house_id"])
    op.create_index("ix_lease_agreements_tenant_id", "lease_agreements", ["tenant_id"])
    op.create_index("ix_lease_agreements_landlord_id", "lease_agreements", ["landlord_id"])
    op.create_index("ix_lease_agreements_created_at", "lease_agreements", ["created_at"])

    op.create_table(
        "rent_payments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "tenant_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "house_id", sa.Uuid(), sa.ForeignKey("houses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", payment_status, nullable=False),
        sa.Column("payment_method", payment_method, nullable=True),
        sa.Column("payment_date", sa.DateTime(), nullable=True),
        sa.Column("receipt_url", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount"),
    )
    op.create_index("ix_rent_payments_tenant_id", "rent_payments", ["tenant_id"])
    op.create_index("ix_rent_payments_house_id", "rent_payments", ["house_id"])
    op.create_index("ix_rent_payments_due_date", "rent_payments", ["due_date"])
    op.create_index("ix_rent_payments_status", "rent_payments", ["status"])
    op.create_index("ix_rent_payments_created_at", "rent_payments", ["created_at"])

    op.create_table(
        "rent_reminders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "landlord_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "tenant_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "house_id", sa.Uuid(), sa.ForeignKey("houses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "payment_id",
            sa.Uuid(),
            sa.ForeignKey("rent_payments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("type", reminder_type, nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("reminder_date", sa.DateTime(), nullable=False),
        sa.Column("is_sent", sa.Boolean(), nullable=False),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_rent_reminders_landlord_id", "rent_reminders", ["landlord_id"])
    op.create_index("ix_rent_reminders_tenant_id", "rent_reminders", ["tenant_id"])
    op.create_index("ix_rent_reminders_house_id", "rent_reminders", ["house_id"])
    op.create_index("ix_rent_reminders_reminder_date", "rent_reminders", ["reminder_date"])

    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "house_id", sa.Uuid(), sa.ForeignKey("houses.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "tenant_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "landlord_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("priority", maintenance_priority, nullable=False),
        sa.Column("status", maintenance_status, nullable=False),
        sa.Column("requested_at", sa.DateTime(), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("media_urls", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_maintenance_requests_house_id", "maintenance_requests", ["house_id"])
    op.create_index("ix_maintenance_requests_tenant_id", "maintenance_requests", ["tenant_id"])
    op.create_index(
        "ix_maintenance_requests_landlord_id", "maintenance_requests", ["landlord_id"]
    )
    op.create_index("ix_maintenance_requests_status", "maintenance_requests", ["status"])
    op.create_index(
        "ix_maintenance_requests_requested_at", "maintenance_requests", ["requested_at"]
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("source_id", sa.Uuid(), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("notifications")
    op.drop_table("maintenance_requests")
    op.drop_table("rent_reminders")
    op.drop_table("rent_payments")
    op.drop_table("lease_agreements")
    op.drop_index("uq_rent_requests_pending", table_name="rent_requests")
    op.drop_table("rent_requests")
    op.drop_table("houses")
    op.drop_table("users")
