"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all initial tables for the WashRide platform:
- Users (all roles, approval workflow)
- Vehicles and car wash services
- Bookings and payments
- Notifications
- Audit logs
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("nrc", sa.String(30), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, index=True),
        sa.Column("admin_level", sa.String(20)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_suspended", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("suspended_at", sa.DateTime(timezone=True)),
        sa.Column("suspended_by", sa.Uuid, sa.ForeignKey("users.id")),
        sa.Column("suspension_reason", sa.Text),
        sa.Column("approval_status", sa.String(20), nullable=False, server_default="approved", index=True),
        sa.Column("created_by", sa.Uuid, sa.ForeignKey("users.id")),
        sa.Column("approval_requested_at", sa.DateTime(timezone=True)),
        sa.Column("approved_by", sa.Uuid, sa.ForeignKey("users.id")),
        sa.Column("approved_at", sa.DateTime(timezone=True)),
        sa.Column("approval_notes", sa.Text),
        sa.Column("rejected_at", sa.DateTime(timezone=True)),
        sa.Column("rejection_reason", sa.Text),
        sa.Column("business_name", sa.String(150)),
        sa.Column("is_business", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("license_no", sa.String(50)),
        sa.Column("license_type", sa.String(20)),
        sa.Column("license_expiry", sa.Date),
        sa.Column("address", sa.Text),
        sa.Column("marital_status", sa.String(20)),
        sa.Column("availability", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("car_wash_name", sa.String(150)),
        sa.Column("location", sa.Text),
        sa.Column("washing_bays", sa.Integer),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("washing_bays IS NULL OR washing_bays BETWEEN 1 AND 20", name="ck_users_washing_bays"),
    )

    # ==================== VEHICLES & SERVICES ====================
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("client_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("make", sa.String(50), nullable=False),
        sa.Column("model", sa.String(50), nullable=False),
        sa.Column("plate_no", sa.String(20), nullable=False),
        sa.Column("color", sa.String(30), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "services",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("car_wash_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("price", sa.Integer, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("price >= 0", name="ck_services_price"),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("client_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("car_wash_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("vehicle_id", sa.Uuid, sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("service_id", sa.Uuid, sa.ForeignKey("services.id"), nullable=False),
        sa.Column("driver_id", sa.Uuid, sa.ForeignKey("users.id")),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("total_amount", sa.Integer, nullable=False),
        sa.Column("pickup_location", sa.String(200), nullable=False),
        sa.Column("pickup_lat", sa.Float),
        sa.Column("pickup_lng", sa.Float),
        sa.Column("notes", sa.Text),
        sa.Column("scheduled_pickup_time", sa.DateTime(timezone=True)),
        sa.Column("actual_pickup_time", sa.DateTime(timezone=True)),
        sa.Column("wash_start_time", sa.DateTime(timezone=True)),
        sa.Column("wash_complete_time", sa.DateTime(timezone=True)),
        sa.Column("delivery_time", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_by", sa.String(20)),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_bookings_client_created", "bookings", ["client_id", "created_at"])
    op.create_index("ix_bookings_driver_status", "bookings", ["driver_id", "status"])
    op.create_index("ix_bookings_car_wash_status", "bookings", ["car_wash_id", "status"])

    # ==================== PAYMENTS ====================
    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("booking_id", sa.Uuid, sa.ForeignKey("bookings.id"), unique=True, nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="ZMW"),
        sa.Column("method", sa.String(20)),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("transaction_id", sa.String(100)),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== NOTIFICATIONS ====================
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("notification_type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("booking_id", sa.Uuid, sa.ForeignKey("bookings.id")),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== AUDIT ====================
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id"), index=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("resource_type", sa.String(50), nullable=False, index=True),
        sa.Column("resource_id", sa.Uuid, index=True),
        sa.Column("old_values", sa.JSON),
        sa.Column("new_values", sa.JSON),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("user_agent", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("audit_logs")
    op.drop_table("notifications")
    op.drop_table("payments")
    op.drop_index("ix_bookings_car_wash_status", table_name="bookings")
    op.drop_index("ix_bookings_driver_status", table_name="bookings")
    op.drop_index("ix_bookings_client_created", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("services")
    op.drop_table("vehicles")
    op.drop_table("users")
