"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates the tables of the repair shop booking service:
- Users (keyed by identity provider uid)
- Cars
- Bookings
- Booking activity records
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
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, index=True),
        sa.Column("name", sa.String(255)),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== CARS ====================
    op.create_table(
        "cars",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("make", sa.String(100), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("license_plate", sa.String(20), nullable=False),
        sa.Column("mileage", sa.Integer),
        sa.Column("vin", sa.String(17)),
        sa.Column("color", sa.String(50)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("reference_number", sa.String(20), nullable=False, unique=True, index=True),
        sa.Column("car_id", sa.Uuid, sa.ForeignKey("cars.id"), nullable=False, index=True),
        sa.Column("user_id", sa.String(128), sa.ForeignKey("users.id"), nullable=False, index=True),
        # Request
        sa.Column("issue_desc", sa.Text, nullable=False),
        sa.Column("preferred_date", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING", index=True),
        # Customer contact
        sa.Column("phone_number", sa.String(30), nullable=False, index=True),
        sa.Column("email", sa.String(255)),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("street_address", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(50)),
        sa.Column("zip_code", sa.String(20)),
        sa.Column("sms_opt_in", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("vehicle_mileage", sa.Integer),
        sa.Column("service_history_notes", sa.Text),
        # Shop work
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("diagnosis", sa.Text, nullable=False, server_default=""),
        sa.Column("parts_needed", sa.Text, nullable=False, server_default=""),
        sa.Column("labor_hours", sa.Numeric(6, 2)),
        sa.Column("total_price", sa.Numeric(10, 2)),
        sa.Column("estimated_completion_date", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== ACTIVITY ====================
    op.create_table(
        "booking_updates",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "booking_id",
            sa.Uuid,
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("old_status", sa.String(20)),
        sa.Column("new_status", sa.String(20)),
        sa.Column("created_by", sa.String(128), nullable=False),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("booking_updates")
    op.drop_table("bookings")
    op.drop_table("cars")
    op.drop_table("users")
