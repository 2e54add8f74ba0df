"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _record_columns():
    """Columns every booking table shares (models/booking.py BookingRecordMixin)."""
    return [
        sa.Column("status", sa.String(length=30), nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("selected_services", sa.JSON(), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=True),
        sa.Column("paid_amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("payment_status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("payment_method", sa.String(length=20), nullable=True),
        sa.Column("invoice_generated", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("invoice_sent", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("invoice_number", sa.String(length=32), nullable=True, unique=True),
        sa.Column("invoice_url", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _service_flags(*names):
    return [sa.Column(n, sa.Boolean(), nullable=False, server_default=sa.text("false")) for n in names]


def upgrade() -> None:
    op.create_table(
        "hotels",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("city", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("standard_room_price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("deluxe_room_price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("family_suite_price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("meals_price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("transport_price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "umrah_packages",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("duration_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "hotel_bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("hotel_id", sa.String(length=36), nullable=False),
        sa.Column("hotel_name", sa.String(length=200), nullable=True),
        sa.Column("customer_name", sa.String(length=200), nullable=False),
        sa.Column("customer_email", sa.String(length=320), nullable=False),
        sa.Column("customer_phone", sa.String(length=40), nullable=False),
        sa.Column("customer_nationality", sa.String(length=80), nullable=True),
        sa.Column("check_in_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("check_out_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("rooms", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("adults", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("children", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("child_ages", sa.JSON(), nullable=False),
        sa.Column("bed_type", sa.String(length=20), nullable=True),
        sa.Column("room_type", sa.String(length=30), nullable=False, server_default="standard"),
        *_service_flags("meals", "transport"),
        *_record_columns(),
    )
    op.create_index("ix_hotel_bookings_hotel_id", "hotel_bookings", ["hotel_id"])
    op.create_index("ix_hotel_bookings_customer_email", "hotel_bookings", ["customer_email"])
    op.create_index("ix_hotel_bookings_status", "hotel_bookings", ["status"])

    op.create_table(
        "package_bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("package_id", sa.String(length=36), nullable=False),
        sa.Column("customer_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("customer_email", sa.String(length=320), nullable=False),
        sa.Column("customer_phone", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("customer_nationality", sa.String(length=80), nullable=True),
        sa.Column("travelers", sa.JSON(), nullable=False),
        sa.Column("adults", sa.JSON(), nullable=False),
        sa.Column("children", sa.JSON(), nullable=False),
        sa.Column("infants", sa.JSON(), nullable=False),
        sa.Column("rooms", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("check_in_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_date", sa.DateTime(timezone=True), nullable=True),
        *_service_flags("umrah_visa", "transport", "zaiarat", "meals", "esim"),
        *_record_columns(),
    )
    op.create_index("ix_package_bookings_package_id", "package_bookings", ["package_id"])
    op.create_index("ix_package_bookings_customer_email", "package_bookings", ["customer_email"])
    op.create_index("ix_package_bookings_status", "package_bookings", ["status"])

    op.create_table(
        "custom_umrah_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.String(length=40), nullable=False),
        sa.Column("nationality", sa.String(length=80), nullable=False),
        sa.Column("from_city", sa.String(length=120), nullable=False),
        sa.Column("to_city", sa.String(length=120), nullable=False),
        sa.Column("depart_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("return_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("airline", sa.String(length=120), nullable=False),
        sa.Column("airline_class", sa.String(length=40), nullable=False),
        sa.Column("different_return_city", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("return_from", sa.String(length=120), nullable=True),
        sa.Column("return_to", sa.String(length=120), nullable=True),
        sa.Column("adults", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("children", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("child_ages", sa.JSON(), nullable=False),
        sa.Column("rooms", sa.Integer(), nullable=False, server_default="1"),
        *_service_flags("umrah_visa", "transport", "zaiarat", "meals", "esim"),
        sa.Column("hotels", sa.JSON(), nullable=False),
        *_record_columns(),
    )
    op.create_index("ix_custom_umrah_requests_email", "custom_umrah_requests", ["email"])
    op.create_index("ix_custom_umrah_requests_status", "custom_umrah_requests", ["status"])


def downgrade() -> None:
    op.drop_table("custom_umrah_requests")
    op.drop_table("package_bookings")
    op.drop_table("hotel_bookings")
    op.drop_table("umrah_packages")
    op.drop_table("hotels")
