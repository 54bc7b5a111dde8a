"""Create external_bookings, reservations and availability_overrides

Revision ID: 3a1f0c2b9d47
Revises:
Create Date: 2026-10-17 09:12:31.418207

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3a1f0c2b9d47"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = "stays"


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "external_bookings",
        sa.Column("uid", sa.String(), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("summary", sa.String(), nullable=False, server_default=""),
        sa.Column("reservation_number", sa.String(length=64), nullable=False),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column(
            "synced_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.PrimaryKeyConstraint("uid", name=op.f("pk_external_bookings")),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_external_bookings_source", "external_bookings", ["source"], schema=SCHEMA
    )
    op.create_index(
        "ix_external_bookings_source_check_in",
        "external_bookings",
        ["source", "check_in"],
        schema=SCHEMA,
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reservation_number", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("adults", sa.Integer(), nullable=False),
        sa.Column("kids", sa.Integer(), nullable=False),
        sa.Column("has_pet", sa.Boolean(), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("guest_name", sa.String(), nullable=False),
        sa.Column("guest_phone", sa.String(), nullable=False),
        sa.Column("guest_email", sa.String(), nullable=True),
        sa.Column("room_id", sa.Integer(), nullable=True),
        sa.Column("booking_source", sa.String(length=32), nullable=False),
        sa.Column("arrival_time", sa.String(length=8), nullable=True),
        sa.Column("transaction_id", sa.String(), nullable=True),
        sa.Column("payment_status", sa.String(length=32), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_reservations")),
        sa.UniqueConstraint(
            "reservation_number", name=op.f("uq_reservations_reservation_number")
        ),
        schema=SCHEMA,
    )
    op.create_index("ix_reservations_status", "reservations", ["status"], schema=SCHEMA)
    op.create_index("ix_reservations_room_id", "reservations", ["room_id"], schema=SCHEMA)

    op.create_table(
        "availability_overrides",
        sa.Column("room_id", sa.Integer(), nullable=False),
        sa.Column("override_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("note", sa.String(), nullable=True),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.PrimaryKeyConstraint(
            "room_id", "override_date", name=op.f("pk_availability_overrides")
        ),
        schema=SCHEMA,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("availability_overrides", schema=SCHEMA)
    op.drop_index("ix_reservations_room_id", table_name="reservations", schema=SCHEMA)
    op.drop_index("ix_reservations_status", table_name="reservations", schema=SCHEMA)
    op.drop_table("reservations", schema=SCHEMA)
    op.drop_index(
        "ix_external_bookings_source_check_in", table_name="external_bookings", schema=SCHEMA
    )
    op.drop_index("ix_external_bookings_source", table_name="external_bookings", schema=SCHEMA)
    op.drop_table("external_bookings", schema=SCHEMA)
