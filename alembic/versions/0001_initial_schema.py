"""Create rooms, bookings, payments, inventory and shift tables

Revision ID: 0001
Revises:
Create Date: 2025-11-18 09:12:04.118240

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(12, 2)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "rooms",
        sa.Column("room_number", sa.String(10), primary_key=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("operator_id", sa.Integer(), nullable=False, index=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="open"),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("opening_cash", MONEY, nullable=False, server_default="0"),
        sa.Column("closing_cash", MONEY, nullable=True),
        sa.Column("expected_cash", MONEY, nullable=True),
        sa.Column("cash_difference", MONEY, nullable=True),
        sa.Column("total_cash_sales", MONEY, nullable=False, server_default="0"),
        sa.Column("total_card_sales", MONEY, nullable=False, server_default="0"),
        sa.Column("total_transfer_sales", MONEY, nullable=False, server_default="0"),
        sa.Column("total_sales", MONEY, nullable=False, server_default="0"),
        sa.Column("total_cash_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_card_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_transfer_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_transactions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("check_ins_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("check_outs_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bookings_created_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("opening_notes", sa.Text(), nullable=True),
        sa.Column("closing_notes", sa.Text(), nullable=True),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "room_number", sa.String(10), sa.ForeignKey("rooms.room_number"), nullable=False, index=True
        ),
        sa.Column("guest_id", sa.Integer(), nullable=False, index=True),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("guest_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("discount_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("discount_reason", sa.Text(), nullable=True),
        sa.Column("discount_applied_by", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("room_clean", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("inventory_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("inventory_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("inventory_delivered", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("inventory_delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("inventory_delivered_by", sa.Integer(), nullable=True),
        sa.Column("passengers_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("passengers_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_check_in", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_check_out", sa.DateTime(timezone=True), nullable=True),
        sa.Column("checkout_notes", sa.Text(), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_by", sa.Integer(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("method", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="completed"),
        sa.Column("payment_type", sa.String(20), nullable=False, server_default="partial"),
        sa.Column("processed_by", sa.Integer(), nullable=True),
        sa.Column("shift_id", sa.Integer(), sa.ForeignKey("shifts.id"), nullable=True, index=True),
        *_timestamps(),
    )

    op.create_table(
        "extra_charges",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )

    op.create_table(
        "booking_credits",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("guest_id", sa.Integer(), nullable=False, index=True),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("valid_until", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "registered_passengers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("document_number", sa.String(50), nullable=True),
        sa.Column("is_minor", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.String(50), nullable=False, server_default="bedding"),
        sa.Column("is_reusable", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "room_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "room_number",
            sa.String(10),
            sa.ForeignKey("rooms.room_number", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("inventory_items.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
    )

    op.create_table(
        "inventory_usages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("inventory_items.id"), nullable=False),
        sa.Column("quantity_assigned", sa.Integer(), nullable=False),
        sa.Column("quantity_consumed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quantity_returned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="assigned"),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("returned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "laundry_batches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_number", sa.String(10), nullable=False, index=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False, index=True),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("inventory_items.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="normal"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "laundry_batches",
        "inventory_usages",
        "room_items",
        "inventory_items",
        "registered_passengers",
        "booking_credits",
        "extra_charges",
        "payments",
        "bookings",
        "shifts",
        "rooms",
    ):
        op.drop_table(table)
