"""create schedule tables

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


profile_role_enum = sa.Enum("admin", "scheduler", "staff", name="profile_role")


def upgrade() -> None:
    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_rooms_name", "rooms", ["name"], unique=True)

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("role", profile_role_enum, nullable=False, server_default="staff"),
        sa.Column("current_filter", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)

    op.create_table(
        "shifts",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("profile_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("profile_id", "date", name="uq_shifts_profile_date"),
    )
    op.create_index("ix_shifts_profile_id", "shifts", ["profile_id"], unique=False)
    op.create_index("ix_shifts_date", "shifts", ["date"], unique=False)

    op.create_table(
        "shift_blocks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("assignments", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_shift_blocks_date", "shift_blocks", ["date"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("event_name", sa.String(length=300), nullable=True),
        sa.Column("event_type", sa.String(length=100), nullable=True),
        sa.Column("instructor_name", sa.String(length=200), nullable=True),
        sa.Column("room_name", sa.String(length=100), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.String(length=8), nullable=True),
        sa.Column("end_time", sa.String(length=8), nullable=True),
        sa.Column("resources", sa.JSON(), nullable=False),
        sa.Column("man_owner", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_events_room_name", "events", ["room_name"], unique=False)
    op.create_index("ix_events_date", "events", ["date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_events_date", table_name="events")
    op.drop_index("ix_events_room_name", table_name="events")
    op.drop_table("events")
    op.drop_index("ix_shift_blocks_date", table_name="shift_blocks")
    op.drop_table("shift_blocks")
    op.drop_index("ix_shifts_date", table_name="shifts")
    op.drop_index("ix_shifts_profile_id", table_name="shifts")
    op.drop_table("shifts")
    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")
    op.drop_index("ix_rooms_name", table_name="rooms")
    op.drop_table("rooms")
    profile_role_enum.drop(op.get_bind(), checkfirst=True)
