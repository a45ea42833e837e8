"""create faculty, room filters and schedule revisions

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        op.execute("ALTER TYPE notification_type ADD VALUE IF NOT EXISTS 'event_reminder'")

    op.create_table(
        "schedule_revisions",
        sa.Column("date", sa.Date(), primary_key=True, nullable=False),
        sa.Column("revision", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "faculty",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("calendar_name", sa.String(length=200), nullable=False),
        sa.Column("directory_name", sa.String(length=200), nullable=True),
        sa.Column("directory_title", sa.String(length=300), nullable=True),
        sa.Column("directory_subtitle", sa.String(length=300), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("bio_url", sa.String(length=500), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("setup_notes", sa.Text(), nullable=True),
        sa.Column("timing", sa.Integer(), nullable=True),
        sa.Column("complexity", sa.Integer(), nullable=True),
        sa.Column("temperament", sa.Integer(), nullable=True),
        sa.Column("uses_mic", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("left_source", sa.String(length=100), nullable=True),
        sa.Column("right_source", sa.String(length=100), nullable=True),
        sa.Column("setup_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("setup_updated_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_faculty_calendar_name", "faculty", ["calendar_name"], unique=True)

    op.create_table(
        "room_filters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("display_rooms", sa.JSON(), nullable=False),
        sa.Column("notify_rooms", sa.JSON(), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("owner_id", "name", name="uq_room_filters_owner_name"),
    )
    op.create_index("ix_room_filters_owner_id", "room_filters", ["owner_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_room_filters_owner_id", table_name="room_filters")
    op.drop_table("room_filters")
    op.drop_index("ix_faculty_calendar_name", table_name="faculty")
    op.drop_table("faculty")
    op.drop_table("schedule_revisions")
    # Postgres cannot drop a single enum value; event_reminder stays on notification_type.
