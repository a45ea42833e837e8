from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from roomdesk.db.base import Base


class RoomFilter(Base):
    """Named room preset: which rooms to show and which rooms send event reminders."""

    __tablename__ = "room_filters"
    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_room_filters_owner_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    display_rooms: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    notify_rooms: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # Null for shared presets created by an admin.
    owner_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
