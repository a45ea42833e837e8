from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from roomdesk.db.base import Base


class Faculty(Base):
    __tablename__ = "faculty"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Instructor name exactly as the calendar feed writes it on events.
    calendar_name: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)
    directory_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    directory_title: Mapped[str | None] = mapped_column(String(300), nullable=True)
    directory_subtitle: Mapped[str | None] = mapped_column(String(300), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    setup_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    timing: Mapped[int | None] = mapped_column(Integer, nullable=True)
    complexity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    temperament: Mapped[int | None] = mapped_column(Integer, nullable=True)
    uses_mic: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    left_source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    right_source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    setup_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    setup_updated_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
