import datetime

from sqlalchemy import Date, DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from roomdesk.db.base import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_name: Mapped[str | None] = mapped_column(String(300), nullable=True)
    event_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    instructor_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    room_name: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True, index=True)
    start_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    resources: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    man_owner: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
