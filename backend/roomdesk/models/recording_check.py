import datetime
import uuid

from sqlalchemy import Date, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from roomdesk.db.base import Base


class RecordingCheck(Base):
    __tablename__ = "recording_checks"
    __table_args__ = (UniqueConstraint("event_id", "check_number", name="uq_recording_checks_event_number"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    check_number: Mapped[int] = mapped_column(Integer, nullable=False)
    check_time: Mapped[str] = mapped_column(String(8), nullable=False)
    owner_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    notified_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
