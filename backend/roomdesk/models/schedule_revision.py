import datetime

from sqlalchemy import Date, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from roomdesk.db.base import Base


class ScheduleRevision(Base):
    """Write counter per date, bumped in the same transaction as every shift or block change."""

    __tablename__ = "schedule_revisions"

    date: Mapped[datetime.date] = mapped_column(Date, primary_key=True)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
