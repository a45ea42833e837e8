from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from roomdesk.db.base import Base


class ProfileRole(str, Enum):
    admin = "admin"
    scheduler = "scheduler"
    staff = "staff"


class Profile(Base):
    __tablename__ = "profiles"

    # Same identifier as the auth provider's user id (token subject).
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, index=True, nullable=True)
    role: Mapped[ProfileRole] = mapped_column(
        SAEnum(ProfileRole, name="profile_role"), nullable=False, default=ProfileRole.staff
    )
    current_filter: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
