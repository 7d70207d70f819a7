"""
Schedule model — top-level container of time-windowed content rules for a tenant.
A schedule is the unit of assignment to devices and screen groups.
"""
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from signage.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from signage.models.content import ContentType

if TYPE_CHECKING:
    from signage.models.schedule_entry import ScheduleEntry


class Schedule(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "schedules"

    tenant_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # IANA zone name; every window of this schedule is evaluated in local time
    timezone: Mapped[str] = mapped_column(String(64), default="UTC", nullable=False)

    # Filler plays when no entry is eligible
    filler_content_type: Mapped[ContentType | None] = mapped_column(
        pg_enum(ContentType, "content_type"), nullable=True
    )
    filler_content_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    entries: Mapped[list["ScheduleEntry"]] = relationship(
        "ScheduleEntry",
        back_populates="schedule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )
