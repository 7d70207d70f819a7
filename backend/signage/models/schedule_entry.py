"""
ScheduleEntry model — one time-windowed rule within a schedule.
Examples:
  - "Weekdays 11:00-14:00: lunch-menu playlist"
  - "Tuesdays 11:30-12:30, priority 5: specials playlist"
  - "Every day 23:00-06:00: screen off"

Entries may overlap; overlap is arbitrated by priority when resolving,
never rejected on write.
"""
import enum
import uuid
from datetime import date, time
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Time
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from signage.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from signage.models.content import ContentType

if TYPE_CHECKING:
    from signage.models.schedule import Schedule


class EventType(str, enum.Enum):
    CONTENT = "content"
    SCREEN_OFF = "screen_off"


class RepeatType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class ScheduleEntry(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "schedule_entries"

    schedule_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # What to display
    content_type: Mapped[ContentType] = mapped_column(
        pg_enum(ContentType, "content_type"), default=ContentType.PLAYLIST, nullable=False
    )
    content_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    # Legacy placement inside a device layout; not used for time logic
    target_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    target_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    # Calendar range (inclusive, NULL = unbounded)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Daily window [start_time, end_time); end <= start spans midnight
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    # 0=Sunday .. 6=Saturday
    days_of_week: Mapped[list[int]] = mapped_column(JSONB, default=lambda: [1, 2, 3, 4, 5], nullable=False)

    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    event_type: Mapped[EventType] = mapped_column(
        pg_enum(EventType, "event_type"), default=EventType.CONTENT, nullable=False
    )

    # Recurrence on top of days_of_week: {"interval", "anchor_date", "until_date", "until_count"}
    repeat_type: Mapped[RepeatType | None] = mapped_column(pg_enum(RepeatType, "repeat_type"), nullable=True)
    repeat_config: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    campaign_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True
    )

    schedule: Mapped["Schedule"] = relationship("Schedule", back_populates="entries", lazy="noload")
