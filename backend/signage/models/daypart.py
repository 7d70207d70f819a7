"""
DaypartPreset model — named time blocks (e.g. "Breakfast 06:00-10:00") that
editors apply to schedule entries. System presets have no tenant.
"""
import enum
import uuid
from datetime import time

from sqlalchemy import String, Time
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from signage.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum


class PresetType(str, enum.Enum):
    MEAL = "meal"
    PERIOD = "period"
    CUSTOM = "custom"


class DaypartPreset(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "daypart_presets"

    tenant_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    preset_type: Mapped[PresetType] = mapped_column(
        pg_enum(PresetType, "preset_type"), default=PresetType.CUSTOM, nullable=False
    )
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    days_of_week: Mapped[list[int]] = mapped_column(JSONB, default=lambda: [0, 1, 2, 3, 4, 5, 6], nullable=False)
