"""
Pydantic schemas for schedules, entries, filler and conflict checks.

Entry times arrive as "HH:MM" strings and are validated by the schedule
store, so every malformed entry is rejected the same way.
"""
from datetime import date, datetime, time
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from signage.models.content import ContentType
from signage.models.schedule_entry import EventType, RepeatType


# ==================== Schedule ====================
class ScheduleCreate(BaseModel):
    name: str = Field(..., max_length=255)
    description: str | None = None
    timezone: str | None = None


class ScheduleUpdate(BaseModel):
    name: str | None = Field(None, max_length=255)
    description: str | None = None
    timezone: str | None = None


class ScheduleResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    name: str
    description: str | None = None
    timezone: str
    filler_content_type: ContentType | None = None
    filler_content_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FillerUpdate(BaseModel):
    content_type: ContentType
    content_id: UUID


class ScheduleUsage(BaseModel):
    schedule_id: UUID
    devices: int
    groups: int
    entries: int


# ==================== Entries ====================
class EntryFields(BaseModel):
    content_type: ContentType | None = None
    content_id: UUID | None = None
    target_type: str | None = None
    target_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    days_of_week: list[int] | None = None
    priority: int | None = None
    is_active: bool | None = None
    event_type: EventType | None = None
    repeat_type: RepeatType | None = None
    repeat_config: dict[str, Any] | None = None
    campaign_id: UUID | None = None


class EntryCreate(EntryFields):
    pass


class EntryUpdate(EntryFields):
    pass


class EntryResponse(BaseModel):
    id: UUID
    schedule_id: UUID
    content_type: ContentType
    content_id: UUID | None = None
    target_type: str | None = None
    target_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    start_time: time
    end_time: time
    days_of_week: list[int]
    priority: int
    is_active: bool
    event_type: EventType
    repeat_type: RepeatType | None = None
    repeat_config: dict[str, Any] | None = None
    campaign_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== Conflicts ====================
class ConflictCheck(EntryFields):
    exclude_entry_id: UUID | None = None


class ConflictingEntry(BaseModel):
    entry_id: UUID
    content_type: ContentType | None = None
    content_id: UUID | None = None
    content_name: str | None = None
    event_type: EventType
    start_time: time
    end_time: time
    days_of_week: list[int]
    priority: int
    window: str
    days: str


class ConflictReport(BaseModel):
    has_conflicts: bool
    conflicts: list[ConflictingEntry]
