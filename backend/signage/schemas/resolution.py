"""Pydantic schemas for resolved decisions and previews."""
from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel

from signage.models.content import ContentType
from signage.services.content_resolver import Decision, DecisionKind
from signage.services.week_preview import DayPlan, HourSlot, PreviewEntry


class DecisionResponse(BaseModel):
    kind: DecisionKind
    content_type: ContentType | None = None
    content_id: UUID | None = None
    schedule_id: UUID | None = None
    entry_id: UUID | None = None
    campaign_id: UUID | None = None
    target_id: UUID | None = None
    priority: int | None = None
    emergency: bool = False
    degraded: bool = False
    resolved_at: datetime

    @classmethod
    def from_decision(cls, decision: Decision, resolved_at: datetime) -> "DecisionResponse":
        return cls(
            kind=decision.kind,
            content_type=decision.content.content_type if decision.content else None,
            content_id=decision.content.content_id if decision.content else None,
            schedule_id=decision.schedule_id,
            entry_id=decision.entry_id,
            campaign_id=decision.campaign_id,
            target_id=decision.target_id,
            priority=decision.priority,
            emergency=decision.emergency,
            degraded=decision.degraded,
            resolved_at=resolved_at,
        )


class PreviewEntryResponse(BaseModel):
    entry_id: UUID
    content_type: ContentType | None = None
    content_id: UUID | None = None
    content_name: str | None = None
    start_time: time
    end_time: time
    priority: int
    spans_midnight: bool
    is_blank: bool
    campaign_id: UUID | None = None
    carried_over: bool = False

    @classmethod
    def from_entry(cls, entry: PreviewEntry) -> "PreviewEntryResponse":
        return cls(
            entry_id=entry.entry_id,
            content_type=entry.content.content_type if entry.content else None,
            content_id=entry.content.content_id if entry.content else None,
            content_name=entry.content_name,
            start_time=entry.start_time,
            end_time=entry.end_time,
            priority=entry.priority,
            spans_midnight=entry.spans_midnight,
            is_blank=entry.is_blank,
            campaign_id=entry.campaign_id,
            carried_over=entry.carried_over,
        )


class DayPlanResponse(BaseModel):
    date: date
    day_of_week: int
    entries: list[PreviewEntryResponse]
    filler_applies: bool
    filler_content_type: ContentType | None = None
    filler_content_id: UUID | None = None
    utc_start: datetime
    utc_end: datetime
    hours: float

    @classmethod
    def from_plan(cls, plan: DayPlan) -> "DayPlanResponse":
        return cls(
            date=plan.date,
            day_of_week=plan.day_of_week,
            entries=[PreviewEntryResponse.from_entry(e) for e in plan.entries],
            filler_applies=plan.filler_applies,
            filler_content_type=plan.filler.content_type if plan.filler else None,
            filler_content_id=plan.filler.content_id if plan.filler else None,
            utc_start=plan.utc_start,
            utc_end=plan.utc_end,
            hours=plan.hours,
        )


class WeekPreviewResponse(BaseModel):
    schedule_id: UUID
    timezone: str
    start_date: date
    days: list[DayPlanResponse]


class HourSlotResponse(BaseModel):
    hour: int
    kind: DecisionKind
    content_type: ContentType | None = None
    content_id: UUID | None = None
    content_name: str | None = None
    entry_id: UUID | None = None

    @classmethod
    def from_slot(cls, slot: HourSlot) -> "HourSlotResponse":
        content = slot.decision.content
        return cls(
            hour=slot.hour,
            kind=slot.decision.kind,
            content_type=content.content_type if content else None,
            content_id=content.content_id if content else None,
            content_name=slot.content_name,
            entry_id=slot.decision.entry_id,
        )


class DayPreviewResponse(BaseModel):
    schedule_id: UUID
    date: date
    hours: list[HourSlotResponse]
