"""
Week and day previews for operators.

preview_week lists everything that could play on each of seven calendar
days without arbitrating between overlapping entries, so priority conflicts
stay visible. preview_hours samples the resolver at the middle of each
local hour of one day.
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable

from signage.services.content_catalog import ContentRef
from signage.services.content_resolver import Decision, decide_at
from signage.services.schedule_rules import (
    EntryRule,
    OvernightPolicy,
    day_of_week,
    entries_carried_over,
    entries_running_on,
    load_zone,
)

DAYS_IN_PREVIEW = 7


@dataclass(frozen=True)
class PreviewEntry:
    entry_id: uuid.UUID | str
    content: ContentRef | None
    content_name: str | None
    start_time: time
    end_time: time
    priority: int
    spans_midnight: bool
    is_blank: bool
    campaign_id: uuid.UUID | str | None = None
    carried_over: bool = False


@dataclass(frozen=True)
class DayPlan:
    date: date
    day_of_week: int
    entries: list[PreviewEntry]
    filler_applies: bool
    filler: ContentRef | None
    utc_start: datetime
    utc_end: datetime

    @property
    def hours(self) -> float:
        """Length of the local day; 23 or 25 on DST transition days."""
        return (self.utc_end - self.utc_start).total_seconds() / 3600


@dataclass(frozen=True)
class HourSlot:
    hour: int
    decision: Decision
    content_name: str | None = None


def local_day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """UTC instants of the local midnights that open and close `day`."""
    zone = load_zone(tz_name)
    start = datetime.combine(day, time(0), tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time(0), tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def _preview_entry(entry: EntryRule, names: dict[ContentRef, str], carried_over: bool = False) -> PreviewEntry:
    return PreviewEntry(
        entry_id=entry.id,
        content=entry.content,
        content_name=names.get(entry.content) if entry.content else None,
        start_time=entry.start_time,
        end_time=entry.end_time,
        priority=entry.priority,
        spans_midnight=entry.spans_midnight,
        is_blank=entry.is_blank,
        campaign_id=entry.campaign_id,
        carried_over=carried_over,
    )


def plan_day(
    schedule,
    entries: Iterable[EntryRule],
    filler: ContentRef | None,
    day: date,
    content_names: dict[ContentRef, str] | None = None,
    policy: OvernightPolicy = OvernightPolicy.WRAP,
) -> DayPlan:
    """
    Everything that can play on one local day. Under the wrap policy the
    after-midnight tails of the previous day's overnight windows are listed
    first, marked carried_over.
    """
    names = content_names or {}
    entries = list(entries)
    tails = sorted(entries_carried_over(entries, day, policy), key=lambda e: (-e.priority, str(e.id)))
    running = sorted(entries_running_on(entries, day), key=lambda e: (e.start_minute, -e.priority, str(e.id)))
    utc_start, utc_end = local_day_bounds(day, schedule.timezone)
    return DayPlan(
        date=day,
        day_of_week=day_of_week(day),
        entries=[_preview_entry(e, names, carried_over=True) for e in tails]
        + [_preview_entry(e, names) for e in running],
        filler_applies=not (tails or running),
        filler=filler,
        utc_start=utc_start,
        utc_end=utc_end,
    )


def preview_week(
    schedule,
    entries: Iterable[EntryRule],
    filler: ContentRef | None,
    start_date: date,
    content_names: dict[ContentRef, str] | None = None,
    policy: OvernightPolicy = OvernightPolicy.WRAP,
) -> list[DayPlan]:
    """Seven consecutive day plans starting at start_date."""
    entries = list(entries)
    return [
        plan_day(schedule, entries, filler, start_date + timedelta(days=offset), content_names, policy)
        for offset in range(DAYS_IN_PREVIEW)
    ]


def preview_hours(
    schedule,
    entries: Iterable[EntryRule],
    filler: ContentRef | None,
    day: date,
    content_names: dict[ContentRef, str] | None = None,
    policy: OvernightPolicy = OvernightPolicy.WRAP,
) -> list[HourSlot]:
    """Winning decision at HH:30 local time for each hour of the day."""
    load_zone(schedule.timezone)
    names = content_names or {}
    entries = list(entries)
    slots = []
    for hour in range(24):
        decision = decide_at(schedule, entries, filler, day, hour * 60 + 30, policy)
        name = names.get(decision.content) if decision.content else None
        slots.append(HourSlot(hour=hour, decision=decision, content_name=name))
    return slots
