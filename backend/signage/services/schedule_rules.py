"""
Schedule rules — pure predicates shared by the resolver, the week previewer
and the conflict detector, plus the field validators the store runs on write.

Times are handled as minutes since local midnight. A window whose end is at
or before its start spans midnight and is represented with an end past 1440
(e.g. 22:00-02:00 becomes [1320, 1560)); equal start and end is a full day.
"""
import enum
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from signage.core.exceptions import InvalidTimezoneError, ValidationError
from signage.models.content import ContentType
from signage.models.schedule_entry import EventType, RepeatType
from signage.services.content_catalog import ContentRef

MINUTES_PER_DAY = 24 * 60
ALL_DAYS = (0, 1, 2, 3, 4, 5, 6)
WEEKDAYS = (1, 2, 3, 4, 5)
DEFAULT_START_TIME = time(9, 0)
DEFAULT_END_TIME = time(17, 0)

# Occurrence counting walks the series; stop at this many days of history.
MAX_SERIES_SCAN_DAYS = 366 * 30


class OvernightPolicy(str, enum.Enum):
    WRAP = "wrap"
    SAME_DAY = "same_day"


# ==================== Calendar helpers ====================

def day_of_week(d: date) -> int:
    """Sunday=0 .. Saturday=6."""
    return d.isoweekday() % 7


def week_start(d: date) -> date:
    return d - timedelta(days=day_of_week(d))


def minute_of_day(t: time) -> int:
    return t.hour * 60 + t.minute


def load_zone(name: str) -> ZoneInfo:
    """Load a schedule's zone, failing loudly rather than defaulting to UTC."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as exc:
        raise InvalidTimezoneError(f"Unknown timezone: {name!r}") from exc


def local_moment(instant: datetime, tz_name: str) -> tuple[date, int]:
    """Calendar date and minute-of-day of an instant in the schedule's zone."""
    zone = load_zone(tz_name)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=ZoneInfo("UTC"))
    local = instant.astimezone(zone)
    return local.date(), local.hour * 60 + local.minute


def dates_overlap(
    a_start: date | None, a_end: date | None, b_start: date | None, b_end: date | None
) -> bool:
    lo_a, hi_a = a_start or date.min, a_end or date.max
    lo_b, hi_b = b_start or date.min, b_end or date.max
    return lo_a <= hi_b and lo_b <= hi_a


def shift_date(d: date | None, days: int) -> date | None:
    if d is None:
        return None
    try:
        return d + timedelta(days=days)
    except OverflowError:
        return d


# ==================== Recurrence ====================

@dataclass(frozen=True)
class RepeatRule:
    """Every Nth day or week from an anchor date, optionally bounded."""

    unit: RepeatType
    interval: int
    anchor: date
    until_date: date | None = None
    until_count: int | None = None

    def in_series(self, d: date) -> bool:
        if d < self.anchor:
            return False
        if self.until_date is not None and d > self.until_date:
            return False
        if self.unit is RepeatType.DAILY:
            return (d - self.anchor).days % self.interval == 0
        weeks = (week_start(d) - week_start(self.anchor)).days // 7
        return weeks % self.interval == 0

    def occurrences_through(self, d: date, days: frozenset[int], start_date: date | None, limit: int) -> int:
        """Count occurrences in [anchor, d]; stops counting once past limit."""
        count = 0
        first = max(self.anchor, start_date) if start_date else self.anchor
        if self.unit is RepeatType.DAILY:
            step = timedelta(days=self.interval)
            cursor = self.anchor
            while cursor <= d and (cursor - self.anchor).days <= MAX_SERIES_SCAN_DAYS:
                if cursor >= first and day_of_week(cursor) in days:
                    count += 1
                    if count > limit:
                        break
                cursor += step
            return count

        step = timedelta(weeks=self.interval)
        cursor = week_start(self.anchor)
        while cursor <= d and (cursor - self.anchor).days <= MAX_SERIES_SCAN_DAYS:
            for offset in range(7):
                day = cursor + timedelta(days=offset)
                if day < first or day > d:
                    continue
                if day_of_week(day) in days:
                    count += 1
            if count > limit:
                break
            cursor += step
        return count

    def matches(self, d: date, days: frozenset[int], start_date: date | None) -> bool:
        if not self.in_series(d):
            return False
        if self.until_count is None:
            return True
        return self.occurrences_through(d, days, start_date, self.until_count) <= self.until_count


def parse_repeat(
    repeat_type: RepeatType | str | None, config: dict | None, start_date: date | None
) -> RepeatRule | None:
    """Build a RepeatRule from stored fields, raising ValidationError on bad config."""
    if repeat_type is None:
        if config:
            raise ValidationError("repeat_config requires repeat_type")
        return None
    try:
        unit = RepeatType(repeat_type)
    except ValueError:
        raise ValidationError(f"repeat_type must be one of {[r.value for r in RepeatType]}")

    config = config or {}
    unknown = set(config) - {"interval", "anchor_date", "until_date", "until_count"}
    if unknown:
        raise ValidationError(f"Unknown repeat_config keys: {sorted(unknown)}")

    interval = config.get("interval", 1)
    if not isinstance(interval, int) or isinstance(interval, bool) or interval < 1:
        raise ValidationError("repeat_config.interval must be a positive integer")

    anchor = _parse_date(config.get("anchor_date"), "repeat_config.anchor_date") or start_date
    if anchor is None:
        raise ValidationError("A repeating entry needs repeat_config.anchor_date or a start_date")

    until_date = _parse_date(config.get("until_date"), "repeat_config.until_date")
    if until_date is not None and until_date < anchor:
        raise ValidationError("repeat_config.until_date is before the anchor date")

    until_count = config.get("until_count")
    if until_count is not None and (
        not isinstance(until_count, int) or isinstance(until_count, bool) or until_count < 1
    ):
        raise ValidationError("repeat_config.until_count must be a positive integer")

    return RepeatRule(unit, interval, anchor, until_date, until_count)


# ==================== Entry snapshot ====================

@dataclass(frozen=True)
class EntryRule:
    """Immutable snapshot of a schedule entry, detached from the ORM session."""

    id: uuid.UUID | str
    content: ContentRef | None
    start_time: time
    end_time: time
    days: frozenset[int]
    priority: int = 0
    is_active: bool = True
    event_type: EventType = EventType.CONTENT
    start_date: date | None = None
    end_date: date | None = None
    repeat: RepeatRule | None = None
    campaign_id: uuid.UUID | str | None = None
    schedule_id: uuid.UUID | str | None = None

    @classmethod
    def from_model(cls, entry) -> "EntryRule":
        return cls(
            id=entry.id,
            schedule_id=entry.schedule_id,
            content=ContentRef.maybe(entry.content_type, entry.content_id),
            start_time=parse_time(entry.start_time, "start_time"),
            end_time=parse_time(entry.end_time, "end_time"),
            days=frozenset(entry.days_of_week or ()),
            priority=entry.priority or 0,
            is_active=bool(entry.is_active),
            event_type=EventType(entry.event_type or EventType.CONTENT),
            start_date=entry.start_date,
            end_date=entry.end_date,
            repeat=parse_repeat(entry.repeat_type, entry.repeat_config, entry.start_date),
            campaign_id=entry.campaign_id,
        )

    @property
    def start_minute(self) -> int:
        return minute_of_day(self.start_time)

    @property
    def end_minute(self) -> int:
        """Window end on the extended timeline (past 1440 when spanning midnight)."""
        start, end = self.start_minute, minute_of_day(self.end_time)
        return end if end > start else end + MINUTES_PER_DAY

    @property
    def spans_midnight(self) -> bool:
        return self.end_minute > MINUTES_PER_DAY

    @property
    def is_blank(self) -> bool:
        return self.event_type is EventType.SCREEN_OFF

    def sort_key(self) -> tuple:
        """Priority desc, then earliest start, then lowest id."""
        return (-self.priority, self.start_minute, str(self.id))

    def runs_on(self, d: date) -> bool:
        """Whether the daily window opens on this calendar date."""
        if not self.is_active or day_of_week(d) not in self.days:
            return False
        if self.start_date is not None and d < self.start_date:
            return False
        if self.end_date is not None and d > self.end_date:
            return False
        if self.repeat is not None and not self.repeat.matches(d, self.days, self.start_date):
            return False
        return True

    def covers(self, d: date, minute: int, policy: OvernightPolicy = OvernightPolicy.WRAP) -> bool:
        """Whether the entry applies at local date d, minute-of-day minute."""
        start, end = self.start_minute, self.end_minute
        if policy is OvernightPolicy.SAME_DAY:
            if not self.runs_on(d):
                return False
            if end <= MINUTES_PER_DAY:
                return start <= minute < end
            return minute >= start or minute < end - MINUTES_PER_DAY

        if start <= minute < min(end, MINUTES_PER_DAY) and self.runs_on(d):
            return True
        # After-midnight tail of a window that opened the previous day
        if self.spans_midnight and minute < end - MINUTES_PER_DAY:
            return self.runs_on(d - timedelta(days=1))
        return False


def eligible_entries(
    entries: Iterable[EntryRule], d: date, minute: int, policy: OvernightPolicy = OvernightPolicy.WRAP
) -> list[EntryRule]:
    return [e for e in entries if e.covers(d, minute, policy)]


def entries_running_on(entries: Iterable[EntryRule], d: date) -> list[EntryRule]:
    return [e for e in entries if e.runs_on(d)]


def entries_carried_over(
    entries: Iterable[EntryRule], d: date, policy: OvernightPolicy = OvernightPolicy.WRAP
) -> list[EntryRule]:
    """Overnight windows opened on the previous day whose tail plays on d."""
    if policy is not OvernightPolicy.WRAP:
        return []
    previous = d - timedelta(days=1)
    return [e for e in entries if e.spans_midnight and e.runs_on(previous)]


# ==================== Write-time validation ====================

def parse_time(value: Any, field: str = "time") -> time:
    """Accept a time or an 'HH:MM' / 'HH:MM:SS' string."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) in (2, 3) and all(p.isdigit() and len(p) == 2 for p in parts):
            hour, minute = int(parts[0]), int(parts[1])
            second = int(parts[2]) if len(parts) == 3 else 0
            if hour < 24 and minute < 60 and second < 60:
                return time(hour, minute)
    raise ValidationError(f"{field} must be a time in HH:MM format", field=field)


def normalize_days(days: Any) -> list[int]:
    if days is None or isinstance(days, (str, bytes)) or not isinstance(days, Iterable):
        raise ValidationError("days_of_week must be a list of day numbers 0-6", field="days_of_week")
    values = list(days)
    if not values:
        raise ValidationError("days_of_week must contain at least one day", field="days_of_week")
    for day in values:
        if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
            raise ValidationError(f"Invalid day index: {day!r} (expected 0-6, Sunday=0)", field="days_of_week")
    return sorted(set(values))


def validate_timezone(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("timezone is required", field="timezone")
    try:
        load_zone(name.strip())
    except InvalidTimezoneError:
        raise ValidationError(f"Unknown timezone: {name!r}", field="timezone")
    return name.strip()


def validate_entry_fields(fields: dict, require_content: bool = True) -> dict:
    """
    Validate and normalize a complete set of entry fields.
    Raises ValidationError on the first problem; returns a new dict.
    """
    clean = dict(fields)

    try:
        clean["content_type"] = ContentType(clean.get("content_type") or ContentType.PLAYLIST)
    except ValueError:
        raise ValidationError(
            f"content_type must be one of {[c.value for c in ContentType]}", field="content_type"
        )
    try:
        clean["event_type"] = EventType(clean.get("event_type") or EventType.CONTENT)
    except ValueError:
        raise ValidationError(f"event_type must be one of {[e.value for e in EventType]}", field="event_type")

    if require_content and clean["event_type"] is EventType.CONTENT and clean.get("content_id") is None:
        raise ValidationError("content_id is required for content entries", field="content_id")

    target_type = clean.get("target_type")
    if target_type is not None:
        try:
            target_type = ContentType(target_type).value
        except ValueError:
            raise ValidationError(
                f"target_type must be one of {[c.value for c in ContentType]}", field="target_type"
            )
    clean["target_type"] = target_type

    # Optional references are always present in the result, None when unset
    for field in ("content_id", "target_id", "campaign_id"):
        value = clean.get(field)
        clean[field] = _parse_uuid(value, field) if value is not None else None

    clean["start_time"] = parse_time(clean.get("start_time", DEFAULT_START_TIME), "start_time")
    clean["end_time"] = parse_time(clean.get("end_time", DEFAULT_END_TIME), "end_time")
    clean["days_of_week"] = normalize_days(clean.get("days_of_week", list(WEEKDAYS)))

    clean["start_date"] = _parse_date(clean.get("start_date"), "start_date")
    clean["end_date"] = _parse_date(clean.get("end_date"), "end_date")
    if clean["start_date"] and clean["end_date"] and clean["end_date"] < clean["start_date"]:
        raise ValidationError("end_date is before start_date", field="end_date")

    priority = clean.get("priority", 0)
    if not isinstance(priority, int) or isinstance(priority, bool):
        raise ValidationError("priority must be an integer", field="priority")
    clean["priority"] = priority
    clean["is_active"] = bool(clean.get("is_active", True))

    repeat_type = clean.get("repeat_type")
    rule = parse_repeat(repeat_type, clean.get("repeat_config"), clean["start_date"])
    clean["repeat_type"] = rule.unit if rule else None
    clean["repeat_config"] = _repeat_config_dict(rule) if rule else None
    return clean


def _repeat_config_dict(rule: RepeatRule) -> dict:
    config: dict[str, Any] = {"interval": rule.interval, "anchor_date": rule.anchor.isoformat()}
    if rule.until_date is not None:
        config["until_date"] = rule.until_date.isoformat()
    if rule.until_count is not None:
        config["until_count"] = rule.until_count
    return config


def _parse_date(value: Any, field: str) -> date | None:
    if value is None or isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)", field=field)


def _parse_uuid(value: Any, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be a UUID", field=field)
