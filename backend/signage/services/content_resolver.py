"""
Content resolver — decides what a schedule plays at one instant.

Pure functions over ScheduleRules snapshots: no database access, no shared
mutable state, safe to call concurrently for any number of devices.

Resolution order for one schedule:
  1. Entries eligible at the schedule-local date and time
  2. Highest priority wins, then earliest start, then lowest entry id
  3. A winning screen_off entry blanks the screen
  4. No eligible entry -> filler content, if configured
  5. Otherwise nothing (the caller supplies a device default)
"""
import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable

from signage.services.content_catalog import ContentRef
from signage.services.schedule_rules import (
    EntryRule,
    OvernightPolicy,
    eligible_entries,
    load_zone,
    local_moment,
)


class DecisionKind(str, enum.Enum):
    ENTRY = "entry"
    FILLER = "filler"
    BLANK = "blank"
    NONE = "none"
    CAMPAIGN = "campaign"
    DEFAULT = "default"


@dataclass(frozen=True)
class Decision:
    kind: DecisionKind
    content: ContentRef | None = None
    schedule_id: uuid.UUID | str | None = None
    entry_id: uuid.UUID | str | None = None
    campaign_id: uuid.UUID | str | None = None
    priority: int | None = None
    emergency: bool = False
    degraded: bool = False
    target_id: uuid.UUID | str | None = None

    @property
    def is_blank(self) -> bool:
        return self.kind is DecisionKind.BLANK

    def marked_degraded(self) -> "Decision":
        return replace(self, degraded=True)

    def for_target(self, target_id) -> "Decision":
        return replace(self, target_id=target_id)


@dataclass(frozen=True)
class ScheduleRules:
    """Detached view of a schedule and its entries, safe to share across requests."""

    id: uuid.UUID | str
    timezone: str = "UTC"
    filler: ContentRef | None = None
    entries: tuple[EntryRule, ...] = field(default_factory=tuple)
    tenant_id: uuid.UUID | str | None = None
    name: str | None = None

    @classmethod
    def from_models(cls, schedule, entries: Iterable) -> "ScheduleRules":
        return cls(
            id=schedule.id,
            tenant_id=schedule.tenant_id,
            name=schedule.name,
            timezone=schedule.timezone,
            filler=ContentRef.maybe(schedule.filler_content_type, schedule.filler_content_id),
            entries=tuple(EntryRule.from_model(e) for e in entries),
        )

    def resolve(self, instant: datetime, target_id=None, policy: OvernightPolicy = OvernightPolicy.WRAP) -> Decision:
        return resolve(self, self.entries, self.filler, instant, target_id=target_id, policy=policy)


def pick_winner(candidates: Iterable[EntryRule]) -> EntryRule | None:
    ranked = sorted(candidates, key=EntryRule.sort_key)
    return ranked[0] if ranked else None


def decide_at(
    schedule,
    entries: Iterable[EntryRule],
    filler: ContentRef | None,
    day: date,
    minute: int,
    policy: OvernightPolicy = OvernightPolicy.WRAP,
) -> Decision:
    """Decision for a schedule-local calendar date and minute of day."""
    winner = pick_winner(eligible_entries(entries, day, minute, policy))
    if winner is not None:
        kind = DecisionKind.BLANK if winner.is_blank else DecisionKind.ENTRY
        return Decision(
            kind=kind,
            content=None if winner.is_blank else winner.content,
            schedule_id=schedule.id,
            entry_id=winner.id,
            campaign_id=winner.campaign_id,
            priority=winner.priority,
        )
    if filler is not None:
        return Decision(DecisionKind.FILLER, content=filler, schedule_id=schedule.id)
    return Decision(DecisionKind.NONE, schedule_id=schedule.id)


def resolve(
    schedule,
    entries: Iterable[EntryRule],
    filler: ContentRef | None,
    instant: datetime,
    target_id=None,
    policy: OvernightPolicy = OvernightPolicy.WRAP,
) -> Decision:
    """
    What the schedule plays at `instant`.

    `schedule` only needs `id` and `timezone`. Naive instants are taken as UTC.
    Raises InvalidTimezoneError when the schedule's zone cannot be loaded.
    """
    load_zone(schedule.timezone)
    day, minute = local_moment(instant, schedule.timezone)
    decision = decide_at(schedule, entries, filler, day, minute, policy)
    return decision.for_target(target_id) if target_id is not None else decision
