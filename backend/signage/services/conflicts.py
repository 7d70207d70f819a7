"""
Conflict detection — advisory overlap warnings for the schedule editor.

Two entries conflict when both are active, share a weekday, their date
ranges intersect and their daily windows intersect. Windows are half-open
intervals on a minute timeline; a window spanning midnight continues past
1440. Under the wrap policy the after-midnight part of a window belongs to
the next calendar day, so it is compared against that day's entries.
Recurrence rules are not considered; a conflict is a possible overlap.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from signage.services.schedule_rules import (
    MINUTES_PER_DAY,
    EntryRule,
    OvernightPolicy,
    shift_date,
    dates_overlap,
)


@dataclass(frozen=True)
class Segment:
    days: frozenset[int]
    start_date: date | None
    end_date: date | None
    start: int
    end: int

    def overlaps(self, other: "Segment") -> bool:
        return (
            bool(self.days & other.days)
            and dates_overlap(self.start_date, self.end_date, other.start_date, other.end_date)
            and self.start < other.end
            and other.start < self.end
        )


def segments(entry: EntryRule, policy: OvernightPolicy = OvernightPolicy.WRAP) -> list[Segment]:
    """Split an entry's window into single-day segments."""
    start, end = entry.start_minute, entry.end_minute
    if end <= MINUTES_PER_DAY:
        return [Segment(entry.days, entry.start_date, entry.end_date, start, end)]

    tail = end - MINUTES_PER_DAY
    if policy is OvernightPolicy.SAME_DAY:
        return [
            Segment(entry.days, entry.start_date, entry.end_date, start, MINUTES_PER_DAY),
            Segment(entry.days, entry.start_date, entry.end_date, 0, tail),
        ]
    next_days = frozenset((d + 1) % 7 for d in entry.days)
    return [
        Segment(entry.days, entry.start_date, entry.end_date, start, MINUTES_PER_DAY),
        Segment(next_days, shift_date(entry.start_date, 1), shift_date(entry.end_date, 1), 0, tail),
    ]


def entries_conflict(a: EntryRule, b: EntryRule, policy: OvernightPolicy = OvernightPolicy.WRAP) -> bool:
    if not (a.is_active and b.is_active):
        return False
    return any(sa.overlaps(sb) for sa in segments(a, policy) for sb in segments(b, policy))


def find_conflicts(
    existing: Iterable[EntryRule],
    candidate: EntryRule,
    exclude_entry_id=None,
    policy: OvernightPolicy = OvernightPolicy.WRAP,
) -> list[EntryRule]:
    """Existing entries that overlap the candidate, ordered by start then priority."""
    if not candidate.is_active:
        return []
    skip = {str(exclude_entry_id)} if exclude_entry_id is not None else set()
    if candidate.id is not None:
        skip.add(str(candidate.id))

    found = [
        entry for entry in existing
        if str(entry.id) not in skip and entries_conflict(entry, candidate, policy)
    ]
    return sorted(found, key=lambda e: (e.start_minute, -e.priority, str(e.id)))
