"""
Schedule store — tenant-scoped CRUD for schedules and their entries, plus the
operator-facing reads (conflicts, previews, single-instant resolution).

Every write validates completely before touching the session, commits, and
then drops the schedule's cached decision.
"""
import logging
import uuid
from datetime import date, datetime
from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from signage.config import settings
from signage.core.exceptions import NotFoundError, ValidationError
from signage.core.security import Actor
from signage.models.content import ContentType
from signage.models.device import Device, ScreenGroup
from signage.models.schedule import Schedule
from signage.models.schedule_entry import EventType, ScheduleEntry
from signage.services import conflicts, week_preview
from signage.services.approval_service import ensure_can_assign
from signage.services.content_catalog import ContentRef, resolve_names
from signage.services.content_resolver import Decision, ScheduleRules
from signage.services.decision_cache import DecisionCache
from signage.services.display import format_days_of_week, format_time_range
from signage.services.resolution_service import current_policy, load_rules
from signage.services.schedule_rules import EntryRule, validate_entry_fields, validate_timezone

logger = logging.getLogger(__name__)

ENTRY_FIELDS = (
    "content_type", "content_id", "target_type", "target_id",
    "start_date", "end_date", "start_time", "end_time", "days_of_week",
    "priority", "is_active", "event_type", "repeat_type", "repeat_config", "campaign_id",
)


def entry_fields(entry: ScheduleEntry) -> dict[str, Any]:
    return {name: getattr(entry, name) for name in ENTRY_FIELDS}


def _clean_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Schedule name is required", field="name")
    return name.strip()


class ScheduleService:
    """Schedule and entry operations on behalf of one actor."""

    def __init__(self, db: AsyncSession, actor: Actor, cache: DecisionCache):
        self.db = db
        self.actor = actor
        self.cache = cache

    # ==================== Schedules ====================

    async def create_schedule(self, name: str, description: str | None = None, timezone: str | None = None) -> Schedule:
        schedule = Schedule(
            tenant_id=self.actor.tenant_id,
            name=_clean_name(name),
            description=description,
            timezone=validate_timezone(timezone or settings.DEFAULT_TIMEZONE),
        )
        self.db.add(schedule)
        await self.db.commit()
        await self.db.refresh(schedule)
        logger.info("Created schedule %s (%s) for tenant %s", schedule.id, schedule.name, schedule.tenant_id)
        return schedule

    async def get_schedule(self, schedule_id: uuid.UUID) -> Schedule:
        result = await self.db.execute(
            select(Schedule).where(Schedule.id == schedule_id, Schedule.tenant_id == self.actor.tenant_id)
        )
        schedule = result.scalar_one_or_none()
        if schedule is None:
            raise NotFoundError("Schedule not found", schedule_id=str(schedule_id))
        return schedule

    async def list_schedules(self) -> Sequence[Schedule]:
        result = await self.db.execute(
            select(Schedule).where(Schedule.tenant_id == self.actor.tenant_id).order_by(Schedule.name)
        )
        return result.scalars().all()

    async def update_schedule(self, schedule_id: uuid.UUID, updates: dict[str, Any]) -> Schedule:
        schedule = await self.get_schedule(schedule_id)
        changes = {}
        if "name" in updates:
            changes["name"] = _clean_name(updates["name"])
        if "description" in updates:
            changes["description"] = updates["description"]
        if "timezone" in updates:
            changes["timezone"] = validate_timezone(updates["timezone"])

        for field, value in changes.items():
            setattr(schedule, field, value)
        await self.db.commit()
        await self.db.refresh(schedule)
        self.cache.invalidate(schedule.id)
        logger.info("Updated schedule %s: %s", schedule.id, sorted(changes))
        return schedule

    async def delete_schedule(self, schedule_id: uuid.UUID) -> None:
        schedule = await self.get_schedule(schedule_id)
        # Entries go with the schedule; loaded explicitly so SQLite without
        # ON DELETE support behaves the same as Postgres.
        for entry in await self._entries(schedule.id):
            await self.db.delete(entry)
        await self.db.delete(schedule)
        await self.db.commit()
        self.cache.invalidate(schedule_id)
        logger.info("Deleted schedule %s", schedule_id)

    async def duplicate_schedule(self, schedule_id: uuid.UUID) -> Schedule:
        source = await self.get_schedule(schedule_id)
        copy = Schedule(
            tenant_id=source.tenant_id,
            name=f"{source.name} (Copy)",
            description=source.description,
            timezone=source.timezone,
            filler_content_type=source.filler_content_type,
            filler_content_id=source.filler_content_id,
        )
        self.db.add(copy)
        await self.db.flush()
        entries = await self._entries(source.id)
        for entry in entries:
            self.db.add(ScheduleEntry(schedule_id=copy.id, **entry_fields(entry)))
        await self.db.commit()
        await self.db.refresh(copy)
        logger.info("Duplicated schedule %s as %s with %d entries", source.id, copy.id, len(entries))
        return copy

    async def schedule_usage(self, schedule_id: uuid.UUID) -> dict[str, int]:
        schedule = await self.get_schedule(schedule_id)
        devices = await self.db.scalar(
            select(func.count()).select_from(Device).where(Device.assigned_schedule_id == schedule.id)
        )
        groups = await self.db.scalar(
            select(func.count()).select_from(ScreenGroup).where(ScreenGroup.assigned_schedule_id == schedule.id)
        )
        entries = await self.db.scalar(
            select(func.count()).select_from(ScheduleEntry).where(ScheduleEntry.schedule_id == schedule.id)
        )
        return {"devices": devices or 0, "groups": groups or 0, "entries": entries or 0}

    # ==================== Filler ====================

    async def set_filler_content(self, schedule_id: uuid.UUID, content_type: Any, content_id: Any) -> Schedule:
        schedule = await self.get_schedule(schedule_id)
        try:
            ref = ContentRef(ContentType(content_type), uuid.UUID(str(content_id)))
        except ValueError:
            raise ValidationError("Filler needs a valid content_type and content_id")
        await ensure_can_assign(self.db, self.actor, ref)

        schedule.filler_content_type = ref.content_type
        schedule.filler_content_id = ref.content_id
        await self.db.commit()
        await self.db.refresh(schedule)
        self.cache.invalidate(schedule.id)
        logger.info("Set filler of schedule %s to %s %s", schedule.id, ref.content_type.value, ref.content_id)
        return schedule

    async def clear_filler_content(self, schedule_id: uuid.UUID) -> Schedule:
        schedule = await self.get_schedule(schedule_id)
        schedule.filler_content_type = None
        schedule.filler_content_id = None
        await self.db.commit()
        await self.db.refresh(schedule)
        self.cache.invalidate(schedule.id)
        logger.info("Cleared filler of schedule %s", schedule.id)
        return schedule

    # ==================== Entries ====================

    async def _entries(self, schedule_id: uuid.UUID) -> Sequence[ScheduleEntry]:
        result = await self.db.execute(
            select(ScheduleEntry)
            .where(ScheduleEntry.schedule_id == schedule_id)
            .order_by(ScheduleEntry.start_time, ScheduleEntry.priority.desc())
        )
        return result.scalars().all()

    async def list_entries(self, schedule_id: uuid.UUID) -> Sequence[ScheduleEntry]:
        schedule = await self.get_schedule(schedule_id)
        return await self._entries(schedule.id)

    async def get_entry(self, schedule_id: uuid.UUID, entry_id: uuid.UUID) -> ScheduleEntry:
        schedule = await self.get_schedule(schedule_id)
        result = await self.db.execute(
            select(ScheduleEntry).where(ScheduleEntry.id == entry_id, ScheduleEntry.schedule_id == schedule.id)
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("Schedule entry not found", entry_id=str(entry_id))
        return entry

    async def _check_content(self, fields: dict) -> None:
        if fields["event_type"] is EventType.CONTENT:
            await ensure_can_assign(self.db, self.actor, ContentRef.maybe(fields["content_type"], fields["content_id"]))

    async def create_entry(self, schedule_id: uuid.UUID, fields: dict[str, Any]) -> ScheduleEntry:
        schedule = await self.get_schedule(schedule_id)
        clean = validate_entry_fields({k: v for k, v in fields.items() if k in ENTRY_FIELDS})
        await self._check_content(clean)

        entry = ScheduleEntry(schedule_id=schedule.id, **clean)
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        self.cache.invalidate(schedule.id)
        logger.info("Created entry %s in schedule %s", entry.id, schedule.id)
        return entry

    async def _prepare_update(
        self, schedule_id: uuid.UUID, entry_id: uuid.UUID, updates: dict[str, Any]
    ) -> tuple[ScheduleEntry, dict[str, Any]]:
        """Load an entry and validate the merged fields without touching it."""
        entry = await self.get_entry(schedule_id, entry_id)
        current = entry_fields(entry)
        merged = {**current, **{k: v for k, v in updates.items() if k in ENTRY_FIELDS}}
        if "repeat_type" in updates and "repeat_config" not in updates and updates["repeat_type"] != current["repeat_type"]:
            merged["repeat_config"] = None
        clean = validate_entry_fields(merged)

        content_changed = (clean["content_type"], clean["content_id"], clean["event_type"]) != (
            current["content_type"], current["content_id"], current["event_type"]
        )
        if content_changed:
            await self._check_content(clean)
        return entry, clean

    async def update_entries(
        self, changes: Sequence[tuple[uuid.UUID, uuid.UUID, dict[str, Any]]]
    ) -> list[ScheduleEntry]:
        """
        Apply (schedule_id, entry_id, updates) triples in one commit. Every
        change is validated first; any error leaves all entries untouched.
        """
        prepared = []
        for schedule_id, entry_id, updates in changes:
            prepared.append(await self._prepare_update(schedule_id, entry_id, updates))

        for entry, clean in prepared:
            for field, value in clean.items():
                setattr(entry, field, value)
        await self.db.commit()

        entries = []
        for entry, _ in prepared:
            await self.db.refresh(entry)
            entries.append(entry)
        for schedule_id in {entry.schedule_id for entry in entries}:
            self.cache.invalidate(schedule_id)
        logger.info("Updated %d entries in one batch", len(entries))
        return entries

    async def update_entry(self, schedule_id: uuid.UUID, entry_id: uuid.UUID, updates: dict[str, Any]) -> ScheduleEntry:
        entry, clean = await self._prepare_update(schedule_id, entry_id, updates)
        for field, value in clean.items():
            setattr(entry, field, value)
        await self.db.commit()
        await self.db.refresh(entry)
        self.cache.invalidate(entry.schedule_id)
        logger.info("Updated entry %s in schedule %s", entry.id, entry.schedule_id)
        return entry

    async def delete_entry(self, schedule_id: uuid.UUID, entry_id: uuid.UUID) -> None:
        entry = await self.get_entry(schedule_id, entry_id)
        await self.db.delete(entry)
        await self.db.commit()
        self.cache.invalidate(schedule_id)
        logger.info("Deleted entry %s from schedule %s", entry_id, schedule_id)

    # ==================== Operator reads ====================

    async def _rules(self, schedule_id: uuid.UUID) -> ScheduleRules:
        return await load_rules(self.db, schedule_id, tenant_id=self.actor.tenant_id)

    async def find_conflicts(
        self, schedule_id: uuid.UUID, candidate: dict[str, Any], exclude_entry_id: uuid.UUID | None = None
    ) -> list[dict]:
        """Entries overlapping a candidate, annotated for display. Never mutates."""
        rules = await self._rules(schedule_id)
        fields = {k: v for k, v in candidate.items() if k in ENTRY_FIELDS}
        if exclude_entry_id is not None:
            existing = await self.get_entry(schedule_id, exclude_entry_id)
            fields = {**entry_fields(existing), **fields}
        clean = validate_entry_fields(fields, require_content=False)
        proposed = EntryRule(
            id=exclude_entry_id,
            content=ContentRef.maybe(clean["content_type"], clean["content_id"]),
            start_time=clean["start_time"],
            end_time=clean["end_time"],
            days=frozenset(clean["days_of_week"]),
            priority=clean["priority"],
            is_active=clean["is_active"],
            event_type=clean["event_type"],
            start_date=clean["start_date"],
            end_date=clean["end_date"],
        )

        found = conflicts.find_conflicts(rules.entries, proposed, exclude_entry_id, current_policy())
        names = await resolve_names(self.db, (e.content for e in found))
        return [
            {
                "entry_id": e.id,
                "content_type": e.content.content_type.value if e.content else None,
                "content_id": e.content.content_id if e.content else None,
                "content_name": names.get(e.content) if e.content else None,
                "event_type": e.event_type.value,
                "start_time": e.start_time,
                "end_time": e.end_time,
                "days_of_week": sorted(e.days),
                "priority": e.priority,
                "window": format_time_range(e.start_time, e.end_time),
                "days": format_days_of_week(e.days),
            }
            for e in found
        ]

    async def preview_week(self, schedule_id: uuid.UUID, start_date: date) -> list[week_preview.DayPlan]:
        rules = await self._rules(schedule_id)
        names = await resolve_names(self.db, [e.content for e in rules.entries] + [rules.filler])
        return week_preview.preview_week(rules, rules.entries, rules.filler, start_date, names, current_policy())

    async def preview_day(self, schedule_id: uuid.UUID, day: date) -> list[week_preview.HourSlot]:
        rules = await self._rules(schedule_id)
        names = await resolve_names(self.db, [e.content for e in rules.entries] + [rules.filler])
        return week_preview.preview_hours(rules, rules.entries, rules.filler, day, names, current_policy())

    async def resolve(self, schedule_id: uuid.UUID, instant: datetime) -> Decision:
        rules = await self._rules(schedule_id)
        return rules.resolve(instant, policy=current_policy())
