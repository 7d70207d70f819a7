"""
Daypart presets — named time blocks editors apply to schedule entries.

System presets (tenant_id NULL) are seeded at startup and shared by every
tenant; custom presets belong to one tenant.
"""
import logging
import uuid
from typing import Any, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from signage.core.exceptions import NotFoundError, ValidationError
from signage.core.security import Actor
from signage.models.daypart import DaypartPreset, PresetType
from signage.models.schedule import Schedule
from signage.models.schedule_entry import ScheduleEntry
from signage.services.schedule_rules import ALL_DAYS, normalize_days, parse_time
from signage.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

SYSTEM_DAYPARTS = {
    PresetType.MEAL: [
        ("Breakfast", "06:00", "10:00"),
        ("Lunch", "11:00", "14:00"),
        ("Dinner", "17:00", "21:00"),
    ],
    PresetType.PERIOD: [
        ("Morning", "06:00", "12:00"),
        ("Afternoon", "12:00", "18:00"),
        ("Evening", "18:00", "00:00"),
        ("Night", "00:00", "06:00"),
    ],
}


async def seed_system_presets(db: AsyncSession) -> int:
    """Insert missing system presets. Returns how many were created."""
    result = await db.execute(select(DaypartPreset.name).where(DaypartPreset.tenant_id.is_(None)))
    existing = set(result.scalars().all())

    created = 0
    for preset_type, presets in SYSTEM_DAYPARTS.items():
        for name, start, end in presets:
            if name in existing:
                continue
            db.add(DaypartPreset(
                tenant_id=None,
                name=name,
                preset_type=preset_type,
                start_time=parse_time(start),
                end_time=parse_time(end),
                days_of_week=list(ALL_DAYS),
            ))
            created += 1
    if created:
        await db.commit()
        logger.info("Seeded %d system daypart presets", created)
    return created


async def list_presets(db: AsyncSession, actor: Actor) -> Sequence[DaypartPreset]:
    result = await db.execute(
        select(DaypartPreset)
        .where(or_(DaypartPreset.tenant_id.is_(None), DaypartPreset.tenant_id == actor.tenant_id))
        .order_by(DaypartPreset.preset_type, DaypartPreset.start_time)
    )
    return result.scalars().all()


async def get_preset(db: AsyncSession, actor: Actor, preset_id: uuid.UUID) -> DaypartPreset:
    preset = await db.get(DaypartPreset, preset_id)
    if preset is None or preset.tenant_id not in (None, actor.tenant_id):
        raise NotFoundError("Daypart preset not found")
    return preset


async def _custom_preset(db: AsyncSession, actor: Actor, preset_id: uuid.UUID) -> DaypartPreset:
    preset = await get_preset(db, actor, preset_id)
    if preset.tenant_id is None:
        raise ValidationError("System presets cannot be modified")
    return preset


async def create_preset(
    db: AsyncSession, actor: Actor, name: str, start_time: Any, end_time: Any, days_of_week: Any = ALL_DAYS
) -> DaypartPreset:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Preset name is required", field="name")
    preset = DaypartPreset(
        tenant_id=actor.tenant_id,
        name=name.strip(),
        preset_type=PresetType.CUSTOM,
        start_time=parse_time(start_time, "start_time"),
        end_time=parse_time(end_time, "end_time"),
        days_of_week=normalize_days(days_of_week),
    )
    db.add(preset)
    await db.commit()
    await db.refresh(preset)
    logger.info("Created daypart preset %s (%s)", preset.id, preset.name)
    return preset


async def update_preset(db: AsyncSession, actor: Actor, preset_id: uuid.UUID, updates: dict[str, Any]) -> DaypartPreset:
    preset = await _custom_preset(db, actor, preset_id)
    if "name" in updates:
        if not isinstance(updates["name"], str) or not updates["name"].strip():
            raise ValidationError("Preset name is required", field="name")
        preset.name = updates["name"].strip()
    if "start_time" in updates:
        preset.start_time = parse_time(updates["start_time"], "start_time")
    if "end_time" in updates:
        preset.end_time = parse_time(updates["end_time"], "end_time")
    if "days_of_week" in updates:
        preset.days_of_week = normalize_days(updates["days_of_week"])
    await db.commit()
    await db.refresh(preset)
    logger.info("Updated daypart preset %s", preset.id)
    return preset


async def delete_preset(db: AsyncSession, actor: Actor, preset_id: uuid.UUID) -> None:
    preset = await _custom_preset(db, actor, preset_id)
    await db.delete(preset)
    await db.commit()
    logger.info("Deleted daypart preset %s", preset_id)


async def apply_preset(
    service: ScheduleService, preset_id: uuid.UUID, entry_ids: Sequence[uuid.UUID]
) -> list[ScheduleEntry]:
    """
    Copy a preset's window and days onto entries through the normal update
    path. Every entry is checked and validated before any is changed, and
    all of them are committed together.
    """
    preset = await get_preset(service.db, service.actor, preset_id)
    if not entry_ids:
        raise ValidationError("entry_ids must not be empty", field="entry_ids")

    wanted = set(entry_ids)
    result = await service.db.execute(
        select(ScheduleEntry.id, ScheduleEntry.schedule_id)
        .join(Schedule, Schedule.id == ScheduleEntry.schedule_id)
        .where(ScheduleEntry.id.in_(wanted), Schedule.tenant_id == service.actor.tenant_id)
    )
    owners = {row[0]: row[1] for row in result.all()}
    missing = wanted - set(owners)
    if missing:
        raise NotFoundError("Schedule entry not found", ids=sorted(str(m) for m in missing))

    window = {
        "start_time": preset.start_time,
        "end_time": preset.end_time,
        "days_of_week": list(preset.days_of_week),
    }
    updated = await service.update_entries([(owners[entry_id], entry_id, window) for entry_id in entry_ids])
    logger.info("Applied daypart %s (%s) to %d entries", preset.id, preset.name, len(updated))
    return updated
