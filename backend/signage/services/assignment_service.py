"""
Assignment manager — binds schedules to devices and screen groups, and
resolves a polling target to the schedule and default scene that apply.
"""
import enum
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from signage.core.exceptions import NotFoundError
from signage.core.security import Actor
from signage.models.content import ContentType
from signage.models.device import Device, ScreenGroup
from signage.models.schedule import Schedule
from signage.services.content_catalog import ContentRef

logger = logging.getLogger(__name__)


class TargetKind(str, enum.Enum):
    DEVICE = "device"
    GROUP = "group"


@dataclass(frozen=True)
class Target:
    kind: TargetKind
    id: uuid.UUID
    tenant_id: uuid.UUID
    schedule_id: uuid.UUID | None = None
    group_id: uuid.UUID | None = None
    default_content: ContentRef | None = None


@dataclass(frozen=True)
class AssignmentResult:
    updated: int
    devices_refreshed: int = 0


def _scene(scene_id: uuid.UUID | None) -> ContentRef | None:
    return ContentRef(ContentType.SCENE, scene_id) if scene_id else None


def schedule_for_target(target: Target) -> uuid.UUID | None:
    return target.schedule_id


async def load_target(
    db: AsyncSession, kind: TargetKind, target_id: uuid.UUID, tenant_id: uuid.UUID | None = None
) -> Target:
    """Load a device or group; a device falls back to its group's schedule and scene."""
    if kind is TargetKind.GROUP:
        group = await db.get(ScreenGroup, target_id)
        if group is None or (tenant_id is not None and group.tenant_id != tenant_id):
            raise NotFoundError("Screen group not found")
        return Target(
            kind=kind,
            id=group.id,
            tenant_id=group.tenant_id,
            schedule_id=group.assigned_schedule_id,
            default_content=_scene(group.default_scene_id),
        )

    device = await db.get(Device, target_id)
    if device is None or (tenant_id is not None and device.tenant_id != tenant_id):
        raise NotFoundError("Device not found")

    schedule_id, scene_id = device.assigned_schedule_id, device.default_scene_id
    if device.screen_group_id and (schedule_id is None or scene_id is None):
        group = await db.get(ScreenGroup, device.screen_group_id)
        if group is not None:
            schedule_id = schedule_id or group.assigned_schedule_id
            scene_id = scene_id or group.default_scene_id

    return Target(
        kind=kind,
        id=device.id,
        tenant_id=device.tenant_id,
        schedule_id=schedule_id,
        group_id=device.screen_group_id,
        default_content=_scene(scene_id),
    )


async def _require_schedule(db: AsyncSession, actor: Actor, schedule_id: uuid.UUID | None) -> None:
    if schedule_id is None:
        return
    result = await db.execute(
        select(Schedule.id).where(Schedule.id == schedule_id, Schedule.tenant_id == actor.tenant_id)
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Schedule not found", schedule_id=str(schedule_id))


async def _require_all(db: AsyncSession, model, actor: Actor, ids: Sequence[uuid.UUID], label: str) -> list:
    wanted = set(ids)
    if not wanted:
        return []
    result = await db.execute(select(model).where(model.id.in_(wanted), model.tenant_id == actor.tenant_id))
    rows = list(result.scalars().all())
    missing = wanted - {row.id for row in rows}
    if missing:
        raise NotFoundError(f"{label} not found", ids=sorted(str(m) for m in missing))
    return rows


async def assign_devices(
    db: AsyncSession, actor: Actor, schedule_id: uuid.UUID | None, device_ids: Sequence[uuid.UUID]
) -> AssignmentResult:
    """Assign (or with schedule_id=None, unassign) a schedule to devices. All or nothing."""
    await _require_schedule(db, actor, schedule_id)
    devices = await _require_all(db, Device, actor, device_ids, "Device")

    for device in devices:
        device.assigned_schedule_id = schedule_id
        device.needs_refresh = True
    await db.flush()

    logger.info("Assigned schedule %s to %d device(s)", schedule_id, len(devices))
    return AssignmentResult(updated=len(devices), devices_refreshed=len(devices))


async def assign_groups(
    db: AsyncSession, actor: Actor, schedule_id: uuid.UUID | None, group_ids: Sequence[uuid.UUID]
) -> AssignmentResult:
    """Assign (or unassign) a schedule to screen groups and flag their devices for refresh."""
    await _require_schedule(db, actor, schedule_id)
    groups = await _require_all(db, ScreenGroup, actor, group_ids, "Screen group")

    for group in groups:
        group.assigned_schedule_id = schedule_id

    refreshed = 0
    if groups:
        result = await db.execute(
            update(Device)
            .where(Device.screen_group_id.in_([g.id for g in groups]), Device.tenant_id == actor.tenant_id)
            .values(needs_refresh=True)
            .execution_options(synchronize_session=False)
        )
        refreshed = result.rowcount or 0
    await db.flush()

    logger.info("Assigned schedule %s to %d group(s), %d device(s) flagged", schedule_id, len(groups), refreshed)
    return AssignmentResult(updated=len(groups), devices_refreshed=refreshed)


def record_poll(device: Device, now: datetime, interval: float) -> bool:
    """
    Acknowledge a pending refresh and note when the device was last seen.
    last_seen_at moves at most once per `interval` seconds so steady polling
    does not write on every request. Returns True when the row changed.
    """
    last_seen = device.last_seen_at
    if last_seen is not None and last_seen.tzinfo is None:
        last_seen = last_seen.replace(tzinfo=timezone.utc)
    stale = last_seen is None or (now - last_seen).total_seconds() >= interval
    if not device.needs_refresh and not stale:
        return False
    device.needs_refresh = False
    device.last_seen_at = now
    return True
