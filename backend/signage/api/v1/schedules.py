"""
Schedule management endpoints — schedules, entries, filler, conflicts and previews.
"""
from datetime import date, datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from signage.core.dependencies import get_schedule_service
from signage.schemas.resolution import (
    DayPlanResponse,
    DayPreviewResponse,
    DecisionResponse,
    HourSlotResponse,
    WeekPreviewResponse,
)
from signage.schemas.schedule import (
    ConflictCheck,
    ConflictReport,
    EntryCreate,
    EntryResponse,
    EntryUpdate,
    FillerUpdate,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
    ScheduleUsage,
)
from signage.services.schedule_rules import local_moment
from signage.services.schedule_service import ScheduleService

router = APIRouter(prefix="/schedules", tags=["schedules"])


# ==================== Schedules ====================
@router.get("", response_model=list[ScheduleResponse])
async def list_schedules(service: ScheduleService = Depends(get_schedule_service)):
    return await service.list_schedules()


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(body: ScheduleCreate, service: ScheduleService = Depends(get_schedule_service)):
    return await service.create_schedule(body.name, body.description, body.timezone)


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(schedule_id: UUID, service: ScheduleService = Depends(get_schedule_service)):
    return await service.get_schedule(schedule_id)


@router.patch("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: UUID, body: ScheduleUpdate, service: ScheduleService = Depends(get_schedule_service)
):
    return await service.update_schedule(schedule_id, body.model_dump(exclude_unset=True))


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(schedule_id: UUID, service: ScheduleService = Depends(get_schedule_service)):
    await service.delete_schedule(schedule_id)


@router.post("/{schedule_id}/duplicate", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_schedule(schedule_id: UUID, service: ScheduleService = Depends(get_schedule_service)):
    return await service.duplicate_schedule(schedule_id)


@router.get("/{schedule_id}/usage", response_model=ScheduleUsage)
async def schedule_usage(schedule_id: UUID, service: ScheduleService = Depends(get_schedule_service)):
    counts = await service.schedule_usage(schedule_id)
    return ScheduleUsage(schedule_id=schedule_id, **counts)


# ==================== Filler ====================
@router.put("/{schedule_id}/filler", response_model=ScheduleResponse)
async def set_filler(schedule_id: UUID, body: FillerUpdate, service: ScheduleService = Depends(get_schedule_service)):
    return await service.set_filler_content(schedule_id, body.content_type, body.content_id)


@router.delete("/{schedule_id}/filler", response_model=ScheduleResponse)
async def clear_filler(schedule_id: UUID, service: ScheduleService = Depends(get_schedule_service)):
    return await service.clear_filler_content(schedule_id)


# ==================== Entries ====================
@router.get("/{schedule_id}/entries", response_model=list[EntryResponse])
async def list_entries(schedule_id: UUID, service: ScheduleService = Depends(get_schedule_service)):
    return await service.list_entries(schedule_id)


@router.post("/{schedule_id}/entries", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(schedule_id: UUID, body: EntryCreate, service: ScheduleService = Depends(get_schedule_service)):
    return await service.create_entry(schedule_id, body.model_dump(exclude_none=True))


@router.patch("/{schedule_id}/entries/{entry_id}", response_model=EntryResponse)
async def update_entry(
    schedule_id: UUID, entry_id: UUID, body: EntryUpdate, service: ScheduleService = Depends(get_schedule_service)
):
    return await service.update_entry(schedule_id, entry_id, body.model_dump(exclude_unset=True))


@router.delete("/{schedule_id}/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(schedule_id: UUID, entry_id: UUID, service: ScheduleService = Depends(get_schedule_service)):
    await service.delete_entry(schedule_id, entry_id)


@router.post("/{schedule_id}/conflicts", response_model=ConflictReport)
async def check_conflicts(
    schedule_id: UUID, body: ConflictCheck, service: ScheduleService = Depends(get_schedule_service)
):
    candidate = body.model_dump(exclude_none=True, exclude={"exclude_entry_id"})
    conflicts = await service.find_conflicts(schedule_id, candidate, body.exclude_entry_id)
    return ConflictReport(has_conflicts=bool(conflicts), conflicts=conflicts)


# ==================== Previews ====================
@router.get("/{schedule_id}/preview/week", response_model=WeekPreviewResponse)
async def preview_week(
    schedule_id: UUID,
    start_date: date | None = Query(None),  # defaults to today in the schedule's zone
    service: ScheduleService = Depends(get_schedule_service),
):
    schedule = await service.get_schedule(schedule_id)
    if start_date is None:
        start_date, _ = local_moment(datetime.now(timezone.utc), schedule.timezone)
    plans = await service.preview_week(schedule_id, start_date)
    return WeekPreviewResponse(
        schedule_id=schedule.id,
        timezone=schedule.timezone,
        start_date=start_date,
        days=[DayPlanResponse.from_plan(p) for p in plans],
    )


@router.get("/{schedule_id}/preview/day", response_model=DayPreviewResponse)
async def preview_day(
    schedule_id: UUID,
    date: date | None = Query(None),
    service: ScheduleService = Depends(get_schedule_service),
):
    schedule = await service.get_schedule(schedule_id)
    day = date or local_moment(datetime.now(timezone.utc), schedule.timezone)[0]
    slots = await service.preview_day(schedule_id, day)
    return DayPreviewResponse(schedule_id=schedule.id, date=day, hours=[HourSlotResponse.from_slot(s) for s in slots])


@router.get("/{schedule_id}/resolve", response_model=DecisionResponse)
async def resolve_schedule(
    schedule_id: UUID,
    at: datetime | None = Query(None),
    service: ScheduleService = Depends(get_schedule_service),
):
    instant = at or datetime.now(timezone.utc)
    decision = await service.resolve(schedule_id, instant)
    return DecisionResponse.from_decision(decision, instant)
