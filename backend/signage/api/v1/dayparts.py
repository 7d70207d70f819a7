"""Daypart preset endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from signage.core.dependencies import get_actor, get_db, get_schedule_service
from signage.core.security import Actor
from signage.schemas.daypart import DaypartApply, DaypartCreate, DaypartResponse, DaypartUpdate
from signage.schemas.schedule import EntryResponse
from signage.services import daypart_service
from signage.services.schedule_service import ScheduleService

router = APIRouter(prefix="/dayparts", tags=["dayparts"])


@router.get("", response_model=list[DaypartResponse])
async def list_dayparts(db: AsyncSession = Depends(get_db), actor: Actor = Depends(get_actor)):
    presets = await daypart_service.list_presets(db, actor)
    return [DaypartResponse.from_preset(p) for p in presets]


@router.post("", response_model=DaypartResponse, status_code=status.HTTP_201_CREATED)
async def create_daypart(body: DaypartCreate, db: AsyncSession = Depends(get_db), actor: Actor = Depends(get_actor)):
    preset = await daypart_service.create_preset(
        db, actor, body.name, body.start_time, body.end_time, body.days_of_week
    )
    return DaypartResponse.from_preset(preset)


@router.patch("/{preset_id}", response_model=DaypartResponse)
async def update_daypart(
    preset_id: UUID, body: DaypartUpdate, db: AsyncSession = Depends(get_db), actor: Actor = Depends(get_actor)
):
    preset = await daypart_service.update_preset(db, actor, preset_id, body.model_dump(exclude_unset=True))
    return DaypartResponse.from_preset(preset)


@router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_daypart(preset_id: UUID, db: AsyncSession = Depends(get_db), actor: Actor = Depends(get_actor)):
    await daypart_service.delete_preset(db, actor, preset_id)


@router.post("/{preset_id}/apply", response_model=list[EntryResponse])
async def apply_daypart(
    preset_id: UUID, body: DaypartApply, service: ScheduleService = Depends(get_schedule_service)
):
    return await daypart_service.apply_preset(service, preset_id, body.entry_ids)
