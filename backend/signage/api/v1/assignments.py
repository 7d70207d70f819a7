"""Bulk schedule assignment for devices and screen groups."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from signage.core.dependencies import get_actor, get_db
from signage.core.security import Actor
from signage.schemas.assignment import AssignmentResponse, DeviceAssignment, GroupAssignment
from signage.services import assignment_service

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.post("/devices", response_model=AssignmentResponse)
async def assign_devices(
    body: DeviceAssignment,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    result = await assignment_service.assign_devices(db, actor, body.schedule_id, body.device_ids)
    return AssignmentResponse(schedule_id=body.schedule_id, updated=result.updated, devices_refreshed=result.devices_refreshed)


@router.post("/groups", response_model=AssignmentResponse)
async def assign_groups(
    body: GroupAssignment,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    result = await assignment_service.assign_groups(db, actor, body.schedule_id, body.group_ids)
    return AssignmentResponse(schedule_id=body.schedule_id, updated=result.updated, devices_refreshed=result.devices_refreshed)
