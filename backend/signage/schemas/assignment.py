from uuid import UUID

from pydantic import BaseModel, Field


class DeviceAssignment(BaseModel):
    # None unassigns
    schedule_id: UUID | None = None
    device_ids: list[UUID] = Field(..., min_length=1)


class GroupAssignment(BaseModel):
    schedule_id: UUID | None = None
    group_ids: list[UUID] = Field(..., min_length=1)


class AssignmentResponse(BaseModel):
    schedule_id: UUID | None = None
    updated: int
    devices_refreshed: int
