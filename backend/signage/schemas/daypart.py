from datetime import datetime, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from signage.models.daypart import PresetType


class DaypartCreate(BaseModel):
    name: str = Field(..., max_length=100)
    start_time: str
    end_time: str
    days_of_week: list[int] = [0, 1, 2, 3, 4, 5, 6]


class DaypartUpdate(BaseModel):
    name: str | None = Field(None, max_length=100)
    start_time: str | None = None
    end_time: str | None = None
    days_of_week: list[int] | None = None


class DaypartResponse(BaseModel):
    id: UUID
    tenant_id: UUID | None = None
    name: str
    preset_type: PresetType
    start_time: time
    end_time: time
    days_of_week: list[int]
    is_system: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_preset(cls, preset) -> "DaypartResponse":
        response = cls.model_validate(preset)
        response.is_system = preset.tenant_id is None
        return response


class DaypartApply(BaseModel):
    entry_ids: list[UUID] = Field(..., min_length=1)
