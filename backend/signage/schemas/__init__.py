# Schemas package
from signage.schemas.assignment import AssignmentResponse, DeviceAssignment, GroupAssignment
from signage.schemas.daypart import DaypartApply, DaypartCreate, DaypartResponse, DaypartUpdate
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

__all__ = [
    "AssignmentResponse", "DeviceAssignment", "GroupAssignment",
    "DaypartApply", "DaypartCreate", "DaypartResponse", "DaypartUpdate",
    "DayPlanResponse", "DayPreviewResponse", "DecisionResponse", "HourSlotResponse", "WeekPreviewResponse",
    "ConflictCheck", "ConflictReport", "EntryCreate", "EntryResponse", "EntryUpdate", "FillerUpdate",
    "ScheduleCreate", "ScheduleResponse", "ScheduleUpdate", "ScheduleUsage",
]
