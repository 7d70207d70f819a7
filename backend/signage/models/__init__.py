from signage.models.content import ApprovalStatus, ContentType, Layout, MediaAsset, Playlist, Scene
from signage.models.campaign import Campaign, CampaignSeverity, CampaignStatus
from signage.models.schedule import Schedule
from signage.models.schedule_entry import EventType, RepeatType, ScheduleEntry
from signage.models.device import Device, ScreenGroup
from signage.models.daypart import DaypartPreset, PresetType

__all__ = [
    "ApprovalStatus", "ContentType", "Layout", "MediaAsset", "Playlist", "Scene",
    "Campaign", "CampaignSeverity", "CampaignStatus",
    "Schedule",
    "EventType", "RepeatType", "ScheduleEntry",
    "Device", "ScreenGroup",
    "DaypartPreset", "PresetType",
]
