"""
Campaign lookup — which campaigns apply to a device or group right now.

The overlay only depends on the CampaignProvider protocol; the database
implementation below reads the campaigns table of the same tenant.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from signage.db.engine import async_session_factory
from signage.models.campaign import Campaign, CampaignSeverity, CampaignStatus
from signage.services.assignment_service import Target, TargetKind
from signage.services.content_catalog import ContentRef

logger = logging.getLogger(__name__)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class CampaignSnapshot:
    id: uuid.UUID | str
    content: ContentRef
    emergency: bool = False
    priority: int = 0
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    active: bool = True
    device_ids: frozenset[str] = frozenset()
    group_ids: frozenset[str] = frozenset()

    @classmethod
    def from_model(cls, campaign: Campaign) -> "CampaignSnapshot":
        targets = campaign.targets or {}
        return cls(
            id=campaign.id,
            content=ContentRef(campaign.content_type, campaign.content_id),
            emergency=campaign.severity == CampaignSeverity.EMERGENCY,
            priority=campaign.priority or 0,
            starts_at=as_utc(campaign.starts_at),
            ends_at=as_utc(campaign.ends_at),
            active=campaign.status == CampaignStatus.ACTIVE,
            device_ids=frozenset(str(i) for i in targets.get("device_ids") or ()),
            group_ids=frozenset(str(i) for i in targets.get("group_ids") or ()),
        )

    def is_live(self, instant: datetime) -> bool:
        if not self.active:
            return False
        instant = as_utc(instant)
        if self.starts_at is not None and instant < as_utc(self.starts_at):
            return False
        if self.ends_at is not None and instant >= as_utc(self.ends_at):
            return False
        return True

    def targets(self, target: Target) -> bool:
        if target.kind is TargetKind.DEVICE and str(target.id) in self.device_ids:
            return True
        group_id = target.id if target.kind is TargetKind.GROUP else target.group_id
        return group_id is not None and str(group_id) in self.group_ids

    def rank(self) -> tuple:
        """Emergency first, then highest priority, earliest start, lowest id."""
        starts = as_utc(self.starts_at) or datetime.min.replace(tzinfo=timezone.utc)
        return (not self.emergency, -self.priority, starts, str(self.id))


class CampaignProvider(Protocol):
    async def active_campaigns_for(self, target: Target, instant: datetime) -> Sequence[CampaignSnapshot]:
        ...


class DatabaseCampaignProvider:
    """
    Reads campaigns in a session of its own, so a cancelled or failed lookup
    never leaves the request session unusable for the schedule fallback.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = async_session_factory):
        self.session_factory = session_factory

    async def active_campaigns_for(self, target: Target, instant: datetime) -> list[CampaignSnapshot]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Campaign).where(
                    Campaign.tenant_id == target.tenant_id,
                    Campaign.status == CampaignStatus.ACTIVE,
                )
            )
            snapshots = [CampaignSnapshot.from_model(c) for c in result.scalars().all()]
        return [c for c in snapshots if c.targets(target) and c.is_live(instant)]
