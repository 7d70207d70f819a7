"""Database-backed schedule resolution for device polling."""
import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from signage.config import settings
from signage.core.exceptions import NotFoundError
from signage.db.engine import async_session_factory
from signage.models.schedule import Schedule
from signage.models.schedule_entry import ScheduleEntry
from signage.services.campaign_overlay import CampaignOverlay
from signage.services.campaign_service import DatabaseCampaignProvider
from signage.services.content_resolver import Decision, ScheduleRules
from signage.services.decision_cache import DecisionCache
from signage.services.schedule_rules import OvernightPolicy

logger = logging.getLogger(__name__)


def current_policy() -> OvernightPolicy:
    return OvernightPolicy(settings.OVERNIGHT_WINDOW_POLICY)


async def load_rules(db: AsyncSession, schedule_id: uuid.UUID, tenant_id: uuid.UUID | None = None) -> ScheduleRules:
    query = select(Schedule).where(Schedule.id == schedule_id)
    if tenant_id is not None:
        query = query.where(Schedule.tenant_id == tenant_id)
    schedule = (await db.execute(query)).scalar_one_or_none()
    if schedule is None:
        raise NotFoundError("Schedule not found", schedule_id=str(schedule_id))

    result = await db.execute(select(ScheduleEntry).where(ScheduleEntry.schedule_id == schedule_id))
    return ScheduleRules.from_models(schedule, result.scalars().all())


class DatabaseScheduleSource:
    """Resolves schedules from the database, memoised per time bucket."""

    def __init__(self, db: AsyncSession, cache: DecisionCache, policy: OvernightPolicy | None = None):
        self.db = db
        self.cache = cache
        self.policy = policy or current_policy()

    async def decision_for(self, schedule_id, instant: datetime) -> Decision:
        cached = self.cache.get(schedule_id, instant)
        if cached is not None:
            return cached
        rules = await load_rules(self.db, schedule_id)
        decision = rules.resolve(instant, policy=self.policy)
        self.cache.put(schedule_id, instant, decision)
        return decision


def build_overlay(
    db: AsyncSession,
    cache: DecisionCache,
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> CampaignOverlay:
    return CampaignOverlay(
        campaigns=DatabaseCampaignProvider(session_factory),
        schedules=DatabaseScheduleSource(db, cache),
        timeout=settings.CAMPAIGN_LOOKUP_TIMEOUT_SECONDS,
    )
