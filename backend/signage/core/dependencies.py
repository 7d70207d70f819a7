from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from signage.core.security import Actor, actor_from_headers
from signage.db.session import get_db, get_session_factory
from signage.services.campaign_overlay import CampaignOverlay
from signage.services.decision_cache import DecisionCache, get_decision_cache
from signage.services.resolution_service import build_overlay
from signage.services.schedule_service import ScheduleService


async def get_actor(
    x_tenant_id: str | None = Header(None),
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Actor:
    return actor_from_headers(x_tenant_id, x_user_id, x_user_role)


async def get_schedule_service(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
    cache: DecisionCache = Depends(get_decision_cache),
) -> ScheduleService:
    return ScheduleService(db, actor, cache)


async def get_overlay(
    db: AsyncSession = Depends(get_db),
    cache: DecisionCache = Depends(get_decision_cache),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CampaignOverlay:
    return build_overlay(db, cache, session_factory)
