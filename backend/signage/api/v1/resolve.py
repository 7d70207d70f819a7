"""
Device polling endpoints — the full overlay answer for a device or screen group.

Devices authenticate by their id; no actor headers are required here.
"""
import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from signage.config import settings
from signage.core.dependencies import get_db, get_overlay
from signage.core.middleware import limiter
from signage.models.device import Device
from signage.schemas.resolution import DecisionResponse
from signage.services.assignment_service import TargetKind, load_target, record_poll
from signage.services.campaign_overlay import CampaignOverlay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resolve", tags=["resolve"])


@router.get("/devices/{device_id}", response_model=DecisionResponse)
@limiter.limit(settings.POLL_RATE_LIMIT)
async def resolve_device(
    request: Request,
    device_id: UUID,
    at: datetime | None = Query(None),
    db: AsyncSession = Depends(get_db),
    overlay: CampaignOverlay = Depends(get_overlay),
):
    instant = at or datetime.now(timezone.utc)
    target = await load_target(db, TargetKind.DEVICE, device_id)
    decision = await overlay.resolve_for_target(target, instant)

    # Polling acknowledges a pending refresh and records liveness
    device = await db.get(Device, device_id)
    if device is not None:
        record_poll(device, datetime.now(timezone.utc), settings.DEVICE_SEEN_INTERVAL_SECONDS)

    if decision.degraded:
        logger.info("Degraded decision for device %s: %s", device_id, decision.kind.value)
    return DecisionResponse.from_decision(decision, instant)


@router.get("/groups/{group_id}", response_model=DecisionResponse)
@limiter.limit(settings.POLL_RATE_LIMIT)
async def resolve_group(
    request: Request,
    group_id: UUID,
    at: datetime | None = Query(None),
    db: AsyncSession = Depends(get_db),
    overlay: CampaignOverlay = Depends(get_overlay),
):
    instant = at or datetime.now(timezone.utc)
    target = await load_target(db, TargetKind.GROUP, group_id)
    decision = await overlay.resolve_for_target(target, instant)
    return DecisionResponse.from_decision(decision, instant)
