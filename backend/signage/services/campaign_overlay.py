"""
Campaign overlay — the full answer to a device poll.

    emergency campaign > active campaign > schedule > default scene > nothing

Each layer short-circuits the ones below it. The campaign lookup runs under
a timeout; when it fails the schedule answer is returned marked degraded.
"""
import asyncio
import logging
from datetime import datetime
from typing import Protocol, Sequence

from signage.core.exceptions import CollaboratorUnavailableError
from signage.services.assignment_service import Target, schedule_for_target
from signage.services.campaign_service import CampaignProvider, CampaignSnapshot
from signage.services.content_resolver import Decision, DecisionKind

logger = logging.getLogger(__name__)


class ScheduleSource(Protocol):
    async def decision_for(self, schedule_id, instant: datetime) -> Decision:
        ...


def pick_campaign(campaigns: Sequence[CampaignSnapshot], target: Target, instant: datetime) -> CampaignSnapshot | None:
    live = [c for c in campaigns if c.is_live(instant) and c.targets(target)]
    return min(live, key=CampaignSnapshot.rank) if live else None


class CampaignOverlay:
    def __init__(self, campaigns: CampaignProvider, schedules: ScheduleSource, timeout: float = 0.5):
        self.campaigns = campaigns
        self.schedules = schedules
        self.timeout = timeout

    async def _lookup_campaigns(self, target: Target, instant: datetime) -> Sequence[CampaignSnapshot]:
        try:
            return await asyncio.wait_for(self.campaigns.active_campaigns_for(target, instant), self.timeout)
        except asyncio.TimeoutError as exc:
            raise CollaboratorUnavailableError(f"Campaign lookup timed out after {self.timeout}s") from exc
        except Exception as exc:
            raise CollaboratorUnavailableError(f"Campaign lookup failed: {exc}") from exc

    async def resolve_for_target(self, target: Target, instant: datetime) -> Decision:
        degraded = False
        try:
            campaigns = await self._lookup_campaigns(target, instant)
        except CollaboratorUnavailableError as exc:
            logger.warning("Serving schedule without campaigns for %s %s: %s", target.kind.value, target.id, exc.message)
            campaigns = ()
            degraded = True

        winner = pick_campaign(campaigns, target, instant)
        if winner is not None:
            return Decision(
                kind=DecisionKind.CAMPAIGN,
                content=winner.content,
                campaign_id=winner.id,
                priority=winner.priority,
                emergency=winner.emergency,
                target_id=target.id,
            )

        decision = await self._fallback(target, instant)
        decision = decision.for_target(target.id)
        return decision.marked_degraded() if degraded else decision

    async def _fallback(self, target: Target, instant: datetime) -> Decision:
        schedule_id = schedule_for_target(target)
        if schedule_id is not None:
            decision = await self.schedules.decision_for(schedule_id, instant)
            if decision.kind is not DecisionKind.NONE:
                return decision
        if target.default_content is not None:
            return Decision(DecisionKind.DEFAULT, content=target.default_content, schedule_id=schedule_id)
        return Decision(DecisionKind.NONE, schedule_id=schedule_id)
