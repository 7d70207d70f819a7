import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from signage.models.content import ContentType
from signage.services.assignment_service import Target, TargetKind
from signage.services.campaign_overlay import CampaignOverlay
from signage.services.campaign_service import CampaignSnapshot, DatabaseCampaignProvider
from signage.services.content_catalog import ContentRef
from signage.services.content_resolver import Decision, DecisionKind

NOW = datetime(2024, 1, 9, 12, 0, tzinfo=timezone.utc)
DEVICE_ID = uuid.UUID(int=10)
GROUP_ID = uuid.UUID(int=20)
SCHEDULE_ID = uuid.UUID(int=30)
SCENE = ContentRef(ContentType.SCENE, uuid.UUID(int=40))
LUNCH = ContentRef(ContentType.PLAYLIST, uuid.UUID(int=50))


def device(schedule_id=SCHEDULE_ID, default=SCENE) -> Target:
    return Target(kind=TargetKind.DEVICE, id=DEVICE_ID, tenant_id=uuid.UUID(int=1),
                  schedule_id=schedule_id, group_id=GROUP_ID, default_content=default)


def campaign(name, emergency=False, priority=0, devices=(DEVICE_ID,), groups=(), **kwargs) -> CampaignSnapshot:
    return CampaignSnapshot(
        id=name,
        content=ContentRef(ContentType.LAYOUT, name),
        emergency=emergency,
        priority=priority,
        device_ids=frozenset(str(d) for d in devices),
        group_ids=frozenset(str(g) for g in groups),
        **kwargs,
    )


class StaticCampaigns:
    def __init__(self, campaigns=()):
        self.campaigns = list(campaigns)
        self.calls = 0

    async def active_campaigns_for(self, target, instant):
        self.calls += 1
        return self.campaigns


class SlowCampaigns:
    async def active_campaigns_for(self, target, instant):
        await asyncio.sleep(5)
        return []


class BrokenCampaigns:
    async def active_campaigns_for(self, target, instant):
        raise ConnectionError("campaign service down")


class RecordingSchedules:
    def __init__(self, decision: Decision):
        self.decision = decision
        self.calls = 0

    async def decision_for(self, schedule_id, instant):
        self.calls += 1
        return self.decision


def lunch_schedule() -> RecordingSchedules:
    return RecordingSchedules(Decision(DecisionKind.ENTRY, content=LUNCH, schedule_id=SCHEDULE_ID, entry_id="lunch"))


@pytest.mark.asyncio
async def test_emergency_short_circuits_schedule():
    schedules = lunch_schedule()
    overlay = CampaignOverlay(StaticCampaigns([campaign("promo", priority=50), campaign("fire", emergency=True)]), schedules)

    decision = await overlay.resolve_for_target(device(), NOW)
    assert decision.kind is DecisionKind.CAMPAIGN
    assert decision.campaign_id == "fire"
    assert decision.emergency
    assert decision.target_id == DEVICE_ID
    assert schedules.calls == 0


@pytest.mark.asyncio
async def test_active_campaign_beats_schedule():
    schedules = lunch_schedule()
    overlay = CampaignOverlay(StaticCampaigns([campaign("promo")]), schedules)
    decision = await overlay.resolve_for_target(device(), NOW)
    assert decision.campaign_id == "promo"
    assert not decision.emergency
    assert schedules.calls == 0


@pytest.mark.asyncio
async def test_campaign_winner_by_priority_then_start():
    early = campaign("early", priority=1, starts_at=NOW - timedelta(days=2))
    late = campaign("late", priority=1, starts_at=NOW - timedelta(days=1))
    low = campaign("low", priority=0, starts_at=NOW - timedelta(days=3))
    overlay = CampaignOverlay(StaticCampaigns([late, low, early]), lunch_schedule())
    assert (await overlay.resolve_for_target(device(), NOW)).campaign_id == "early"


@pytest.mark.asyncio
async def test_group_campaign_reaches_member_device():
    overlay = CampaignOverlay(StaticCampaigns([campaign("group", devices=(), groups=(GROUP_ID,))]), lunch_schedule())
    assert (await overlay.resolve_for_target(device(), NOW)).campaign_id == "group"


@pytest.mark.asyncio
async def test_campaigns_outside_their_window_are_ignored():
    expired = campaign("expired", ends_at=NOW)
    future = campaign("future", starts_at=NOW + timedelta(minutes=1))
    paused = campaign("paused", active=False)
    other = campaign("other", devices=(uuid.uuid4(),))
    overlay = CampaignOverlay(StaticCampaigns([expired, future, paused, other]), lunch_schedule())
    decision = await overlay.resolve_for_target(device(), NOW)
    assert decision.kind is DecisionKind.ENTRY
    assert decision.entry_id == "lunch"


@pytest.mark.asyncio
async def test_schedule_answer_without_campaigns():
    decision = await CampaignOverlay(StaticCampaigns(), lunch_schedule()).resolve_for_target(device(), NOW)
    assert decision.kind is DecisionKind.ENTRY
    assert decision.target_id == DEVICE_ID
    assert not decision.degraded


@pytest.mark.asyncio
async def test_blank_and_filler_are_not_replaced_by_default_scene():
    for kind in (DecisionKind.BLANK, DecisionKind.FILLER):
        schedules = RecordingSchedules(Decision(kind, schedule_id=SCHEDULE_ID))
        decision = await CampaignOverlay(StaticCampaigns(), schedules).resolve_for_target(device(), NOW)
        assert decision.kind is kind


@pytest.mark.asyncio
async def test_default_scene_when_schedule_has_nothing():
    schedules = RecordingSchedules(Decision(DecisionKind.NONE, schedule_id=SCHEDULE_ID))
    decision = await CampaignOverlay(StaticCampaigns(), schedules).resolve_for_target(device(), NOW)
    assert decision.kind is DecisionKind.DEFAULT
    assert decision.content == SCENE


@pytest.mark.asyncio
async def test_default_scene_when_nothing_assigned():
    schedules = lunch_schedule()
    decision = await CampaignOverlay(StaticCampaigns(), schedules).resolve_for_target(device(schedule_id=None), NOW)
    assert decision.kind is DecisionKind.DEFAULT
    assert schedules.calls == 0


@pytest.mark.asyncio
async def test_none_without_schedule_or_default():
    decision = await CampaignOverlay(StaticCampaigns(), lunch_schedule()).resolve_for_target(
        device(schedule_id=None, default=None), NOW
    )
    assert decision.kind is DecisionKind.NONE


@pytest.mark.asyncio
async def test_campaign_timeout_falls_back_degraded(caplog):
    overlay = CampaignOverlay(SlowCampaigns(), lunch_schedule(), timeout=0.01)
    decision = await overlay.resolve_for_target(device(), NOW)
    assert decision.kind is DecisionKind.ENTRY
    assert decision.degraded
    assert "timed out" in caplog.text


@pytest.mark.asyncio
async def test_campaign_failure_falls_back_degraded():
    overlay = CampaignOverlay(BrokenCampaigns(), lunch_schedule())
    decision = await overlay.resolve_for_target(device(schedule_id=None), NOW)
    assert decision.kind is DecisionKind.DEFAULT
    assert decision.degraded


class StalledSession:
    def __init__(self):
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    async def execute(self, statement):
        await asyncio.sleep(5)


@pytest.mark.asyncio
async def test_cancelled_campaign_lookup_closes_its_own_session():
    sessions = []

    def session_factory():
        sessions.append(StalledSession())
        return sessions[-1]

    schedules = lunch_schedule()
    overlay = CampaignOverlay(DatabaseCampaignProvider(session_factory), schedules, timeout=0.01)
    decision = await overlay.resolve_for_target(device(), NOW)

    assert decision.kind is DecisionKind.ENTRY
    assert decision.degraded
    assert schedules.calls == 1
    assert len(sessions) == 1 and sessions[0].closed
