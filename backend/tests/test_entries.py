import uuid
from datetime import time

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from signage.models.content import ApprovalStatus, ContentType
from signage.models.schedule_entry import ScheduleEntry


@pytest.mark.asyncio
async def test_create_entry_with_defaults(client: AsyncClient, manager_headers: dict, make_schedule, make_playlist):
    schedule = await make_schedule()
    playlist = await make_playlist()

    response = await client.post(
        f"/api/v1/schedules/{schedule.id}/entries",
        json={"content_id": str(playlist.id)},
        headers=manager_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["content_type"] == "playlist"
    assert data["start_time"] == "09:00:00"
    assert data["end_time"] == "17:00:00"
    assert data["days_of_week"] == [1, 2, 3, 4, 5]
    assert data["priority"] == 0
    assert data["is_active"] is True
    assert data["event_type"] == "content"


@pytest.mark.asyncio
async def test_create_entry_for_missing_schedule(client: AsyncClient, manager_headers: dict, make_playlist):
    playlist = await make_playlist()
    response = await client.post(
        f"/api/v1/schedules/{uuid.uuid4()}/entries",
        json={"content_id": str(playlist.id)},
        headers=manager_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("fields", [
    {"start_time": "9am"},
    {"end_time": "24:00"},
    {"days_of_week": [1, 9]},
    {"days_of_week": []},
    {"start_date": "2024-02-01", "end_date": "2024-01-01"},
    {"repeat_type": "weekly", "repeat_config": {"interval": 0}},
    {"repeat_type": "daily"},
])
async def test_invalid_entry_is_rejected_without_writing(
    client: AsyncClient, manager_headers: dict, db_session: AsyncSession, make_schedule, make_playlist, fields
):
    schedule = await make_schedule()
    playlist = await make_playlist()
    response = await client.post(
        f"/api/v1/schedules/{schedule.id}/entries",
        json={"content_id": str(playlist.id), **fields},
        headers=manager_headers,
    )
    assert response.status_code == 422
    count = await db_session.scalar(select(func.count()).select_from(ScheduleEntry))
    assert count == 0


@pytest.mark.asyncio
async def test_screen_off_entry_needs_no_content(client: AsyncClient, editor_headers: dict, make_schedule):
    schedule = await make_schedule()
    response = await client.post(
        f"/api/v1/schedules/{schedule.id}/entries",
        json={"event_type": "screen_off", "start_time": "23:00", "end_time": "06:00", "days_of_week": [0, 1, 2, 3, 4, 5, 6]},
        headers=editor_headers,
    )
    assert response.status_code == 201
    assert response.json()["content_id"] is None


@pytest.mark.asyncio
async def test_editor_cannot_schedule_unapproved_content(
    client: AsyncClient, editor_headers: dict, manager_headers: dict, make_schedule, make_playlist
):
    schedule = await make_schedule()
    pending = await make_playlist("New Menu", status=ApprovalStatus.PENDING)
    body = {"content_id": str(pending.id)}

    response = await client.post(f"/api/v1/schedules/{schedule.id}/entries", json=body, headers=editor_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "content_not_approved"

    response = await client.post(f"/api/v1/schedules/{schedule.id}/entries", json=body, headers=manager_headers)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_content_of_another_tenant_is_not_found(
    client: AsyncClient, manager_headers: dict, make_schedule, make_playlist
):
    schedule = await make_schedule()
    foreign = await make_playlist(tenant_id=uuid.uuid4())
    response = await client.post(
        f"/api/v1/schedules/{schedule.id}/entries", json={"content_id": str(foreign.id)}, headers=manager_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_entry(client: AsyncClient, manager_headers: dict, make_schedule, make_playlist, make_entry):
    schedule = await make_schedule()
    playlist = await make_playlist()
    entry = await make_entry(schedule, playlist.id, time(11), time(14), days=[1, 2, 3, 4, 5])

    response = await client.patch(
        f"/api/v1/schedules/{schedule.id}/entries/{entry.id}",
        json={"priority": 3, "end_time": "15:30", "days_of_week": [5, 1]},
        headers=manager_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["priority"] == 3
    assert data["start_time"] == "11:00:00"
    assert data["end_time"] == "15:30:00"
    assert data["days_of_week"] == [1, 5]


@pytest.mark.asyncio
async def test_update_entry_validation_leaves_entry_untouched(
    client: AsyncClient, manager_headers: dict, db_session: AsyncSession, make_schedule, make_playlist, make_entry
):
    schedule = await make_schedule()
    playlist = await make_playlist()
    entry = await make_entry(schedule, playlist.id, time(11), time(14))

    response = await client.patch(
        f"/api/v1/schedules/{schedule.id}/entries/{entry.id}",
        json={"priority": 9, "days_of_week": [8]},
        headers=manager_headers,
    )
    assert response.status_code == 422
    await db_session.refresh(entry)
    assert entry.priority == 0


@pytest.mark.asyncio
async def test_delete_entry(client: AsyncClient, manager_headers: dict, make_schedule, make_playlist, make_entry):
    schedule = await make_schedule()
    playlist = await make_playlist()
    entry = await make_entry(schedule, playlist.id, time(11), time(14))

    response = await client.delete(f"/api/v1/schedules/{schedule.id}/entries/{entry.id}", headers=manager_headers)
    assert response.status_code == 204
    response = await client.delete(f"/api/v1/schedules/{schedule.id}/entries/{entry.id}", headers=manager_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_conflict_check_reports_overlaps(
    client: AsyncClient, manager_headers: dict, make_schedule, make_playlist, make_entry
):
    schedule = await make_schedule()
    lunch = await make_playlist("Lunch Menu")
    entry = await make_entry(schedule, lunch.id, time(11), time(14), days=[1, 2, 3, 4, 5])

    response = await client.post(
        f"/api/v1/schedules/{schedule.id}/conflicts",
        json={"start_time": "11:30", "end_time": "12:30", "days_of_week": [2]},
        headers=manager_headers,
    )
    assert response.status_code == 200
    report = response.json()
    assert report["has_conflicts"] is True
    conflict = report["conflicts"][0]
    assert conflict["entry_id"] == str(entry.id)
    assert conflict["content_name"] == "Lunch Menu"
    assert conflict["window"] == "11:00 AM - 2:00 PM"
    assert conflict["days"] == "Weekdays"


@pytest.mark.asyncio
async def test_conflict_check_for_screen_off_candidate(
    client: AsyncClient, manager_headers: dict, make_schedule, make_playlist, make_entry
):
    schedule = await make_schedule()
    lunch = await make_playlist("Lunch Menu")
    entry = await make_entry(schedule, lunch.id, time(11), time(14), days=[1, 2, 3, 4, 5])

    response = await client.post(
        f"/api/v1/schedules/{schedule.id}/conflicts",
        json={"start_time": "11:30", "end_time": "12:30", "days_of_week": [2], "event_type": "screen_off"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    report = response.json()
    assert report["has_conflicts"] is True
    assert [c["entry_id"] for c in report["conflicts"]] == [str(entry.id)]


@pytest.mark.asyncio
async def test_conflict_check_excludes_entry_being_edited(
    client: AsyncClient, manager_headers: dict, make_schedule, make_playlist, make_entry
):
    schedule = await make_schedule()
    playlist = await make_playlist()
    entry = await make_entry(schedule, playlist.id, time(11), time(14))

    response = await client.post(
        f"/api/v1/schedules/{schedule.id}/conflicts",
        json={"end_time": "15:00", "exclude_entry_id": str(entry.id)},
        headers=manager_headers,
    )
    assert response.json() == {"has_conflicts": False, "conflicts": []}


@pytest.mark.asyncio
async def test_week_preview(client: AsyncClient, manager_headers: dict, make_schedule, make_playlist, make_entry):
    playlist = await make_playlist("Lunch Menu")
    schedule = await make_schedule(filler_content_type=ContentType.PLAYLIST, filler_content_id=playlist.id)
    await make_entry(schedule, playlist.id, time(11), time(14), days=[1, 2, 3, 4, 5])

    response = await client.get(
        f"/api/v1/schedules/{schedule.id}/preview/week",
        params={"start_date": "2024-01-07"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    days = response.json()["days"]
    assert len(days) == 7
    assert days[0]["filler_applies"] is True
    assert days[0]["filler_content_id"] == str(playlist.id)
    assert days[1]["entries"][0]["content_name"] == "Lunch Menu"
    assert days[1]["entries"][0]["carried_over"] is False
    assert all(d["hours"] == 24 for d in days)


@pytest.mark.asyncio
async def test_day_preview(client: AsyncClient, manager_headers: dict, make_schedule, make_playlist, make_entry):
    schedule = await make_schedule()
    playlist = await make_playlist("Lunch Menu")
    await make_entry(schedule, playlist.id, time(11), time(14))

    response = await client.get(
        f"/api/v1/schedules/{schedule.id}/preview/day", params={"date": "2024-01-09"}, headers=manager_headers
    )
    assert response.status_code == 200
    hours = response.json()["hours"]
    assert len(hours) == 24
    assert hours[12]["kind"] == "entry"
    assert hours[12]["content_name"] == "Lunch Menu"
    assert hours[15]["kind"] == "none"


@pytest.mark.asyncio
async def test_resolve_schedule_at_instant(
    client: AsyncClient, manager_headers: dict, make_schedule, make_playlist, make_entry
):
    schedule = await make_schedule(timezone="America/New_York")
    playlist = await make_playlist()
    entry = await make_entry(schedule, playlist.id, time(7), time(10), days=[2])

    response = await client.get(
        f"/api/v1/schedules/{schedule.id}/resolve",
        params={"at": "2024-01-09T13:00:00+00:00"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["kind"] == "entry"
    assert data["entry_id"] == str(entry.id)
    assert data["content_id"] == str(playlist.id)
