from datetime import time

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from signage.services.daypart_service import seed_system_presets


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session: AsyncSession):
    assert await seed_system_presets(db_session) == 7
    assert await seed_system_presets(db_session) == 0


@pytest.mark.asyncio
async def test_list_includes_system_presets(client: AsyncClient, db_session: AsyncSession, manager_headers: dict):
    await seed_system_presets(db_session)

    response = await client.get("/api/v1/dayparts", headers=manager_headers)
    assert response.status_code == 200
    presets = {p["name"]: p for p in response.json()}
    assert presets["Lunch"]["start_time"] == "11:00:00"
    assert presets["Lunch"]["end_time"] == "14:00:00"
    assert presets["Lunch"]["is_system"] is True
    assert presets["Evening"]["end_time"] == "00:00:00"


@pytest.mark.asyncio
async def test_custom_preset_is_tenant_scoped(
    client: AsyncClient, manager_headers: dict, other_tenant_headers: dict
):
    response = await client.post(
        "/api/v1/dayparts",
        json={"name": "Happy Hour", "start_time": "16:00", "end_time": "18:00", "days_of_week": [4, 5]},
        headers=manager_headers,
    )
    assert response.status_code == 201
    preset = response.json()
    assert preset["preset_type"] == "custom"
    assert preset["is_system"] is False

    response = await client.get("/api/v1/dayparts", headers=other_tenant_headers)
    assert preset["id"] not in [p["id"] for p in response.json()]


@pytest.mark.asyncio
async def test_update_and_delete_custom_preset(client: AsyncClient, manager_headers: dict):
    response = await client.post(
        "/api/v1/dayparts",
        json={"name": "Happy Hour", "start_time": "16:00", "end_time": "18:00"},
        headers=manager_headers,
    )
    preset_id = response.json()["id"]

    response = await client.patch(f"/api/v1/dayparts/{preset_id}", json={"end_time": "19:00"}, headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["end_time"] == "19:00:00"

    response = await client.delete(f"/api/v1/dayparts/{preset_id}", headers=manager_headers)
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_system_presets_are_read_only(client: AsyncClient, db_session: AsyncSession, manager_headers: dict):
    await seed_system_presets(db_session)
    presets = (await client.get("/api/v1/dayparts", headers=manager_headers)).json()
    lunch = next(p for p in presets if p["name"] == "Lunch")

    response = await client.patch(f"/api/v1/dayparts/{lunch['id']}", json={"name": "Brunch"}, headers=manager_headers)
    assert response.status_code == 422
    response = await client.delete(f"/api/v1/dayparts/{lunch['id']}", headers=manager_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_invalid_preset_window(client: AsyncClient, manager_headers: dict):
    response = await client.post(
        "/api/v1/dayparts",
        json={"name": "Broken", "start_time": "25:00", "end_time": "18:00"},
        headers=manager_headers,
    )
    assert response.status_code == 422
    assert response.json()["context"]["field"] == "start_time"


@pytest.mark.asyncio
async def test_apply_preset_to_entries(
    client: AsyncClient, db_session: AsyncSession, manager_headers: dict, make_schedule, make_playlist, make_entry
):
    await seed_system_presets(db_session)
    presets = (await client.get("/api/v1/dayparts", headers=manager_headers)).json()
    dinner = next(p for p in presets if p["name"] == "Dinner")

    schedule = await make_schedule()
    playlist = await make_playlist()
    first = await make_entry(schedule, playlist.id, time(9), time(10), days=[1])
    second = await make_entry(schedule, playlist.id, time(12), time(13), days=[2], priority=4)

    response = await client.post(
        f"/api/v1/dayparts/{dinner['id']}/apply",
        json={"entry_ids": [str(first.id), str(second.id)]},
        headers=manager_headers,
    )
    assert response.status_code == 200
    updated = response.json()
    assert [e["start_time"] for e in updated] == ["17:00:00", "17:00:00"]
    assert [e["end_time"] for e in updated] == ["21:00:00", "21:00:00"]
    assert all(e["days_of_week"] == [0, 1, 2, 3, 4, 5, 6] for e in updated)
    assert updated[1]["priority"] == 4


@pytest.mark.asyncio
async def test_apply_preset_with_unknown_entry_changes_nothing(
    client: AsyncClient, db_session: AsyncSession, manager_headers: dict, make_schedule, make_playlist, make_entry
):
    response = await client.post(
        "/api/v1/dayparts",
        json={"name": "Late", "start_time": "22:00", "end_time": "23:00"},
        headers=manager_headers,
    )
    preset_id = response.json()["id"]
    schedule = await make_schedule()
    playlist = await make_playlist()
    entry = await make_entry(schedule, playlist.id, time(9), time(10))

    response = await client.post(
        f"/api/v1/dayparts/{preset_id}/apply",
        json={"entry_ids": [str(entry.id), "00000000-0000-0000-0000-000000000000"]},
        headers=manager_headers,
    )
    assert response.status_code == 404
    await db_session.refresh(entry)
    assert entry.start_time == time(9)


@pytest.mark.asyncio
async def test_apply_preset_invalid_entry_leaves_earlier_entries_unchanged(
    client: AsyncClient, db_session: AsyncSession, manager_headers: dict, make_schedule, make_playlist, make_entry
):
    response = await client.post(
        "/api/v1/dayparts",
        json={"name": "Late", "start_time": "22:00", "end_time": "23:00"},
        headers=manager_headers,
    )
    preset_id = response.json()["id"]
    schedule = await make_schedule()
    playlist = await make_playlist()
    valid = await make_entry(schedule, playlist.id, time(9), time(10))
    # A content entry stored without content fails validation on any update
    broken = await make_entry(schedule, None, time(12), time(13))

    response = await client.post(
        f"/api/v1/dayparts/{preset_id}/apply",
        json={"entry_ids": [str(valid.id), str(broken.id)]},
        headers=manager_headers,
    )
    assert response.status_code == 422
    await db_session.refresh(valid)
    assert valid.start_time == time(9)
    assert valid.end_time == time(10)
