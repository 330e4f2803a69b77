from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from app.models.notification import Notification
from app.models.user import UserRole


def event_payload(**overrides):
    start = datetime.now(timezone.utc) + timedelta(days=3)
    payload = {
        "title": "Annual Convocation",
        "location": "Main Auditorium",
        "start_at": start.isoformat(),
        "end_at": (start + timedelta(hours=4)).isoformat(),
        "tagged_departments": ["IT", "Security"],
        "requirements": {"IT": ["projector", "mic"]},
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_event_notifies_tagged_departments(client, session, make_user, auth_headers, realtime_mock):
    creator = await make_user(department="Arts")
    it_staff = await make_user(department="IT")
    security_head = await make_user(role=UserRole.Head, department="Security")
    await make_user(department="Finance")

    res = await client.post("/api/events", json=event_payload(), headers=auth_headers(creator))
    assert res.status_code == 201

    data = res.json()["data"]
    assert data["status"] == "submitted"
    assert data["requestor_department"] == "Arts"
    assert data["tagged_departments"] == ["IT", "Security"]

    notified = {n.user_id for n in (await session.execute(select(Notification))).scalars().all()}
    assert notified == {it_staff.id, security_head.id}

    pushed = [c.args for c in realtime_mock.notify_user.await_args_list]
    assert {args[0] for args in pushed} == {it_staff.id, security_head.id}
    assert all(args[1] == "new-notification" for args in pushed)


@pytest.mark.asyncio
async def test_event_end_before_start_is_rejected(client, make_user, auth_headers, realtime_mock):
    creator = await make_user()
    start = datetime.now(timezone.utc)
    res = await client.post(
        "/api/events",
        json=event_payload(start_at=start.isoformat(), end_at=(start - timedelta(hours=1)).isoformat()),
        headers=auth_headers(creator),
    )
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_status_change_notifies_creator(client, make_user, auth_headers, realtime_mock):
    creator = await make_user(department="Arts")
    head = await make_user(role=UserRole.Head, department="Arts")

    res = await client.post("/api/events", json=event_payload(tagged_departments=[]), headers=auth_headers(creator))
    event_id = res.json()["data"]["id"]

    res = await client.patch(
        f"/api/events/{event_id}/status",
        json={"status": "approved", "remarks": "Looks good"},
        headers=auth_headers(head),
    )
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "approved"

    events = [c.args[1] for c in realtime_mock.notify_user.await_args_list]
    assert events == ["new-notification", "event-status-updated"]
    assert all(c.args[0] == creator.id for c in realtime_mock.notify_user.await_args_list)

    notes = await client.get("/api/notifications", headers=auth_headers(creator))
    assert "Looks good" in notes.json()["data"][0]["message"]


@pytest.mark.asyncio
async def test_staff_cannot_change_status(client, make_user, auth_headers, realtime_mock):
    creator = await make_user()
    res = await client.post("/api/events", json=event_payload(tagged_departments=[]), headers=auth_headers(creator))
    event_id = res.json()["data"]["id"]

    res = await client.patch(
        f"/api/events/{event_id}/status", json={"status": "approved"}, headers=auth_headers(creator)
    )
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_visibility_follows_department_permissions(client, admin, make_user, auth_headers, realtime_mock):
    arts = await make_user(department="Arts")
    it_staff = await make_user(department="IT")
    finance = await make_user(department="Finance")

    await client.post("/api/events", json=event_payload(title="Tagged IT"), headers=auth_headers(arts))
    await client.post(
        "/api/events", json=event_payload(title="Untagged", tagged_departments=[]), headers=auth_headers(arts)
    )

    async def visible_titles(user):
        res = await client.get("/api/events", headers=auth_headers(user))
        assert res.status_code == 200
        return sorted(e["title"] for e in res.json()["data"])

    # No stored permissions: only own department
    assert await visible_titles(finance) == []
    assert await visible_titles(it_staff) == []
    assert await visible_titles(admin) == ["Tagged IT", "Untagged"]

    base = {"myRequirements": True, "manageLocation": True, "myCalendar": True}
    await client.put(
        "/api/department-permissions/IT",
        json={"permissions": {**base, "taggedDepartments": True}},
        headers=auth_headers(admin),
    )
    await client.put(
        "/api/department-permissions/Finance",
        json={"permissions": {**base, "allEvents": True}},
        headers=auth_headers(admin),
    )

    assert await visible_titles(it_staff) == ["Tagged IT"]
    assert await visible_titles(finance) == ["Tagged IT", "Untagged"]


@pytest.mark.asyncio
async def test_list_filters_by_status(client, admin, make_user, auth_headers, realtime_mock):
    creator = await make_user(department="Arts")
    res = await client.post("/api/events", json=event_payload(tagged_departments=[]), headers=auth_headers(creator))
    event_id = res.json()["data"]["id"]
    await client.patch(f"/api/events/{event_id}/status", json={"status": "rejected"}, headers=auth_headers(admin))

    res = await client.get("/api/events", params={"status": "rejected"}, headers=auth_headers(admin))
    assert [e["id"] for e in res.json()["data"]] == [event_id]

    res = await client.get("/api/events", params={"status": "approved"}, headers=auth_headers(admin))
    assert res.json()["data"] == []


@pytest.mark.asyncio
async def test_only_owner_or_admin_can_edit_and_delete(client, admin, session, make_user, auth_headers, realtime_mock):
    owner = await make_user(department="Arts")
    other = await make_user(department="Arts")
    await make_user(department="IT")

    res = await client.post("/api/events", json=event_payload(), headers=auth_headers(owner))
    event_id = res.json()["data"]["id"]

    res = await client.put(f"/api/events/{event_id}", json={"title": "Hijacked"}, headers=auth_headers(other))
    assert res.status_code == 403

    res = await client.put(f"/api/events/{event_id}", json={"title": "Renamed"}, headers=auth_headers(owner))
    assert res.status_code == 200
    assert res.json()["data"]["title"] == "Renamed"

    res = await client.delete(f"/api/events/{event_id}", headers=auth_headers(other))
    assert res.status_code == 403

    res = await client.delete(f"/api/events/{event_id}", headers=auth_headers(admin))
    assert res.status_code == 200

    # Tag notifications go with the event
    assert (await session.execute(select(Notification))).scalars().all() == []

    res = await client.get(f"/api/events/{event_id}", headers=auth_headers(admin))
    assert res.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "start_at", "end_at", "tagged_departments", "requirements"])
async def test_update_rejects_null_for_required_fields(client, make_user, auth_headers, realtime_mock, field):
    owner = await make_user(department="Arts")
    res = await client.post("/api/events", json=event_payload(tagged_departments=[]), headers=auth_headers(owner))
    event_id = res.json()["data"]["id"]

    res = await client.put(f"/api/events/{event_id}", json={field: None}, headers=auth_headers(owner))
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid request data"

    # Nullable fields can still be cleared
    res = await client.put(f"/api/events/{event_id}", json={"location": None}, headers=auth_headers(owner))
    assert res.status_code == 200
    assert res.json()["data"]["location"] is None
