import pytest


@pytest.mark.asyncio
async def test_login_logs_admin_only(client, admin, make_user, auth_headers):
    staff = await make_user(email="staff@example.com", password="secret123")
    await client.post("/api/users/login", json={"email": "staff@example.com", "password": "secret123"})
    await client.post("/api/users/login", json={"email": "staff@example.com", "password": "wrong"})

    res = await client.get("/api/login-logs", headers=auth_headers(staff))
    assert res.status_code == 403

    res = await client.get("/api/login-logs", params={"status": "failed"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert [log["status"] for log in res.json()["data"]] == ["failed"]

    res = await client.get("/api/login-logs/me", headers=auth_headers(staff))
    assert [log["status"] for log in res.json()["data"]] == ["success"]

    log_id = res.json()["data"][0]["id"]
    res = await client.delete(f"/api/login-logs/{log_id}", headers=auth_headers(admin))
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_client_reported_activity(client, admin, make_user, auth_headers):
    staff = await make_user()

    res = await client.post(
        "/api/user-activity-logs",
        json={"action": "EXPORT_CALENDAR", "resource_type": "Calendar", "details": {"format": "ics"}},
        headers={**auth_headers(staff), "X-Forwarded-For": "10.0.0.7, 172.16.0.1"},
    )
    assert res.status_code == 201
    assert res.json()["data"]["ip_address"] == "10.0.0.7"

    res = await client.get("/api/user-activity-logs/me", headers=auth_headers(staff))
    assert [log["action"] for log in res.json()["data"]] == ["EXPORT_CALENDAR"]

    res = await client.get(
        "/api/user-activity-logs", params={"action": "EXPORT_CALENDAR"}, headers=auth_headers(admin)
    )
    assert len(res.json()["data"]) == 1

    res = await client.get("/api/user-activity-logs", headers=auth_headers(staff))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_permission_changes_are_recorded(client, admin, auth_headers):
    await client.delete("/api/department-permissions/IT", headers=auth_headers(admin))

    res = await client.get(
        "/api/user-activity-logs", params={"resource_type": "DepartmentPermissions"}, headers=auth_headers(admin)
    )
    entries = res.json()["data"]
    assert [e["action"] for e in entries] == ["PERMISSIONS_RESET"]
    assert entries[0]["resource_id"] == "IT"
