import pytest
from sqlmodel import select

from app.models.login_log import LoginLog
from app.models.user import UserRole


@pytest.mark.asyncio
async def test_login_returns_token_and_logs_attempt(client, session, make_user):
    await make_user(email="staff@example.com", password="secret123", department="IT")

    res = await client.post(
        "/api/users/login",
        json={"email": "Staff@Example.com", "password": "secret123"},
        headers={"User-Agent": "pytest"},
    )
    assert res.status_code == 200

    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "staff@example.com"
    assert "password_hash" not in body["user"]

    me = await client.get("/api/users/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["department"] == "IT"

    logs = (await session.execute(select(LoginLog))).scalars().all()
    assert [(log.status, log.user_agent) for log in logs] == [("success", "pytest")]


@pytest.mark.asyncio
async def test_failed_login_is_logged(client, session, make_user):
    await make_user(email="staff@example.com", password="secret123")

    res = await client.post("/api/users/login", json={"email": "staff@example.com", "password": "nope"})
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Invalid credentials"}

    log = (await session.execute(select(LoginLog))).scalar_one()
    assert log.status == "failed"
    assert log.user_id is None


@pytest.mark.asyncio
async def test_inactive_user_cannot_login(client, admin, make_user, auth_headers):
    user = await make_user(email="gone@example.com", password="secret123")
    res = await client.put(f"/api/users/{user.id}", json={"is_active": False}, headers=auth_headers(admin))
    assert res.status_code == 200

    res = await client.post("/api/users/login", json={"email": "gone@example.com", "password": "secret123"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_missing_or_bad_token(client):
    res = await client.get("/api/users/me")
    assert res.status_code == 401
    assert res.json()["message"] == "Access token required"

    res = await client.get("/api/users/me", headers={"Authorization": "Bearer garbage"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_admin_creates_user(client, admin, auth_headers):
    payload = {
        "name": "Head of IT",
        "email": "head.it@example.com",
        "password": "password123",
        "role": "Head",
        "department": "IT",
    }
    res = await client.post("/api/users", json=payload, headers=auth_headers(admin))
    assert res.status_code == 201
    assert res.json()["data"]["role"] == "Head"

    res = await client.post("/api/users", json=payload, headers=auth_headers(admin))
    assert res.status_code == 400
    assert res.json()["message"] == "Email already registered"


@pytest.mark.asyncio
async def test_head_requires_department(client, admin, auth_headers):
    payload = {"name": "Head", "email": "head@example.com", "password": "password123", "role": "Head"}
    res = await client.post("/api/users", json=payload, headers=auth_headers(admin))
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_staff_cannot_create_users(client, make_user, auth_headers):
    staff = await make_user()
    res = await client.post(
        "/api/users",
        json={"name": "X", "email": "x@example.com", "password": "password123"},
        headers=auth_headers(staff),
    )
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_user_edits_self_but_not_role(client, make_user, auth_headers):
    staff = await make_user(name="Before")

    res = await client.put(f"/api/users/{staff.id}", json={"name": "After"}, headers=auth_headers(staff))
    assert res.status_code == 200
    assert res.json()["data"]["name"] == "After"

    res = await client.put(
        f"/api/users/{staff.id}", json={"role": UserRole.Admin.value}, headers=auth_headers(staff)
    )
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_list_users_by_department(client, admin, make_user, auth_headers):
    await make_user(department="IT", name="A")
    await make_user(department="Finance", name="B")

    res = await client.get("/api/users", params={"department": "IT"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert [u["name"] for u in res.json()["data"]] == ["A"]


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(client, admin, make_user, auth_headers):
    res = await client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))
    assert res.status_code == 400

    other = await make_user()
    res = await client.delete(f"/api/users/{other.id}", headers=auth_headers(admin))
    assert res.status_code == 200

    res = await client.get(f"/api/users/{other.id}", headers=auth_headers(admin))
    assert res.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "email", "role", "is_active"])
async def test_update_rejects_null_for_required_fields(client, admin, make_user, auth_headers, field):
    staff = await make_user(department="IT")

    res = await client.put(f"/api/users/{staff.id}", json={field: None}, headers=auth_headers(admin))
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid request data"

    res = await client.put(f"/api/users/{staff.id}", json={"department": None}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["data"]["department"] is None
