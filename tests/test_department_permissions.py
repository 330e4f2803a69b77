import pytest
from sqlmodel import select

from app.models.department_permissions import DepartmentPermissions
from app.services.permission_service import (
    CURRENT_SCHEMA_VERSION,
    PERMISSION_FIELDS,
    PermissionValidationError,
    apply_permission_defaults,
    validate_permissions,
)

ALL_FALSE = {
    "myRequirements": False,
    "manageLocation": False,
    "myCalendar": False,
    "allEvents": False,
    "taggedDepartments": False,
}


# ------------------------------------------------------------------
# Pure helpers
# ------------------------------------------------------------------
def test_defaults_fill_missing_and_non_boolean_values():
    merged, backfilled = apply_permission_defaults(
        {"myRequirements": True, "manageLocation": "yes", "legacyFlag": True}
    )

    assert merged == {**ALL_FALSE, "myRequirements": True}
    assert set(backfilled) == {"manageLocation", "myCalendar", "allEvents", "taggedDepartments"}
    assert "legacyFlag" not in merged


def test_defaults_for_empty_record():
    merged, backfilled = apply_permission_defaults(None)
    assert merged == ALL_FALSE
    assert list(backfilled) == list(PERMISSION_FIELDS)


@pytest.mark.parametrize("payload", [None, {}, [], "flags"])
def test_validate_rejects_missing_payload(payload):
    with pytest.raises(PermissionValidationError, match="Invalid permissions data"):
        validate_permissions(payload)


def test_validate_requires_boolean_core_flags():
    with pytest.raises(PermissionValidationError, match="must be boolean"):
        validate_permissions({"myRequirements": True, "manageLocation": 1, "myCalendar": False})

    with pytest.raises(PermissionValidationError, match="must be boolean"):
        validate_permissions({"myRequirements": True, "manageLocation": False})


def test_validate_optional_flags_default_to_false():
    flags = validate_permissions({"myRequirements": True, "manageLocation": False, "myCalendar": True})
    assert flags == {**ALL_FALSE, "myRequirements": True, "myCalendar": True}

    with pytest.raises(PermissionValidationError):
        validate_permissions(
            {"myRequirements": True, "manageLocation": False, "myCalendar": True, "allEvents": "true"}
        )


# ------------------------------------------------------------------
# HTTP
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_get_unknown_department_returns_defaults_without_writing(client, session, admin, auth_headers):
    res = await client.get("/api/department-permissions/Physics", headers=auth_headers(admin))
    assert res.status_code == 200

    data = res.json()["data"]
    assert data["department"] == "Physics"
    assert data["permissions"] == ALL_FALSE
    assert data["updated_by"] is None

    rows = (await session.execute(select(DepartmentPermissions))).scalars().all()
    assert rows == []


@pytest.mark.asyncio
async def test_put_permissions_upserts_and_reports_updater(client, session, admin, auth_headers):
    body = {"permissions": {"myRequirements": True, "manageLocation": False, "myCalendar": True}}

    res = await client.put("/api/department-permissions/Engineering", json=body, headers=auth_headers(admin))
    assert res.status_code == 200
    payload = res.json()
    assert payload["success"] is True
    assert payload["data"]["permissions"] == {**ALL_FALSE, "myRequirements": True, "myCalendar": True}
    assert payload["data"]["updated_by"]["email"] == "admin@example.com"

    res = await client.get("/api/department-permissions/Engineering", headers=auth_headers(admin))
    expected = {
        "myRequirements": True,
        "manageLocation": False,
        "myCalendar": True,
        "allEvents": False,
        "taggedDepartments": False,
    }
    assert res.json()["data"]["permissions"] == expected
    assert res.json()["data"]["updated_at"] is not None

    record = (
        await session.execute(select(DepartmentPermissions).where(DepartmentPermissions.department == "Engineering"))
    ).scalar_one()
    assert record.permissions == expected
    assert record.schema_version == CURRENT_SCHEMA_VERSION


@pytest.mark.asyncio
async def test_put_accepts_flat_flag_object(client, admin, auth_headers):
    body = {"myRequirements": False, "manageLocation": True, "myCalendar": False, "allEvents": True}
    res = await client.put("/api/department-permissions/Library", json=body, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["data"]["permissions"]["allEvents"] is True


@pytest.mark.asyncio
async def test_put_rejects_invalid_flags(client, admin, auth_headers):
    res = await client.put(
        "/api/department-permissions/Engineering",
        json={"permissions": {"myRequirements": "true", "manageLocation": False, "myCalendar": True}},
        headers=auth_headers(admin),
    )
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Permission values must be boolean"}

    res = await client.put("/api/department-permissions/Engineering", headers=auth_headers(admin))
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid permissions data"


@pytest.mark.asyncio
async def test_read_backfills_old_schema_records(client, session, admin, auth_headers):
    session.add(
        DepartmentPermissions(
            department="Security",
            permissions={"myRequirements": True, "manageLocation": True},
            schema_version=1,
        )
    )
    await session.commit()

    res = await client.get("/api/department-permissions/Security", headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["data"]["permissions"] == {**ALL_FALSE, "myRequirements": True, "manageLocation": True}

    session.expire_all()
    record = (
        await session.execute(select(DepartmentPermissions).where(DepartmentPermissions.department == "Security"))
    ).scalar_one()
    assert record.schema_version == CURRENT_SCHEMA_VERSION
    assert set(record.permissions) == set(PERMISSION_FIELDS)


@pytest.mark.asyncio
async def test_reset_enables_every_flag(client, admin, auth_headers):
    res = await client.delete("/api/department-permissions/Transport", headers=auth_headers(admin))
    assert res.status_code == 200
    assert all(res.json()["data"]["permissions"].values())


@pytest.mark.asyncio
async def test_get_all_sorted_by_department(client, admin, auth_headers):
    body = {"permissions": {"myRequirements": True, "manageLocation": True, "myCalendar": True}}
    for dept in ("Zoology", "Arts", "Medicine"):
        res = await client.put(f"/api/department-permissions/{dept}", json=body, headers=auth_headers(admin))
        assert res.status_code == 200

    res = await client.get("/api/department-permissions", headers=auth_headers(admin))
    assert res.status_code == 200
    data = res.json()["data"]
    assert [d["department"] for d in data] == ["Arts", "Medicine", "Zoology"]
    assert all(d["updated_by"]["name"] == "Admin" for d in data)


@pytest.mark.asyncio
async def test_permissions_require_token(client):
    res = await client.get("/api/department-permissions/Engineering")
    assert res.status_code == 401
    assert res.json()["message"] == "Access token required"
