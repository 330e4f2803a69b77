# app/services/permission_service.py

"""
Per-department feature flags.

Records are stored one per department. Reads always go through
``apply_permission_defaults`` so rows written before a flag existed come
back with that flag set to ``False``; the stored row is then rewritten at the
current schema version. A department without any row gets synthesized
defaults and nothing is written.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.department_permissions import DepartmentPermissions
from app.models.user import User
from app.schemas.permissions import (
    DepartmentPermissionsRead,
    PermissionFlags,
    UpdatedByRead,
)

# Flags introduced by each schema version. Version 2 added the calendar and
# event-visibility flags.
SCHEMA_FIELDS = {
    1: ("myRequirements", "manageLocation"),
    2: ("myCalendar", "allEvents", "taggedDepartments"),
}
CURRENT_SCHEMA_VERSION = max(SCHEMA_FIELDS)

PERMISSION_FIELDS: Tuple[str, ...] = tuple(
    field for version in sorted(SCHEMA_FIELDS) for field in SCHEMA_FIELDS[version]
)
REQUIRED_FIELDS = ("myRequirements", "manageLocation", "myCalendar")
OPTIONAL_FIELDS = tuple(f for f in PERMISSION_FIELDS if f not in REQUIRED_FIELDS)


class PermissionValidationError(ValueError):
    pass


# ============================================================================
# DEFAULT MERGE
# ============================================================================
def apply_permission_defaults(stored: Optional[Dict[str, Any]]) -> Tuple[Dict[str, bool], List[str]]:
    """
    Returns (merged_flags, backfilled_fields).

    Every known flag is present in the result. Absent or non-boolean stored
    values become ``False`` and are reported as backfilled; unknown keys are
    dropped.
    """
    stored = stored or {}
    merged: Dict[str, bool] = {}
    backfilled: List[str] = []

    for field in PERMISSION_FIELDS:
        value = stored.get(field)
        if isinstance(value, bool):
            merged[field] = value
        else:
            merged[field] = False
            backfilled.append(field)

    return merged, backfilled


def default_permissions(value: bool = False) -> Dict[str, bool]:
    return {field: value for field in PERMISSION_FIELDS}


# ============================================================================
# VALIDATION
# ============================================================================
def validate_permissions(payload: Any) -> Dict[str, bool]:
    if not payload or not isinstance(payload, dict):
        raise PermissionValidationError("Invalid permissions data")

    for field in REQUIRED_FIELDS:
        if not isinstance(payload.get(field), bool):
            raise PermissionValidationError("Permission values must be boolean")

    for field in OPTIONAL_FIELDS:
        value = payload.get(field)
        if value is not None and not isinstance(value, bool):
            raise PermissionValidationError("Permission values must be boolean")

    return {field: bool(payload.get(field) or False) for field in PERMISSION_FIELDS}


# ============================================================================
# HELPERS
# ============================================================================
async def _get_record(session: AsyncSession, department: str) -> DepartmentPermissions | None:
    result = await session.execute(
        select(DepartmentPermissions).where(DepartmentPermissions.department == department)
    )
    return result.scalar_one_or_none()


def _to_read(
    department: str,
    flags: Dict[str, bool],
    record: Optional[DepartmentPermissions] = None,
    updater: Optional[User] = None,
) -> DepartmentPermissionsRead:
    return DepartmentPermissionsRead(
        department=department,
        permissions=PermissionFlags(**flags),
        updated_by=UpdatedByRead.model_validate(updater) if updater else None,
        updated_at=record.updated_at if record else None,
    )


async def _backfill(session: AsyncSession, record: DepartmentPermissions) -> Dict[str, bool]:
    merged, backfilled = apply_permission_defaults(record.permissions)

    if backfilled or record.schema_version < CURRENT_SCHEMA_VERSION:
        # Assign a new dict so the JSON column is flagged dirty
        record.permissions = dict(merged)
        record.schema_version = CURRENT_SCHEMA_VERSION
        session.add(record)
        await session.commit()
        logger.info(
            f"Backfilled permission fields {backfilled} for department '{record.department}'"
        )

    return merged


async def _save(
    session: AsyncSession,
    department: str,
    flags: Dict[str, bool],
    updated_by: Optional[UUID],
) -> DepartmentPermissions:
    record = await _get_record(session, department)
    if record is None:
        record = DepartmentPermissions(department=department)

    record.permissions = dict(flags)
    record.schema_version = CURRENT_SCHEMA_VERSION
    record.updated_by = updated_by
    record.updated_at = datetime.utcnow()
    session.add(record)

    await session.commit()
    await session.refresh(record)
    return record


async def _upsert(
    session: AsyncSession,
    department: str,
    flags: Dict[str, bool],
    updated_by: Optional[UUID],
) -> DepartmentPermissions:
    try:
        return await _save(session, department, flags, updated_by)
    except IntegrityError:
        # A concurrent request inserted the same department first
        await session.rollback()
        return await _save(session, department, flags, updated_by)


async def _updater(session: AsyncSession, user_id: Optional[UUID]) -> User | None:
    if not user_id:
        return None
    return await session.get(User, user_id)


# ============================================================================
# PUBLIC OPERATIONS
# ============================================================================
async def get_department_permissions(session: AsyncSession, department: str) -> DepartmentPermissionsRead:
    record = await _get_record(session, department)

    if record is None:
        return _to_read(department, default_permissions())

    flags = await _backfill(session, record)
    return _to_read(department, flags, record, await _updater(session, record.updated_by))


async def list_department_permissions(session: AsyncSession) -> List[DepartmentPermissionsRead]:
    result = await session.execute(
        select(DepartmentPermissions, User)
        .outerjoin(User, User.id == DepartmentPermissions.updated_by)
        .order_by(DepartmentPermissions.department.asc())
    )
    rows = result.all()

    items = []
    for record, updater in rows:
        flags = await _backfill(session, record)
        items.append(_to_read(record.department, flags, record, updater))
    return items


async def set_department_permissions(
    session: AsyncSession,
    department: str,
    permissions: Any,
    updated_by: Optional[UUID],
) -> DepartmentPermissionsRead:
    flags = validate_permissions(permissions)

    record = await _upsert(session, department, flags, updated_by)
    logger.info(f"✅ Department permissions updated for {department}: {flags}")
    return _to_read(department, flags, record, await _updater(session, updated_by))


async def reset_department_permissions(
    session: AsyncSession,
    department: str,
    updated_by: Optional[UUID],
) -> DepartmentPermissionsRead:
    flags = default_permissions(True)

    record = await _upsert(session, department, flags, updated_by)
    logger.info(f"🔄 Department permissions reset to defaults for {department}")
    return _to_read(department, flags, record, await _updater(session, updated_by))
