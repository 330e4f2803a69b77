# app/api/endpoints/department_permissions.py

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Request, status
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import client_ip, get_current_user, get_db_session
from app.models.user import User
from app.services.activity_service import log_activity
from app.services.permission_service import (
    PermissionValidationError,
    get_department_permissions,
    list_department_permissions,
    reset_department_permissions,
    set_department_permissions,
)

router = APIRouter(prefix="/api/department-permissions", tags=["Department Permissions"])


def _extract_permissions(body: Any) -> Any:
    # Clients send {"permissions": {...}}; a bare flag object is accepted too
    if isinstance(body, dict) and "permissions" in body:
        return body["permissions"]
    return body


# -------------------------------------------------------------------
# Get permissions for one department (defaults if none stored)
# -------------------------------------------------------------------
@router.get("/{department}")
async def get_permissions(
    department: str,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    try:
        permissions = await get_department_permissions(session, department)
    except SQLAlchemyError:
        logger.exception(f"Error fetching department permissions for {department}")
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch department permissions")

    return {"success": True, "data": permissions}


# -------------------------------------------------------------------
# Get all department permissions (sorted by department)
# -------------------------------------------------------------------
@router.get("")
async def get_all_permissions(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    try:
        permissions = await list_department_permissions(session)
    except SQLAlchemyError:
        logger.exception("Error fetching all department permissions")
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch department permissions")

    return {"success": True, "data": permissions}


# -------------------------------------------------------------------
# Update permissions for a department (upsert)
# -------------------------------------------------------------------
@router.put("/{department}")
async def update_permissions(
    department: str,
    request: Request,
    background_tasks: BackgroundTasks,
    body: Any = Body(None),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    try:
        permissions = await set_department_permissions(
            session, department, _extract_permissions(body), current_user.id
        )
    except PermissionValidationError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    except SQLAlchemyError:
        logger.exception(f"Error updating department permissions for {department}")
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update department permissions")

    background_tasks.add_task(
        log_activity,
        action="PERMISSIONS_UPDATED",
        user_id=current_user.id,
        resource_type="DepartmentPermissions",
        resource_id=department,
        details=permissions.permissions.model_dump(),
        ip_address=client_ip(request),
    )

    return {
        "success": True,
        "message": "Department permissions updated successfully",
        "data": permissions,
    }


# -------------------------------------------------------------------
# Reset a department to defaults (every flag enabled)
# -------------------------------------------------------------------
@router.delete("/{department}")
async def reset_permissions(
    department: str,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    try:
        permissions = await reset_department_permissions(session, department, current_user.id)
    except SQLAlchemyError:
        logger.exception(f"Error resetting department permissions for {department}")
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to reset department permissions")

    background_tasks.add_task(
        log_activity,
        action="PERMISSIONS_RESET",
        user_id=current_user.id,
        resource_type="DepartmentPermissions",
        resource_id=department,
        ip_address=client_ip(request),
    )

    return {
        "success": True,
        "message": "Department permissions reset to defaults",
        "data": permissions,
    }
