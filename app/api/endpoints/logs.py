# app/api/endpoints/logs.py

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID

from app.api.deps import client_ip, get_current_user, get_db_session, require_admin
from app.models.user import User
from app.models.login_log import LoginLog
from app.models.activity_log import UserActivityLog
from app.schemas.logs import LoginLogRead, UserActivityLogCreate, UserActivityLogRead

login_logs_router = APIRouter(prefix="/api/login-logs", tags=["Login Logs"])
activity_logs_router = APIRouter(prefix="/api/user-activity-logs", tags=["User Activity Logs"])


# -------------------------------------------------------------------
# LOGIN LOGS (Admin sees all, users see their own)
# -------------------------------------------------------------------
@login_logs_router.get("")
async def get_login_logs(
    user_id: Optional[UUID] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status", description="success | failed"),
    since: Optional[datetime] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    query = select(LoginLog).order_by(LoginLog.timestamp.desc()).limit(limit)

    if user_id:
        query = query.where(LoginLog.user_id == user_id)
    if status_filter:
        query = query.where(LoginLog.status == status_filter)
    if since:
        query = query.where(LoginLog.timestamp >= since.replace(tzinfo=None))

    result = await session.execute(query)
    return {"success": True, "data": [LoginLogRead.model_validate(r) for r in result.scalars().all()]}


@login_logs_router.get("/me")
async def get_my_login_logs(
    limit: int = Query(50, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    query = (
        select(LoginLog)
        .where(LoginLog.user_id == current_user.id)
        .order_by(LoginLog.timestamp.desc())
        .limit(limit)
    )
    result = await session.execute(query)
    return {"success": True, "data": [LoginLogRead.model_validate(r) for r in result.scalars().all()]}


@login_logs_router.delete("/{log_id}")
async def delete_login_log(
    log_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    entry = await session.get(LoginLog, log_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Login log not found")
    await session.delete(entry)
    await session.commit()
    return {"success": True, "message": "Login log deleted"}


# -------------------------------------------------------------------
# USER ACTIVITY LOGS
# -------------------------------------------------------------------
@activity_logs_router.get("")
async def get_activity_logs(
    user_id: Optional[UUID] = Query(None),
    action: Optional[str] = Query(None),
    resource_type: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    query = select(UserActivityLog).order_by(UserActivityLog.timestamp.desc()).limit(limit)

    if user_id:
        query = query.where(UserActivityLog.user_id == user_id)
    if action:
        query = query.where(UserActivityLog.action == action)
    if resource_type:
        query = query.where(UserActivityLog.resource_type == resource_type)

    result = await session.execute(query)
    return {"success": True, "data": [UserActivityLogRead.model_validate(r) for r in result.scalars().all()]}


@activity_logs_router.get("/me")
async def get_my_activity_logs(
    limit: int = Query(50, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    query = (
        select(UserActivityLog)
        .where(UserActivityLog.user_id == current_user.id)
        .order_by(UserActivityLog.timestamp.desc())
        .limit(limit)
    )
    result = await session.execute(query)
    return {"success": True, "data": [UserActivityLogRead.model_validate(r) for r in result.scalars().all()]}


# Client-reported actions (page views, exports, ...)
@activity_logs_router.post("", status_code=status.HTTP_201_CREATED)
async def create_activity_log(
    data: UserActivityLogCreate,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    entry = UserActivityLog(
        user_id=current_user.id,
        action=data.action,
        resource_type=data.resource_type,
        resource_id=data.resource_id,
        details=data.details,
        ip_address=client_ip(request),
    )
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return {"success": True, "data": UserActivityLogRead.model_validate(entry)}


@activity_logs_router.delete("/{log_id}")
async def delete_activity_log(
    log_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    entry = await session.get(UserActivityLog, log_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Activity log not found")
    await session.delete(entry)
    await session.commit()
    return {"success": True, "message": "Activity log deleted"}
