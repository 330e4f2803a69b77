# app/api/endpoints/notifications.py

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import get_current_user, get_db_session, get_realtime
from app.models.notification import Notification
from app.models.user import User
from app.realtime.server import RealtimeServer
from app.schemas.notification import NotificationCreate, NotificationRead
from app.services.notification_service import create_notifications, push_notifications

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


async def _get_own_or_404(session: AsyncSession, notification_id: UUID, user: User) -> Notification:
    notification = await session.get(Notification, notification_id)
    if not notification or notification.user_id != user.id:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("")
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    query = (
        select(Notification)
        .where(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712

    result = await session.execute(query)
    return {"success": True, "data": [NotificationRead.model_validate(n) for n in result.scalars().all()]}


@router.get("/unread-count")
async def unread_count(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    result = await session.execute(
        select(func.count(Notification.id))
        .where(Notification.user_id == current_user.id)
        .where(Notification.is_read == False)  # noqa: E712
    )
    return {"success": True, "data": {"count": result.scalar_one()}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_notification(
    data: NotificationCreate,
    session: AsyncSession = Depends(get_db_session),
    realtime: RealtimeServer = Depends(get_realtime),
    _: User = Depends(get_current_user),
):
    if not await session.get(User, data.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    notifications = await create_notifications(
        session,
        [data.user_id],
        title=data.title,
        message=data.message,
        type=data.type,
        related_event_id=data.related_event_id,
    )
    await push_notifications(realtime, notifications)

    return {"success": True, "message": "Notification created", "data": NotificationRead.model_validate(notifications[0])}


@router.patch("/read-all")
async def mark_all_read(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == current_user.id)
        .where(Notification.is_read == False)  # noqa: E712
        .values(is_read=True)
    )
    await session.commit()
    return {"success": True, "data": {"updated": result.rowcount or 0}}


@router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    notification = await _get_own_or_404(session, notification_id, current_user)
    notification.is_read = True
    session.add(notification)
    await session.commit()
    await session.refresh(notification)
    return {"success": True, "data": NotificationRead.model_validate(notification)}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    notification = await _get_own_or_404(session, notification_id, current_user)
    await session.delete(notification)
    await session.commit()
    return {"success": True, "message": "Notification deleted"}
