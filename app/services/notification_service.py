# app/services/notification_service.py

from typing import Iterable, List, Optional
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from app.models.event import Event
from app.models.notification import Notification
from app.models.user import User
from app.realtime.server import RealtimeServer
from app.schemas.notification import NotificationRead

NEW_NOTIFICATION_EVENT = "new-notification"


async def create_notifications(
    session: AsyncSession,
    user_ids: Iterable[UUID],
    title: str,
    message: str,
    type: str = "info",
    related_event_id: Optional[UUID] = None,
) -> List[Notification]:
    notifications = [
        Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            related_event_id=related_event_id,
        )
        for user_id in dict.fromkeys(user_ids)
    ]
    if not notifications:
        return []

    session.add_all(notifications)
    await session.commit()
    for n in notifications:
        await session.refresh(n)
    return notifications


async def push_notifications(realtime: RealtimeServer, notifications: Iterable[Notification]) -> None:
    for n in notifications:
        payload = jsonable_encoder(NotificationRead.model_validate(n))
        await realtime.notify_user(n.user_id, NEW_NOTIFICATION_EVENT, payload)


async def notify_tagged_departments(
    session: AsyncSession,
    realtime: RealtimeServer,
    event: Event,
    exclude_user_id: Optional[UUID] = None,
) -> int:
    """
    Notifies every active user of the event's tagged departments.
    Returns the number of notifications created.
    """
    if not event.tagged_departments:
        return 0

    result = await session.execute(
        select(User.id)
        .where(col(User.department).in_(event.tagged_departments))
        .where(User.is_active == True)  # noqa: E712
    )
    user_ids = [uid for uid in result.scalars().all() if uid != exclude_user_id]

    notifications = await create_notifications(
        session,
        user_ids,
        title="You were tagged in an event",
        message=f"Your department was tagged in '{event.title}'.",
        type="event_tagged",
        related_event_id=event.id,
    )
    await push_notifications(realtime, notifications)

    logger.info(f"Event {event.id}: notified {len(notifications)} users in {event.tagged_departments}")
    return len(notifications)
