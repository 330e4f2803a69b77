# app/api/endpoints/events.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import (
    client_ip,
    get_current_user,
    get_db_session,
    get_realtime,
    is_admin,
    require_head_or_admin,
)
from app.models.event import Event, EventStatus
from app.models.notification import Notification
from app.models.user import User
from app.realtime.server import RealtimeServer
from app.schemas.event import EventCreate, EventRead, EventStatusUpdate, EventUpdate
from app.services.activity_service import log_activity
from app.services.notification_service import (
    create_notifications,
    notify_tagged_departments,
    push_notifications,
)
from app.services.permission_service import get_department_permissions

router = APIRouter(prefix="/api/events", tags=["Events"])

EVENT_STATUS_UPDATED = "event-status-updated"


async def _get_or_404(session: AsyncSession, event_id: UUID) -> Event:
    event = await session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _ensure_owner(event: Event, user: User) -> None:
    if not is_admin(user) and event.created_by != user.id:
        raise HTTPException(status_code=403, detail="Only the creator or an admin can modify this event")


async def _visible_events(session: AsyncSession, user: User, events: List[Event]) -> List[Event]:
    """
    Admins and departments with ``allEvents`` see everything. Others see
    their own department's events, their own events, and (with
    ``taggedDepartments``) events their department was tagged in.
    """
    if is_admin(user):
        return events

    if not user.department:
        return [e for e in events if e.created_by == user.id]

    flags = (await get_department_permissions(session, user.department)).permissions
    if flags.allEvents:
        return events

    return [
        e for e in events
        if e.created_by == user.id
        or e.requestor_department == user.department
        or (flags.taggedDepartments and user.department in (e.tagged_departments or []))
    ]


# ----------------------------------------------------------
# LIST
# ----------------------------------------------------------
@router.get("")
async def list_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    department: Optional[str] = Query(None, description="Requestor department"),
    start: Optional[datetime] = Query(None, description="Events ending after this time"),
    end: Optional[datetime] = Query(None, description="Events starting before this time"),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    query = select(Event).order_by(Event.start_at)
    if status_filter:
        query = query.where(Event.status == status_filter)
    if department:
        query = query.where(Event.requestor_department == department)
    if start:
        query = query.where(Event.end_at >= start.replace(tzinfo=None))
    if end:
        query = query.where(Event.start_at <= end.replace(tzinfo=None))

    result = await session.execute(query)
    events = await _visible_events(session, current_user, list(result.scalars().all()))
    return {"success": True, "data": [EventRead.model_validate(e) for e in events]}


@router.get("/my")
async def list_my_events(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    query = select(Event).order_by(Event.start_at)
    if current_user.department:
        query = query.where(
            or_(Event.created_by == current_user.id, Event.requestor_department == current_user.department)
        )
    else:
        query = query.where(Event.created_by == current_user.id)

    result = await session.execute(query)
    return {"success": True, "data": [EventRead.model_validate(e) for e in result.scalars().all()]}


@router.get("/{event_id}")
async def get_event(
    event_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    event = await _get_or_404(session, event_id)
    return {"success": True, "data": EventRead.model_validate(event)}


# ----------------------------------------------------------
# CREATE (tagged departments are notified)
# ----------------------------------------------------------
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    realtime: RealtimeServer = Depends(get_realtime),
    current_user: User = Depends(get_current_user),
):
    event = Event(
        **data.model_dump(exclude={"requestor_department"}),
        requestor_department=data.requestor_department or current_user.department,
        created_by=current_user.id,
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)

    await notify_tagged_departments(session, realtime, event, exclude_user_id=current_user.id)

    background_tasks.add_task(
        log_activity,
        action="EVENT_CREATED",
        user_id=current_user.id,
        resource_type="Event",
        resource_id=str(event.id),
        details={"title": event.title},
        ip_address=client_ip(request),
    )

    return {"success": True, "message": "Event created successfully", "data": EventRead.model_validate(event)}


# ----------------------------------------------------------
# UPDATE
# ----------------------------------------------------------
@router.put("/{event_id}")
async def update_event(
    event_id: UUID,
    data: EventUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    event = await _get_or_404(session, event_id)
    _ensure_owner(event, current_user)

    updates = data.model_dump(exclude_unset=True)
    for key, value in updates.items():
        setattr(event, key, value)

    if event.end_at < event.start_at:
        raise HTTPException(status_code=400, detail="end_at must not be before start_at")

    event.updated_at = datetime.utcnow()
    session.add(event)
    await session.commit()
    await session.refresh(event)

    background_tasks.add_task(
        log_activity,
        action="EVENT_UPDATED",
        user_id=current_user.id,
        resource_type="Event",
        resource_id=str(event.id),
        details={"fields": sorted(updates)},
        ip_address=client_ip(request),
    )

    return {"success": True, "message": "Event updated successfully", "data": EventRead.model_validate(event)}


# ----------------------------------------------------------
# STATUS CHANGE (approve / reject / cancel); creator is notified
# ----------------------------------------------------------
@router.patch("/{event_id}/status")
async def update_event_status(
    event_id: UUID,
    data: EventStatusUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    realtime: RealtimeServer = Depends(get_realtime),
    current_user: User = Depends(require_head_or_admin),
):
    event = await _get_or_404(session, event_id)
    previous = event.status

    event.status = data.status
    event.updated_at = datetime.utcnow()
    session.add(event)
    await session.commit()
    await session.refresh(event)

    if event.created_by and event.created_by != current_user.id:
        message = f"'{event.title}' is now {event.status.value}."
        if data.remarks:
            message += f" Remarks: {data.remarks}"
        notifications = await create_notifications(
            session,
            [event.created_by],
            title="Event status updated",
            message=message,
            type="event_status",
            related_event_id=event.id,
        )
        await push_notifications(realtime, notifications)
        await realtime.notify_user(
            event.created_by, EVENT_STATUS_UPDATED, jsonable_encoder(EventRead.model_validate(event))
        )

    background_tasks.add_task(
        log_activity,
        action="EVENT_STATUS_CHANGED",
        user_id=current_user.id,
        resource_type="Event",
        resource_id=str(event.id),
        details={"from": previous.value if previous else None, "to": event.status.value, "remarks": data.remarks},
        ip_address=client_ip(request),
    )

    return {"success": True, "message": "Event status updated", "data": EventRead.model_validate(event)}


# ----------------------------------------------------------
# DELETE
# ----------------------------------------------------------
@router.delete("/{event_id}")
async def delete_event(
    event_id: UUID,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    event = await _get_or_404(session, event_id)
    _ensure_owner(event, current_user)

    # Notifications point at the event; drop them first
    await session.execute(delete(Notification).where(Notification.related_event_id == event.id))
    await session.delete(event)
    await session.commit()

    background_tasks.add_task(
        log_activity,
        action="EVENT_DELETED",
        user_id=current_user.id,
        resource_type="Event",
        resource_id=str(event_id),
        details={"title": event.title},
        ip_address=client_ip(request),
    )

    return {"success": True, "message": "Event deleted successfully"}
