# app/api/endpoints/messages.py

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import get_current_user, get_db_session, get_realtime
from app.models.message import Message
from app.models.user import User
from app.realtime.server import RealtimeServer
from app.schemas.message import MessageCreate, MessageRead

router = APIRouter(prefix="/api/messages", tags=["Messages"])

NEW_MESSAGE_EVENT = "new-message"


# ----------------------------------------------------------
# CONVERSATION HISTORY (only messages the caller took part in)
# ----------------------------------------------------------
@router.get("/conversations/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    query = (
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .where(or_(Message.sender_id == current_user.id, Message.recipient_id == current_user.id))
        .order_by(Message.created_at.desc())
        .limit(limit)
    )
    result = await session.execute(query)
    # Newest page, returned oldest first for rendering
    messages = list(reversed(result.scalars().all()))
    return {"success": True, "data": [MessageRead.model_validate(m) for m in messages]}


@router.get("/unread-count")
async def unread_count(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    result = await session.execute(
        select(func.count(Message.id))
        .where(Message.recipient_id == current_user.id)
        .where(Message.is_read == False)  # noqa: E712
    )
    return {"success": True, "data": {"count": result.scalar_one()}}


# ----------------------------------------------------------
# SEND (pushed to the recipient and the conversation room)
# ----------------------------------------------------------
@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(
    data: MessageCreate,
    session: AsyncSession = Depends(get_db_session),
    realtime: RealtimeServer = Depends(get_realtime),
    current_user: User = Depends(get_current_user),
):
    content = data.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message content is required")

    recipient = await session.get(User, data.recipient_id)
    if not recipient:
        raise HTTPException(status_code=404, detail="Recipient not found")

    message = Message(
        conversation_id=data.conversation_id,
        sender_id=current_user.id,
        recipient_id=recipient.id,
        content=content,
    )
    session.add(message)
    await session.commit()
    await session.refresh(message)

    payload = jsonable_encoder(MessageRead.model_validate(message))
    await realtime.notify_user(recipient.id, NEW_MESSAGE_EVENT, payload)
    await realtime.notify_conversation(message.conversation_id, NEW_MESSAGE_EVENT, payload)

    return {"success": True, "message": "Message sent", "data": MessageRead.model_validate(message)}


@router.patch("/{message_id}/read")
async def mark_read(
    message_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    message = await session.get(Message, message_id)
    if not message or message.recipient_id != current_user.id:
        raise HTTPException(status_code=404, detail="Message not found")

    message.is_read = True
    session.add(message)
    await session.commit()
    await session.refresh(message)
    return {"success": True, "data": MessageRead.model_validate(message)}


@router.delete("/{message_id}")
async def delete_message(
    message_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    message = await session.get(Message, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    if message.sender_id != current_user.id:
        raise HTTPException(status_code=403, detail="Only the sender can delete this message")

    await session.delete(message)
    await session.commit()
    return {"success": True, "message": "Message deleted"}
