from datetime import datetime
from uuid import UUID
from pydantic import BaseModel


class MessageCreate(BaseModel):
    conversation_id: str
    recipient_id: UUID
    content: str


class MessageRead(BaseModel):
    id: UUID
    conversation_id: str
    sender_id: UUID
    recipient_id: UUID
    content: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
