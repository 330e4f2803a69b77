from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class NotificationCreate(BaseModel):
    user_id: UUID
    title: str
    message: str
    type: str = "info"
    related_event_id: Optional[UUID] = None


class NotificationRead(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    message: str
    type: str
    related_event_id: Optional[UUID] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
