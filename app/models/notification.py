# app/models/notification.py

from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID, uuid4
from datetime import datetime


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)

    title: str
    message: str
    type: str = Field(default="info")  # e.g. "event_tagged", "event_status", "info"

    related_event_id: Optional[UUID] = Field(default=None, foreign_key="events.id")

    is_read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
