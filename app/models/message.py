# app/models/message.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text
from uuid import UUID, uuid4
from datetime import datetime


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Usually the event id the chat is attached to, or a direct-chat key
    conversation_id: str = Field(index=True)

    sender_id: UUID = Field(foreign_key="users.id", index=True)
    recipient_id: UUID = Field(foreign_key="users.id", index=True)

    content: str = Field(sa_column=Column(Text, nullable=False))
    is_read: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
