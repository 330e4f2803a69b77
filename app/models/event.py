# app/models/event.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, Text
from sqlalchemy import Enum as SAEnum
from typing import Optional, List, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime
from enum import Enum


class EventStatus(str, Enum):
    Submitted = "submitted"
    Approved = "approved"
    Rejected = "rejected"
    Cancelled = "cancelled"
    Completed = "completed"


class Event(SQLModel, table=True):
    __tablename__ = "events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    title: str = Field(nullable=False)
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    location: Optional[str] = None

    start_at: datetime = Field(index=True)
    end_at: datetime = Field(index=True)

    requestor_department: Optional[str] = Field(default=None, index=True)

    # Departments asked to support the event, e.g. ["IT", "Security"]
    tagged_departments: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Per-department requirement notes, e.g. {"IT": ["projector", "mic"]}
    requirements: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    status: EventStatus = Field(
        default=EventStatus.Submitted,
        sa_column=Column(SAEnum(EventStatus, name="event_status"), nullable=False)
    )

    created_by: Optional[UUID] = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
