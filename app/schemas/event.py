# app/schemas/event.py

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from uuid import UUID
from pydantic import BaseModel, field_validator, model_validator

from app.models.event import EventStatus
from app.schemas.common import not_null


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Columns are stored as naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ============================================================
# CREATE
# ============================================================
class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_at: datetime
    end_at: datetime
    requestor_department: Optional[str] = None
    tagged_departments: List[str] = []
    requirements: Dict[str, Any] = {}

    @field_validator("start_at", "end_at")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_at < self.start_at:
            raise ValueError("end_at must not be before start_at")
        return self


# ============================================================
# UPDATE (all optional)
# ============================================================
class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    tagged_departments: Optional[List[str]] = None
    requirements: Optional[Dict[str, Any]] = None

    @field_validator("title", "start_at", "end_at", "tagged_departments", "requirements", mode="before")
    @classmethod
    def reject_null(cls, value):
        return not_null(value)

    @field_validator("start_at", "end_at")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)


class EventStatusUpdate(BaseModel):
    status: EventStatus
    remarks: Optional[str] = None


# ============================================================
# READ
# ============================================================
class EventRead(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_at: datetime
    end_at: datetime
    requestor_department: Optional[str] = None
    tagged_departments: List[str] = []
    requirements: Dict[str, Any] = {}
    status: EventStatus
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
