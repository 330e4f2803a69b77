# app/models/availability.py

import datetime as dt
from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID, uuid4


class ResourceAvailability(SQLModel, table=True):
    __tablename__ = "resource_availability"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    department: str = Field(index=True)
    resource_name: str
    date: dt.date = Field(index=True)
    quantity: int = Field(default=1)
    is_available: bool = Field(default=True)
    notes: Optional[str] = None

    created_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)


class LocationAvailability(SQLModel, table=True):
    __tablename__ = "location_availability"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    location_name: str = Field(index=True)
    date: dt.date = Field(index=True)

    # Both empty means the whole day
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None

    is_available: bool = Field(default=True)
    notes: Optional[str] = None

    created_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
