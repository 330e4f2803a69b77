# app/schemas/availability.py

import datetime as dt
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, field_validator

from app.schemas.common import not_null


# ---------------------------------------------------------
# RESOURCE AVAILABILITY
# ---------------------------------------------------------
class ResourceAvailabilityCreate(BaseModel):
    department: str
    resource_name: str
    date: dt.date
    quantity: int = 1
    is_available: bool = True
    notes: Optional[str] = None


class ResourceAvailabilityUpdate(BaseModel):
    resource_name: Optional[str] = None
    date: Optional[dt.date] = None
    quantity: Optional[int] = None
    is_available: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator("resource_name", "date", "quantity", "is_available", mode="before")
    @classmethod
    def reject_null(cls, value):
        return not_null(value)


class ResourceAvailabilityRead(ResourceAvailabilityCreate):
    id: UUID
    created_by: Optional[UUID] = None
    created_at: dt.datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------
# LOCATION AVAILABILITY
# ---------------------------------------------------------
class LocationAvailabilityCreate(BaseModel):
    location_name: str
    date: dt.date
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    is_available: bool = True
    notes: Optional[str] = None


class LocationAvailabilityUpdate(BaseModel):
    location_name: Optional[str] = None
    date: Optional[dt.date] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    is_available: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator("location_name", "date", "is_available", mode="before")
    @classmethod
    def reject_null(cls, value):
        return not_null(value)


class LocationAvailabilityRead(LocationAvailabilityCreate):
    id: UUID
    created_by: Optional[UUID] = None
    created_at: dt.datetime

    class Config:
        from_attributes = True
