# app/api/endpoints/location_availability.py

import datetime as dt
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import get_current_user, get_db_session
from app.models.availability import LocationAvailability
from app.models.user import User
from app.schemas.availability import (
    LocationAvailabilityCreate,
    LocationAvailabilityRead,
    LocationAvailabilityUpdate,
)

router = APIRouter(prefix="/api/location-availability", tags=["Location Availability"])


def _check_time_range(start: Optional[dt.time], end: Optional[dt.time]) -> None:
    if start and end and end <= start:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")


async def _get_or_404(session: AsyncSession, entry_id: UUID) -> LocationAvailability:
    entry = await session.get(LocationAvailability, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Location availability not found")
    return entry


@router.get("")
async def list_location_availability(
    location: Optional[str] = Query(None, description="Exact location name"),
    date: Optional[dt.date] = Query(None),
    start_date: Optional[dt.date] = Query(None),
    end_date: Optional[dt.date] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    query = select(LocationAvailability).order_by(LocationAvailability.date, LocationAvailability.location_name)
    if location:
        query = query.where(LocationAvailability.location_name == location)
    if date:
        query = query.where(LocationAvailability.date == date)
    if start_date:
        query = query.where(LocationAvailability.date >= start_date)
    if end_date:
        query = query.where(LocationAvailability.date <= end_date)

    result = await session.execute(query)
    return {"success": True, "data": [LocationAvailabilityRead.model_validate(r) for r in result.scalars().all()]}


@router.get("/{entry_id}")
async def get_location_availability(
    entry_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    entry = await _get_or_404(session, entry_id)
    return {"success": True, "data": LocationAvailabilityRead.model_validate(entry)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_location_availability(
    data: LocationAvailabilityCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    _check_time_range(data.start_time, data.end_time)

    entry = LocationAvailability(**data.model_dump(), created_by=current_user.id)
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return {"success": True, "message": "Location availability created", "data": LocationAvailabilityRead.model_validate(entry)}


@router.put("/{entry_id}")
async def update_location_availability(
    entry_id: UUID,
    data: LocationAvailabilityUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    entry = await _get_or_404(session, entry_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(entry, key, value)
    _check_time_range(entry.start_time, entry.end_time)

    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return {"success": True, "message": "Location availability updated", "data": LocationAvailabilityRead.model_validate(entry)}


@router.delete("/{entry_id}")
async def delete_location_availability(
    entry_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    entry = await _get_or_404(session, entry_id)
    await session.delete(entry)
    await session.commit()
    return {"success": True, "message": "Location availability deleted"}
