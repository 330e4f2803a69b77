# app/api/endpoints/resource_availability.py

import datetime as dt
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import get_current_user, get_db_session
from app.models.availability import ResourceAvailability
from app.models.user import User
from app.schemas.availability import (
    ResourceAvailabilityCreate,
    ResourceAvailabilityRead,
    ResourceAvailabilityUpdate,
)

router = APIRouter(prefix="/api/resource-availability", tags=["Resource Availability"])


async def _get_or_404(session: AsyncSession, entry_id: UUID) -> ResourceAvailability:
    entry = await session.get(ResourceAvailability, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Resource availability not found")
    return entry


@router.get("")
async def list_resource_availability(
    department: Optional[str] = Query(None),
    date: Optional[dt.date] = Query(None),
    start_date: Optional[dt.date] = Query(None),
    end_date: Optional[dt.date] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    query = select(ResourceAvailability).order_by(ResourceAvailability.date, ResourceAvailability.resource_name)
    if department:
        query = query.where(ResourceAvailability.department == department)
    if date:
        query = query.where(ResourceAvailability.date == date)
    if start_date:
        query = query.where(ResourceAvailability.date >= start_date)
    if end_date:
        query = query.where(ResourceAvailability.date <= end_date)

    result = await session.execute(query)
    return {"success": True, "data": [ResourceAvailabilityRead.model_validate(r) for r in result.scalars().all()]}


@router.get("/{entry_id}")
async def get_resource_availability(
    entry_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    entry = await _get_or_404(session, entry_id)
    return {"success": True, "data": ResourceAvailabilityRead.model_validate(entry)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_resource_availability(
    data: ResourceAvailabilityCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    if data.quantity < 0:
        raise HTTPException(status_code=400, detail="Quantity cannot be negative")

    entry = ResourceAvailability(**data.model_dump(), created_by=current_user.id)
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return {"success": True, "message": "Resource availability created", "data": ResourceAvailabilityRead.model_validate(entry)}


@router.put("/{entry_id}")
async def update_resource_availability(
    entry_id: UUID,
    data: ResourceAvailabilityUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    entry = await _get_or_404(session, entry_id)

    updates = data.model_dump(exclude_unset=True)
    if updates.get("quantity") is not None and updates["quantity"] < 0:
        raise HTTPException(status_code=400, detail="Quantity cannot be negative")

    for key, value in updates.items():
        setattr(entry, key, value)

    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return {"success": True, "message": "Resource availability updated", "data": ResourceAvailabilityRead.model_validate(entry)}


@router.delete("/{entry_id}")
async def delete_resource_availability(
    entry_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    entry = await _get_or_404(session, entry_id)
    await session.delete(entry)
    await session.commit()
    return {"success": True, "message": "Resource availability deleted"}
