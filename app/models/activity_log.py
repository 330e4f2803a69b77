# app/models/activity_log.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime

class UserActivityLog(SQLModel, table=True):
    __tablename__ = "user_activity_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: Optional[UUID] = Field(default=None, foreign_key="users.id", index=True)

    # What happened (e.g., "EVENT_CREATED", "PERMISSIONS_UPDATED", "PAGE_VIEW")
    action: str = Field(index=True)

    # What was affected (e.g., "Event", "DepartmentPermissions")
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None

    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    ip_address: Optional[str] = None

    timestamp: datetime = Field(default_factory=datetime.utcnow, index=True)
