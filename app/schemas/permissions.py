# app/schemas/permissions.py

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class PermissionFlags(BaseModel):
    myRequirements: bool = False
    manageLocation: bool = False
    myCalendar: bool = False
    allEvents: bool = False
    taggedDepartments: bool = False


class UpdatedByRead(BaseModel):
    id: UUID
    name: str
    email: str

    class Config:
        from_attributes = True


class DepartmentPermissionsRead(BaseModel):
    department: str
    permissions: PermissionFlags
    updated_by: Optional[UpdatedByRead] = None
    updated_at: Optional[datetime] = None
