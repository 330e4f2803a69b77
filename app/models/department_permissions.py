# app/models/department_permissions.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, String
from typing import Optional, Dict
from uuid import UUID, uuid4
from datetime import datetime


class DepartmentPermissions(SQLModel, table=True):
    __tablename__ = "department_permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    department: str = Field(
        sa_column=Column(String(128), nullable=False, unique=True, index=True)
    )

    # {"myRequirements": bool, "manageLocation": bool, ...}
    permissions: Dict[str, bool] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    # Bumped when new flags are introduced; older rows are backfilled on read
    schema_version: int = Field(default=1)

    updated_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    updated_at: datetime = Field(default_factory=datetime.utcnow)
