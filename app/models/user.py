# app/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Enum as SAEnum
from datetime import datetime
import uuid
from enum import Enum
from typing import Optional

class UserRole(str, Enum):
    Admin = "Admin"
    Head = "Head"      # department head, approves requests for their department
    Staff = "Staff"

class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    name: str = Field(nullable=False)
    email: str = Field(nullable=False, index=True, unique=True)
    password_hash: str = Field(nullable=False)

    role: UserRole = Field(
        default=UserRole.Staff,
        sa_column=Column(SAEnum(UserRole, name="user_role"), nullable=False)
    )

    # Department name, matches Department.name and DepartmentPermissions.department
    department: Optional[str] = Field(default=None, index=True)

    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
