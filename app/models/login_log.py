# app/models/login_log.py

from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID, uuid4
from datetime import datetime


class LoginLog(SQLModel, table=True):
    __tablename__ = "login_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Null for attempts against an unknown email
    user_id: Optional[UUID] = Field(default=None, foreign_key="users.id")
    email: str = Field(index=True)

    status: str = Field(default="success")  # "success" | "failed"

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    timestamp: datetime = Field(default_factory=datetime.utcnow, index=True)
