from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Integer, String, Text
from datetime import datetime
from typing import Optional


class Department(SQLModel, table=True):
    __tablename__ = "departments"

    # Primary Key must be ONLY inside sa_column
    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    name: str = Field(
        sa_column=Column(String(128), nullable=False, unique=True)
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
