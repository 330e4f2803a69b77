from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator

from app.schemas.common import not_null


class DepartmentCreate(BaseModel):
    name: str
    description: Optional[str] = None


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def reject_null(cls, value):
        return not_null(value)


class DepartmentRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
