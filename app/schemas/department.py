from pydantic import BaseModel, field_validator
from uuid import UUID
from datetime import datetime


class DepartmentCreate(BaseModel):
    name: str

    @field_validator("name")
    def name_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Missing required field: name")
        return v.strip()


class DepartmentUpdate(DepartmentCreate):
    pass


class DepartmentRead(BaseModel):
    id: UUID
    department_id: str
    name: str
    created_at: datetime

    class Config:
        from_attributes = True
