# app/schemas/student.py
from pydantic import BaseModel, field_validator
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.models.enums import Gender


# ------------------------------------------------------------
# STUDENT CREATE (ID and QR data are generated)
# ------------------------------------------------------------
class StudentCreate(BaseModel):
    name: str
    gender: Optional[Gender] = None
    class_grade: Optional[str] = None
    profile_image_url: Optional[str] = None

    @field_validator("name")
    def name_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Missing required field: name")
        return v.strip()


# ------------------------------------------------------------
# STUDENT UPDATE
# ------------------------------------------------------------
class StudentUpdate(BaseModel):
    name: Optional[str] = None
    gender: Optional[Gender] = None
    class_grade: Optional[str] = None
    profile_image_url: Optional[str] = None


# ------------------------------------------------------------
# STUDENT READ
# ------------------------------------------------------------
class StudentRead(BaseModel):
    id: UUID
    student_id: str
    name: str
    gender: Optional[Gender] = None
    class_grade: Optional[str] = None
    profile_image_url: Optional[str] = None
    qr_code_data: Optional[str] = None
    created_by_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
