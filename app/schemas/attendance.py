from pydantic import BaseModel
from typing import Literal, Optional
from uuid import UUID
from datetime import date, datetime

from app.models.enums import AttendanceStatus, MealType
from app.schemas.student import StudentRead


class ScanRequest(BaseModel):
    qr_code_data: str
    meal_type: MealType


class AttendanceRead(BaseModel):
    id: UUID
    attendance_id: str
    student_internal_id: UUID
    meal_type: MealType
    status: AttendanceStatus
    record_date: date
    scanned_at: Optional[datetime] = None
    scanned_by_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class AttendanceWithStudent(AttendanceRead):
    student: StudentRead


class ScanResult(BaseModel):
    message: str
    status: Literal["new_record", "already_recorded"]
    student: StudentRead
    record: AttendanceRead


class AttendanceStatusResponse(BaseModel):
    student: StudentRead
    attendance_record: Optional[AttendanceRead] = None
