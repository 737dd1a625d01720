# app/models/attendance.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Date, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy import Enum as SAEnum
from datetime import date, datetime
from typing import Optional
import uuid

from app.models.enums import AttendanceStatus, MealType


class AttendanceRecord(SQLModel, table=True):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("student_internal_id", "record_date", "meal_type", name="uq_attendance_student_day_meal"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    attendance_id: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True)
    )

    student_internal_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    )

    meal_type: MealType = Field(
        sa_column=Column(SAEnum(MealType, name="meal_type"), nullable=False)
    )

    status: AttendanceStatus = Field(
        default=AttendanceStatus.PRESENT,
        sa_column=Column(SAEnum(AttendanceStatus, name="attendance_status"), nullable=False)
    )

    record_date: date = Field(
        sa_column=Column(Date, nullable=False, index=True)
    )

    scanned_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    scanned_by_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    )
