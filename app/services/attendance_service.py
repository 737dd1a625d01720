# app/services/attendance_service.py

from datetime import date, datetime, timezone
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.attendance import AttendanceRecord
from app.models.enums import AttendanceStatus, IdType, MealType
from app.models.student import Student
from app.models.user import User
from app.services.id_service import allocate_next_id
from app.services.student_service import find_student_by_qr

NEW_RECORD = "new_record"
ALREADY_RECORDED = "already_recorded"


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


async def get_record_for_meal(
    session: AsyncSession,
    student: Student,
    meal_type: MealType,
    record_date: date,
) -> AttendanceRecord | None:
    result = await session.execute(
        select(AttendanceRecord).where(
            (AttendanceRecord.student_internal_id == student.id) &
            (AttendanceRecord.record_date == record_date) &
            (AttendanceRecord.meal_type == meal_type)
        )
    )
    return result.scalar_one_or_none()


# ------------------------------------------------------------
# SCAN
# ------------------------------------------------------------
async def record_scan(
    session: AsyncSession,
    qr_code_data: str,
    meal_type: MealType,
    scanner: Optional[User] = None,
) -> tuple[str, Student, AttendanceRecord]:
    """
    Marks the student present for ``meal_type`` today.
    Returns (NEW_RECORD | ALREADY_RECORDED, student, record).
    Raises LookupError when no student matches the QR payload.
    """
    student = await find_student_by_qr(session, qr_code_data)
    if not student:
        raise LookupError(f"Student with QR data '{qr_code_data}' not found.")

    record_date = today_utc()
    existing = await get_record_for_meal(session, student, meal_type, record_date)
    if existing:
        return ALREADY_RECORDED, student, existing

    attendance_id = await allocate_next_id(session, IdType.ATTENDANCE)
    record = AttendanceRecord(
        attendance_id=attendance_id,
        student_internal_id=student.id,
        meal_type=meal_type,
        status=AttendanceStatus.PRESENT,
        record_date=record_date,
        scanned_at=datetime.now(timezone.utc),
        scanned_by_id=scanner.id if scanner else None,
    )
    session.add(record)

    try:
        await session.commit()
        await session.refresh(record)
        return NEW_RECORD, student, record

    except IntegrityError:
        # Two scanners raced on the same student and meal
        await session.rollback()
        logger.info(f"Concurrent scan for {student.student_id}; {attendance_id} left unused")
        existing = await get_record_for_meal(session, student, meal_type, record_date)
        if existing is None:
            raise
        return ALREADY_RECORDED, student, existing


# ------------------------------------------------------------
# LIST WITH FILTERS
# ------------------------------------------------------------
async def list_attendance(
    session: AsyncSession,
    student_id: Optional[str] = None,
    class_grade: Optional[str] = None,
    meal_type: Optional[MealType] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> list[tuple[AttendanceRecord, Student]]:
    query = (
        select(AttendanceRecord, Student)
        .join(Student, Student.id == AttendanceRecord.student_internal_id)
        .order_by(AttendanceRecord.record_date.desc(), AttendanceRecord.scanned_at.desc())
    )

    if student_id:
        query = query.where(Student.student_id == student_id)
    if class_grade:
        query = query.where(Student.class_grade == class_grade)
    if meal_type:
        query = query.where(AttendanceRecord.meal_type == meal_type)
    if from_date:
        query = query.where(AttendanceRecord.record_date >= from_date)
    if to_date:
        query = query.where(AttendanceRecord.record_date <= to_date)

    result = await session.execute(query)
    return [(record, student) for record, student in result.all()]


async def get_record(session: AsyncSession, record_id) -> AttendanceRecord | None:
    return await session.get(AttendanceRecord, record_id)


async def delete_record(session: AsyncSession, record: AttendanceRecord) -> None:
    await session.delete(record)
    await session.commit()
