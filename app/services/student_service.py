# app/services/student_service.py

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timezone
import uuid

from app.models.attendance import AttendanceRecord
from app.models.enums import IdType
from app.models.student import Student
from app.models.user import User
from app.schemas.student import StudentCreate, StudentUpdate
from app.services.id_service import allocate_next_id


def _as_uuid(value) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


# ------------------------------------------------------------
# CREATE STUDENT
# ------------------------------------------------------------
async def create_student(session: AsyncSession, data: StudentCreate, creator: User) -> Student:
    """The generated student ID doubles as the QR payload."""
    student_id = await allocate_next_id(session, IdType.STUDENT)

    student = Student(
        student_id=student_id,
        name=data.name,
        gender=data.gender,
        class_grade=data.class_grade,
        profile_image_url=data.profile_image_url,
        qr_code_data=student_id,
        created_by_id=creator.id,
    )
    session.add(student)

    try:
        await session.commit()
        await session.refresh(student)
        return student

    except IntegrityError:
        await session.rollback()
        raise ValueError("A student with this ID already exists.")


# ------------------------------------------------------------
# LOOKUPS
# ------------------------------------------------------------
async def get_student_by_id(session: AsyncSession, student_id) -> Student | None:
    student_uuid = _as_uuid(student_id)
    if student_uuid is None:
        return None
    result = await session.execute(select(Student).where(Student.id == student_uuid))
    return result.scalar_one_or_none()


async def get_student_by_public_id(session: AsyncSession, public_id: str) -> Student | None:
    result = await session.execute(select(Student).where(Student.student_id == public_id))
    return result.scalar_one_or_none()


async def find_student_by_qr(session: AsyncSession, qr_code_data: str) -> Student | None:
    """Scanned payload may be the internal id or the stored QR data."""
    conditions = [Student.qr_code_data == qr_code_data]
    student_uuid = _as_uuid(qr_code_data)
    if student_uuid is not None:
        conditions.append(Student.id == student_uuid)

    result = await session.execute(select(Student).where(or_(*conditions)).limit(1))
    return result.scalar_one_or_none()


# ------------------------------------------------------------
# LIST ALL STUDENTS
# ------------------------------------------------------------
async def list_students(session: AsyncSession) -> list[Student]:
    result = await session.execute(select(Student).order_by(Student.created_at.desc()))
    return result.scalars().all()


# ------------------------------------------------------------
# UPDATE / DELETE
# ------------------------------------------------------------
async def update_student(session: AsyncSession, student: Student, data: StudentUpdate) -> Student:
    update_dict = data.model_dump(exclude_unset=True)

    if "name" in update_dict:
        name = (update_dict["name"] or "").strip()
        if not name:
            raise ValueError("Student name cannot be empty")
        update_dict["name"] = name

    for key, value in update_dict.items():
        setattr(student, key, value)
    student.updated_at = datetime.now(timezone.utc)

    try:
        await session.commit()
        await session.refresh(student)
        return student

    except IntegrityError:
        await session.rollback()
        raise ValueError("Failed to update student details")


async def delete_student(session: AsyncSession, student: Student) -> None:
    await session.execute(
        delete(AttendanceRecord).where(AttendanceRecord.student_internal_id == student.id)
    )
    await session.delete(student)
    await session.commit()
