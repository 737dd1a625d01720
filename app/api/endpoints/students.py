# app/api/endpoints/students.py

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session
from app.core.permissions import can_view_record, filter_visible_records
from app.core.rbac import RequireCapability
from app.models.enums import Capability
from app.models.student import Student
from app.models.user import User
from app.schemas.student import StudentCreate, StudentRead, StudentUpdate
from app.services.activity_service import log_activity
from app.services.student_service import (
    create_student,
    delete_student,
    get_student_by_id,
    get_student_by_public_id,
    list_students,
    update_student,
)

router = APIRouter(
    prefix="/api/students",
    tags=["Students"]
)


def _owner(student: Student):
    return student.created_by_id


async def _get_visible_student(session: AsyncSession, actor: User, student_id: UUID) -> Student:
    student = await get_student_by_id(session, student_id)
    if not student or not can_view_record(actor, student, _owner):
        raise HTTPException(status_code=404, detail="Student not found")
    return student


# ------------------------------------------------------------
# LIST (optionally look up one public ID)
# ------------------------------------------------------------
@router.get("/", response_model=List[StudentRead])
async def list_all_students(
    student_id: Optional[str] = Query(None, description="Public ID, e.g. ADERA/STU/2024/00001"),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ReadStudents)),
):
    if student_id:
        student = await get_student_by_public_id(session, student_id)
        students = [student] if student else []
    else:
        students = await list_students(session)

    return filter_visible_records(current_user, students, _owner)


# ------------------------------------------------------------
# CREATE
# ------------------------------------------------------------
@router.post("/", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
async def register_student(
    data: StudentCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.CreateStudents)),
):
    try:
        student = await create_student(session, data, creator=current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    response = StudentRead.model_validate(student)
    await log_activity(session, "STUDENT_CREATED", user=current_user, details=f"Registered {student.student_id}")
    return response


# ------------------------------------------------------------
# SINGLE STUDENT
# ------------------------------------------------------------
@router.get("/{student_id}", response_model=StudentRead)
async def get_student(
    student_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ReadStudents)),
):
    return await _get_visible_student(session, current_user, student_id)


@router.put("/{student_id}", response_model=StudentRead)
async def edit_student(
    student_id: UUID,
    data: StudentUpdate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.WriteStudents)),
):
    student = await _get_visible_student(session, current_user, student_id)

    try:
        student = await update_student(session, student, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response = StudentRead.model_validate(student)
    await log_activity(session, "STUDENT_UPDATED", user=current_user, details=f"Updated {student.student_id}")
    return response


@router.delete("/{student_id}")
async def remove_student(
    student_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.DeleteStudents)),
):
    student = await _get_visible_student(session, current_user, student_id)

    public_id = student.student_id
    await delete_student(session, student)
    await log_activity(session, "STUDENT_DELETED", user=current_user, details=f"Deleted {public_id}")
    return {"detail": "Student deleted successfully"}
