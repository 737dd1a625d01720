# app/api/endpoints/attendance.py

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.core.permissions import filter_visible_records
from app.core.rbac import RequireCapability, require_super_admin
from app.models.enums import Capability, MealType
from app.models.user import User
from app.schemas.attendance import (
    AttendanceRead,
    AttendanceStatusResponse,
    AttendanceWithStudent,
    ScanRequest,
    ScanResult,
)
from app.schemas.student import StudentRead
from app.services.activity_service import log_activity
from app.services.attendance_service import (
    NEW_RECORD,
    delete_record,
    get_record,
    get_record_for_meal,
    list_attendance,
    record_scan,
    today_utc,
)
from app.services.student_service import get_student_by_public_id

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


# -------------------------------------------------------------------
# SCAN A QR CODE
# -------------------------------------------------------------------
@router.post("/scan", response_model=ScanResult)
async def scan(
    payload: ScanRequest,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ScanId)),
):
    try:
        outcome, student, record = await record_scan(
            session, payload.qr_code_data.strip(), payload.meal_type, scanner=current_user
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))

    meal = payload.meal_type.value.lower()
    if outcome == NEW_RECORD:
        response.status_code = status.HTTP_201_CREATED
        message = "Attendance recorded successfully"
    else:
        message = f"{student.name} has already been recorded for {meal} today."

    result = ScanResult(
        message=message,
        status=outcome,
        student=StudentRead.model_validate(student),
        record=AttendanceRead.model_validate(record),
    )

    if outcome == NEW_RECORD:
        await log_activity(
            session, "ATTENDANCE_SCANNED", user=current_user,
            details=f"{student.student_id} {payload.meal_type.value} ({record.attendance_id})",
        )
    return result


# -------------------------------------------------------------------
# TODAY'S STATUS FOR ONE STUDENT AND MEAL
# -------------------------------------------------------------------
@router.get("/status", response_model=AttendanceStatusResponse)
async def attendance_status(
    student_id: str = Query(..., description="Public student ID"),
    meal_type: MealType = Query(...),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(RequireCapability(Capability.ScanId)),
):
    student = await get_student_by_public_id(session, student_id)
    if not student:
        raise HTTPException(status_code=404, detail=f"Student with ID '{student_id}' not found.")

    record = await get_record_for_meal(session, student, meal_type, today_utc())
    return AttendanceStatusResponse(
        student=StudentRead.model_validate(student),
        attendance_record=AttendanceRead.model_validate(record) if record else None,
    )


# -------------------------------------------------------------------
# LIST RECORDS
# -------------------------------------------------------------------
@router.get("/", response_model=List[AttendanceWithStudent])
async def list_records(
    student_id: Optional[str] = Query(None),
    class_grade: Optional[str] = Query(None),
    meal_type: Optional[MealType] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ReadAttendance)),
):
    rows = await list_attendance(
        session,
        student_id=student_id,
        class_grade=class_grade,
        meal_type=meal_type,
        from_date=from_date,
        to_date=to_date,
    )
    rows = filter_visible_records(current_user, rows, lambda row: row[0].scanned_by_id)

    return [
        AttendanceWithStudent(
            **AttendanceRead.model_validate(record).model_dump(),
            student=StudentRead.model_validate(student),
        )
        for record, student in rows
    ]


# -------------------------------------------------------------------
# DELETE A MISTAKEN SCAN
# -------------------------------------------------------------------
@router.delete("/{record_id}")
async def remove_record(
    record_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_super_admin),
):
    record = await get_record(session, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Attendance record not found")

    public_id = record.attendance_id
    await delete_record(session, record)
    await log_activity(session, "ATTENDANCE_DELETED", user=current_user, details=f"Deleted {public_id}")
    return {"detail": "Attendance record deleted successfully"}
