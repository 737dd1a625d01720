# app/api/endpoints/metrics.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func
from sqlmodel import select
import psutil
import time
from loguru import logger

from app.api.deps import get_db_session
from app.core.database import test_connection
from app.core.rbac import RequireCapability
from app.models.attendance import AttendanceRecord
from app.models.department import Department
from app.models.enums import Capability, MealType
from app.models.student import Student
from app.models.user import User
from app.services.attendance_service import today_utc

router = APIRouter(
    prefix="/api/metrics",
    tags=["System & Metrics"]
)

# Uptime is measured from module import
START_TIME = time.time()


# ===================================================================
# 1. SYSTEM HEALTH (public)
# ===================================================================
@router.get("/health")
async def system_health():
    uptime_seconds = int(time.time() - START_TIME)

    db_status = "Disconnected"
    db_start = time.time()
    db_latency = 0.0
    try:
        await test_connection()
        db_status = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except Exception:
        logger.exception("Health check: database unreachable")
        db_status = "Error"

    try:
        disk_usage = psutil.disk_usage('/').percent
    except OSError:
        disk_usage = 0

    return {
        "status": "Online",
        "uptime_seconds": uptime_seconds,
        "database": db_status,
        "db_latency": db_latency,
        "cpu": psutil.cpu_percent(interval=None),
        "ram": psutil.virtual_memory().percent,
        "disk": disk_usage,
    }


# ===================================================================
# 2. ADMIN DASHBOARD STATS
# ===================================================================
async def _count(session: AsyncSession, column, *conditions) -> int:
    query = select(func.count(column))
    for condition in conditions:
        query = query.where(condition)
    result = await session.execute(query)
    return result.scalar_one()


@router.get("/dashboard")
async def get_dashboard_stats(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(RequireCapability(Capability.ReadDashboard)),
):
    today = today_utc()

    meal_query = (
        select(AttendanceRecord.meal_type, func.count(AttendanceRecord.id))
        .where(AttendanceRecord.record_date == today)
        .group_by(AttendanceRecord.meal_type)
    )
    meal_res = await session.execute(meal_query)
    meal_counts = {meal.value: 0 for meal in MealType}
    for meal_type, count in meal_res.all():
        meal_counts[MealType(meal_type).value] = count

    return {
        "total_students": await _count(session, Student.id),
        "total_users": await _count(session, User.id),
        "total_departments": await _count(session, Department.id),
        "today": today.isoformat(),
        "today_attendance": meal_counts,
        "today_total": sum(meal_counts.values()),
    }
