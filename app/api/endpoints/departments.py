# app/api/endpoints/departments.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from app.api.deps import get_db_session
from app.core.rbac import RequireCapability
from app.models.enums import Capability
from app.models.user import User
from app.schemas.department import DepartmentCreate, DepartmentRead, DepartmentUpdate
from app.services.activity_service import log_activity
from app.services.department_service import (
    create_department,
    delete_department,
    get_department,
    list_departments,
    rename_department,
)

router = APIRouter(
    prefix="/api/departments",
    tags=["Departments"]
)


@router.get("/", response_model=List[DepartmentRead])
async def list_all_departments(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(RequireCapability(Capability.ReadDepartments)),
):
    return await list_departments(session)


@router.post("/", response_model=DepartmentRead, status_code=status.HTTP_201_CREATED)
async def add_department(
    data: DepartmentCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.WriteDepartments)),
):
    try:
        department = await create_department(session, data.name)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    response = DepartmentRead.model_validate(department)
    await log_activity(session, "DEPARTMENT_CREATED", user=current_user, details=f"Created {department.department_id}")
    return response


@router.put("/{department_id}", response_model=DepartmentRead)
async def edit_department(
    department_id: UUID,
    data: DepartmentUpdate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.WriteDepartments)),
):
    department = await get_department(session, department_id)
    if not department:
        raise HTTPException(404, "Department not found")

    try:
        department = await rename_department(session, department, data.name)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    response = DepartmentRead.model_validate(department)
    await log_activity(session, "DEPARTMENT_UPDATED", user=current_user, details=f"Renamed {department.department_id}")
    return response


@router.delete("/{department_id}")
async def remove_department(
    department_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.WriteDepartments)),
):
    department = await get_department(session, department_id)
    if not department:
        raise HTTPException(404, "Department not found")

    public_id = department.department_id
    await delete_department(session, department)
    await log_activity(session, "DEPARTMENT_DELETED", user=current_user, details=f"Deleted {public_id}")
    return {"detail": "Department deleted successfully"}
