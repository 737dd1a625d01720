# app/services/department_service.py

from sqlmodel import select
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import uuid

from app.models.department import Department
from app.models.enums import IdType
from app.models.user import User
from app.services.id_service import allocate_next_id


async def list_departments(session: AsyncSession) -> list[Department]:
    result = await session.execute(select(Department).order_by(Department.name.asc()))
    return result.scalars().all()


async def get_department(session: AsyncSession, department_id) -> Department | None:
    try:
        dept_uuid = uuid.UUID(str(department_id))
    except ValueError:
        return None
    result = await session.execute(select(Department).where(Department.id == dept_uuid))
    return result.scalar_one_or_none()


async def _name_taken(session: AsyncSession, name: str, exclude_id: uuid.UUID | None = None) -> bool:
    query = select(Department.id).where(Department.name == name)
    if exclude_id is not None:
        query = query.where(Department.id != exclude_id)
    result = await session.execute(query)
    return result.first() is not None


async def create_department(session: AsyncSession, name: str) -> Department:
    name = name.strip()
    if not name:
        raise ValueError("Missing required field: name")
    if await _name_taken(session, name):
        raise ValueError("A department with this name already exists.")

    department_id = await allocate_next_id(session, IdType.DEPARTMENT)
    department = Department(department_id=department_id, name=name)
    session.add(department)

    try:
        await session.commit()
        await session.refresh(department)
        return department

    except IntegrityError:
        await session.rollback()
        raise ValueError("A department with this name already exists.")


async def rename_department(session: AsyncSession, department: Department, name: str) -> Department:
    name = name.strip()
    if not name:
        raise ValueError("Missing required field: name")
    if await _name_taken(session, name, exclude_id=department.id):
        raise ValueError("A department with this name already exists.")

    department.name = name
    session.add(department)
    await session.commit()
    await session.refresh(department)
    return department


async def delete_department(session: AsyncSession, department: Department) -> None:
    await session.execute(
        update(User).where(User.department_id == department.id).values(department_id=None)
    )
    await session.delete(department)
    await session.commit()
