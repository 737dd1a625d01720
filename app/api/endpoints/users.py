# app/api/endpoints/users.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from app.api.deps import get_db_session, get_current_user
from app.core.exceptions import Unauthorized
from app.core.permissions import (
    can_view_record,
    check_capability_grants,
    check_role_assignment,
    filter_visible_records,
    normalize_role,
)
from app.core.rbac import RequireCapability, AllowRoles
from app.models.enums import Capability
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserRead, UserUpdate, CAPABILITY_FIELDS
from app.services.activity_service import log_activity
from app.services.auth_service import (
    create_user,
    delete_user,
    get_user_by_id,
    list_users,
    reset_password,
    update_user,
)

router = APIRouter(prefix="/api/users", tags=["Users"])


def _owner(user: User):
    return user.created_by_id


def _self(user: User):
    return user.id


async def _get_visible_user(session: AsyncSession, actor: User, user_id: UUID) -> User:
    user = await get_user_by_id(session, user_id)
    # Invisible records answer 404 so their existence is not revealed
    if not user or not can_view_record(actor, user, _owner, self_of=_self):
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _requested_grants(data, fields=CAPABILITY_FIELDS) -> dict[str, bool]:
    payload = data.model_dump(exclude_unset=True)
    return {field: payload[field] for field in fields if payload.get(field) is not None}


# -------------------------------------------------------------------
# List users visible to the caller
# -------------------------------------------------------------------
@router.get("/", response_model=List[UserRead])
async def list_all_users(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ReadUsers)),
):
    users = await list_users(session)
    return filter_visible_records(current_user, users, _owner, self_of=_self)


# -------------------------------------------------------------------
# Create user
# -------------------------------------------------------------------
@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_new_user(
    data: UserCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.WriteUsers)),
):
    check_role_assignment(current_user, data.role)
    check_capability_grants(current_user, _requested_grants(data))

    try:
        user = await create_user(session, data, creator=current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    response = UserRead.model_validate(user)
    await log_activity(session, "USER_CREATED", user=current_user, details=f"Created {user.user_id} ({user.role.value})")
    return response


# -------------------------------------------------------------------
# Single user
# -------------------------------------------------------------------
@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ReadUsers)),
):
    return await _get_visible_user(session, current_user, user_id)


@router.put("/{user_id}", response_model=UserRead)
async def edit_user(
    user_id: UUID,
    data: UserUpdate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.WriteUsers)),
):
    user = await _get_visible_user(session, current_user, user_id)

    # Only accounts whose role the caller could hand out may be edited
    check_role_assignment(current_user, user.role)
    if data.role is not None and normalize_role(data.role) != user.role:
        check_role_assignment(current_user, data.role)

    # Grants are checked only where a flag is being switched on
    grants = {
        key: value for key, value in _requested_grants(data).items()
        if value and not getattr(user, key)
    }
    check_capability_grants(current_user, grants)

    try:
        user = await update_user(session, user, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    response = UserRead.model_validate(user)
    await log_activity(session, "USER_UPDATED", user=current_user, details=f"Updated {user.user_id}")
    return response


@router.delete("/{user_id}")
async def remove_user(
    user_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.WriteUsers)),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = await _get_visible_user(session, current_user, user_id)
    check_role_assignment(current_user, user.role)

    public_id = user.user_id
    await delete_user(session, user)
    await log_activity(session, "USER_DELETED", user=current_user, details=f"Deleted {public_id}")
    return {"detail": "User deleted successfully"}


# -------------------------------------------------------------------
# Reset a user's password to their role default
# -------------------------------------------------------------------
@router.post("/{user_id}/reset-password")
async def reset_user_password(
    user_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(AllowRoles(UserRole.Admin)),
):
    user = await get_user_by_id(session, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    # Admins may only reset accounts they created
    if current_user.role == UserRole.Admin and user.created_by_id != current_user.id:
        raise Unauthorized()

    await reset_password(session, user)
    await log_activity(session, "PASSWORD_RESET", user=current_user, details=f"Reset password for {user.user_id}")
    return {"detail": f"Password for {user.full_name} has been reset."}
