# app/services/auth_service.py

from sqlmodel import select
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from loguru import logger
import uuid
from datetime import datetime, timezone
from typing import Any

from app.core.config import settings
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)
from app.models.activity_log import ActivityLog
from app.models.attendance import AttendanceRecord
from app.models.enums import Capability, IdType
from app.models.student import Student
from app.models.user import User, UserRole, UserStatus
from app.schemas.auth import TokenWithUser
from app.schemas.user import UserCreate, UserRead, UserUpdate, ProfileUpdate, CAPABILITY_FIELDS
from app.services.id_service import allocate_next_id
from app.services.settings_service import default_password_hash_for


def _as_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


# ============================================================================
# FETCH USER BY EMAIL
# ============================================================================
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


# ============================================================================
# FETCH USER BY ID (internal UUID)
# ============================================================================
async def get_user_by_id(session: AsyncSession, user_id: Any) -> User | None:
    user_uuid = _as_uuid(user_id)
    if user_uuid is None:
        return None
    result = await session.execute(select(User).where(User.id == user_uuid))
    return result.scalar_one_or_none()


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    data: UserCreate,
    creator: User | None = None,
) -> User:
    """
    Role and capability assignment rules are checked by the caller.
    The new account gets its role's default password and must change it.
    """
    email = data.email.strip().lower()
    if await get_user_by_email(session, email):
        raise ValueError("A user with this email or ID already exists.")

    user_id = await allocate_next_id(session, IdType.USER)
    password_hash = await default_password_hash_for(session, data.role)

    user = User(
        user_id=user_id,
        full_name=data.full_name,
        email=email,
        password_hash=password_hash,
        role=data.role,
        status=data.status,
        department_id=data.department_id,
        profile_image_url=data.profile_image_url,
        password_change_required=True,
        created_by_id=creator.id if creator else None,
        **{field: getattr(data, field) for field in CAPABILITY_FIELDS},
    )

    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("A user with this email or ID already exists.")


# ============================================================================
# SEED SUPER ADMIN
# ============================================================================
async def create_super_admin(session: AsyncSession, name: str, email: str, password: str) -> User:
    user_id = await allocate_next_id(session, IdType.USER)

    user = User(
        user_id=user_id,
        full_name=name,
        email=email.strip().lower(),
        password_hash=hash_password(password),
        role=UserRole.SuperAdmin,
        status=UserStatus.Active,
        password_change_required=False,
        **{capability.value: True for capability in Capability},
    )
    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("User with this email already exists")


# ============================================================================
# AUTHENTICATE
# ============================================================================
async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(session, email)
    if not user:
        return None

    if user.status != UserStatus.Active:
        logger.info(f"Login refused for inactive account {user.user_id}")
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


# ============================================================================
# CREATE LOGIN RESPONSE
# ============================================================================
def create_login_response(user: User) -> TokenWithUser:
    token = create_access_token(
        subject=str(user.id),
        data={"role": user.role.value, "user_id": user.user_id},
    )

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
        password_change_required=user.password_change_required,
    )


# ============================================================================
# LIST USERS
# ============================================================================
async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()


# ============================================================================
# UPDATE USER (admin edit)
# ============================================================================
async def update_user(session: AsyncSession, user: User, data: UserUpdate) -> User:
    update_dict = data.model_dump(exclude_unset=True)

    email = update_dict.pop("email", None)
    if email:
        email = email.strip().lower()
        if email != user.email:
            if await get_user_by_email(session, email):
                raise ValueError("Email already in use")
            user.email = email

    for key, value in update_dict.items():
        # Explicit nulls are only meaningful for nullable columns
        if value is None and key not in ("department_id", "profile_image_url"):
            continue
        setattr(user, key, value)

    user.updated_at = datetime.now(timezone.utc)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("Failed to update user")


# ============================================================================
# UPDATE OWN PROFILE
# ============================================================================
async def update_profile(session: AsyncSession, user: User, data: ProfileUpdate) -> User:
    return await update_user(session, user, UserUpdate(**data.model_dump(exclude_unset=True)))


# ============================================================================
# DELETE USER
# ============================================================================
async def delete_user(session: AsyncSession, user: User) -> None:
    # Keep the records this user touched, detached from the account
    await session.execute(update(User).where(User.created_by_id == user.id).values(created_by_id=None))
    await session.execute(update(Student).where(Student.created_by_id == user.id).values(created_by_id=None))
    await session.execute(
        update(AttendanceRecord).where(AttendanceRecord.scanned_by_id == user.id).values(scanned_by_id=None)
    )
    await session.execute(update(ActivityLog).where(ActivityLog.user_id == user.id).values(user_id=None))

    await session.delete(user)
    await session.commit()


# ============================================================================
# PASSWORDS
# ============================================================================
async def reset_password(session: AsyncSession, user: User) -> User:
    user.password_hash = await default_password_hash_for(session, user.role)
    user.password_change_required = True
    user.password_reset_requested = False
    user.updated_at = datetime.now(timezone.utc)

    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def change_password(session: AsyncSession, user: User, old_password: str, new_password: str) -> None:
    if not verify_password(old_password, user.password_hash):
        raise ValueError("Old password incorrect")

    if old_password == new_password:
        raise ValueError("New password must be different")

    user.password_hash = hash_password(new_password)
    user.password_change_required = False
    user.updated_at = datetime.now(timezone.utc)

    session.add(user)
    await session.commit()


async def request_password_reset(session: AsyncSession, email: str) -> User | None:
    """Flags the account for an administrator. Unknown emails are ignored."""
    user = await get_user_by_email(session, email)
    if not user:
        return None

    user.password_reset_requested = True
    session.add(user)
    await session.commit()
    return user
