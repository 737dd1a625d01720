# app/services/settings_service.py

from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.security import hash_password
from app.models.app_settings import AppSettings
from app.models.user import UserRole
from app.schemas.settings import SettingsUpdate

SETTINGS_ROW_ID = 1

DEFAULT_PASSWORD_FIELDS = {
    UserRole.User: "default_user_password",
    UserRole.Admin: "default_admin_password",
    UserRole.SuperAdmin: "default_super_admin_password",
}


async def get_or_create_settings(session: AsyncSession) -> AppSettings:
    result = await session.execute(select(AppSettings).where(AppSettings.id == SETTINGS_ROW_ID))
    app_settings = result.scalar_one_or_none()
    if app_settings:
        return app_settings

    app_settings = AppSettings(
        id=SETTINGS_ROW_ID,
        site_name=settings.SITE_NAME,
        id_prefix=settings.ID_PREFIX,
        school_name=settings.SCHOOL_NAME,
        homepage_subtitle="Learn more about our system and the team behind it.",
    )
    session.add(app_settings)
    try:
        await session.commit()
    except IntegrityError:
        # Another request created the row first
        await session.rollback()
        result = await session.execute(select(AppSettings).where(AppSettings.id == SETTINGS_ROW_ID))
        return result.scalar_one()

    await session.refresh(app_settings)
    return app_settings


async def update_settings(session: AsyncSession, data: SettingsUpdate) -> AppSettings:
    app_settings = await get_or_create_settings(session)

    update_dict = data.model_dump(exclude_unset=True)

    if "id_prefix" in update_dict:
        prefix = (update_dict["id_prefix"] or "").strip()
        if not prefix or "/" in prefix:
            raise ValueError("ID prefix must be non-empty and must not contain '/'")
        update_dict["id_prefix"] = prefix

    # Default passwords are stored hashed
    for field in DEFAULT_PASSWORD_FIELDS.values():
        if update_dict.get(field):
            update_dict[field] = hash_password(update_dict[field])
        else:
            update_dict.pop(field, None)

    for key, value in update_dict.items():
        setattr(app_settings, key, value)
    app_settings.updated_at = datetime.now(timezone.utc)

    session.add(app_settings)
    await session.commit()
    await session.refresh(app_settings)
    return app_settings


async def default_password_hash_for(session: AsyncSession, role: UserRole) -> str:
    """Hash of the password handed to new or reset accounts of ``role``."""
    app_settings = await get_or_create_settings(session)
    stored = getattr(app_settings, DEFAULT_PASSWORD_FIELDS[role])
    if stored:
        return stored
    return hash_password(settings.DEFAULT_USER_PASSWORD)
