# app/api/endpoints/settings.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.core.rbac import RequireCapability
from app.models.enums import Capability
from app.models.user import User
from app.schemas.settings import SettingsRead, SettingsUpdate
from app.services.activity_service import log_activity
from app.services.settings_service import get_or_create_settings, update_settings

router = APIRouter(prefix="/api/settings", tags=["Site Settings"])


# Public: branding is needed before login
@router.get("", response_model=SettingsRead)
async def read_settings(session: AsyncSession = Depends(get_db_session)):
    return await get_or_create_settings(session)


@router.put("", response_model=SettingsRead)
async def edit_settings(
    data: SettingsUpdate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ManageSiteSettings)),
):
    try:
        app_settings = await update_settings(session, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response = SettingsRead.model_validate(app_settings)
    changed = ", ".join(sorted(data.model_dump(exclude_unset=True))) or "nothing"
    await log_activity(session, "SETTINGS_UPDATED", user=current_user, details=f"Changed: {changed}")
    return response
