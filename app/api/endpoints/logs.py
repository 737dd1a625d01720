# app/api/endpoints/logs.py

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session
from app.core.permissions import can_view_record, filter_visible_records, has_capability
from app.core.rbac import RequireCapability
from app.models.activity_log import ActivityLog
from app.models.enums import Capability
from app.models.user import User
from app.schemas.activity_log import ActivityLogRead
from app.services.activity_service import get_activity_log, list_activity_logs

router = APIRouter(prefix="/api/activity-logs", tags=["Activity Log"])


def _owner(log: ActivityLog):
    return log.user_id


# -------------------------------------------------------------------
# VIEW ACTIVITY LOG (logins, record changes, scans)
# -------------------------------------------------------------------
@router.get("/", response_model=List[ActivityLogRead])
async def get_activity_logs(
    action: Optional[str] = Query(None, description="Filter by action, e.g. LOGIN_FAILURE"),
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ReadActivityLog)),
):
    """Newest first. Without can_see_all_records, only the caller's own entries."""
    # Narrow in SQL so the limit counts visible entries only
    owner_id = None if has_capability(current_user, Capability.SeeAllRecords) else current_user.id

    logs = await list_activity_logs(session, action=action, limit=limit, user_id=owner_id)
    return filter_visible_records(current_user, logs, _owner)


@router.get("/{log_id}", response_model=ActivityLogRead)
async def get_single_activity_log(
    log_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(RequireCapability(Capability.ReadActivityLog)),
):
    log = await get_activity_log(session, log_id)
    if not log or not can_view_record(current_user, log, _owner):
        raise HTTPException(status_code=404, detail="Activity log not found")
    return log
