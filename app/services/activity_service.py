# app/services/activity_service.py

from typing import Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.exceptions import AllocationFailed
from app.models.activity_log import ActivityLog
from app.models.enums import IdType
from app.models.user import User
from app.services.id_service import allocate_next_id


async def log_activity(
    session: AsyncSession,
    action: str,
    user: Optional[User] = None,
    user_identifier: Optional[str] = None,
    details: Optional[str] = None,
) -> Optional[ActivityLog]:
    """
    Records an activity log entry and commits it.

    Call after the business change has been committed. A failure here is
    logged and swallowed so it never undoes or fails the request.
    """
    if user is not None:
        user_identifier = user.user_id
        user_id: Optional[UUID] = user.id
    else:
        user_id = None
        if user_identifier:
            # Failed logins pass the attempted email
            result = await session.execute(select(User.id).where(User.email == user_identifier.lower()))
            user_id = result.scalar_one_or_none()

    effective_identifier = user_identifier or "unknown_user"
    logger.info(f"[Activity Log] User: {effective_identifier}, Action: {action}, Details: {details or 'N/A'}")

    try:
        log_id = await allocate_next_id(session, IdType.ACTIVITY_LOG)
        entry = ActivityLog(
            log_id=log_id,
            user_identifier=effective_identifier,
            user_id=user_id,
            action=action,
            details=details,
        )
        session.add(entry)
        await session.commit()
        return entry

    except (AllocationFailed, SQLAlchemyError):
        logger.exception("Failed to save activity log to database")
        await session.rollback()
        return None


async def list_activity_logs(
    session: AsyncSession,
    action: Optional[str] = None,
    limit: int = 100,
    user_id: Optional[UUID] = None,
) -> list[ActivityLog]:
    """``user_id`` restricts to one actor's entries before the limit is applied."""
    query = select(ActivityLog).order_by(ActivityLog.activity_timestamp.desc()).limit(limit)
    if action:
        query = query.where(ActivityLog.action == action)
    if user_id is not None:
        query = query.where(ActivityLog.user_id == user_id)

    result = await session.execute(query)
    return result.scalars().all()


async def get_activity_log(session: AsyncSession, log_id) -> Optional[ActivityLog]:
    try:
        log_uuid = UUID(str(log_id))
    except ValueError:
        return None
    return await session.get(ActivityLog, log_uuid)
