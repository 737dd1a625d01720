# app/api/deps.py

from typing import AsyncGenerator, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.exceptions import Unauthenticated
from app.core.security import decode_token
from app.models.user import User, UserStatus
from app.services.auth_service import get_user_by_id


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
# auto_error=False: a missing header must surface as 401, not 403
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# Get current logged-in user from JWT
# ------------------------------------------------------------
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:

    if credentials is None:
        raise Unauthenticated("Missing bearer token")

    try:
        payload = decode_token(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        logger.debug(f"Rejected token: {exc}")
        raise Unauthenticated("Could not validate credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid token payload")

    user = await get_user_by_id(session, user_id)

    if not user or user.status != UserStatus.Active:
        raise Unauthenticated("User not found or inactive")

    return user
