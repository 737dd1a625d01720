# app/api/endpoints/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_current_user
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.models.user import User
from app.schemas.auth import ForgotPasswordRequest, LoginRequest, TokenWithUser
from app.schemas.user import UserRead, ProfileUpdate
from app.services.activity_service import log_activity
from app.services.auth_service import (
    authenticate_user,
    create_login_response,
    request_password_reset,
    update_profile,
)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# -------------------------------------------------------------------
# LOGIN
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session)
):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = await authenticate_user(session, payload.email, payload.password)

    if not user:
        await log_activity(session, "LOGIN_FAILURE", user_identifier=payload.email, details="Invalid credentials")
        # Same message for unknown email, wrong password and inactive account
        raise HTTPException(status_code=401, detail="Invalid credentials")

    response = create_login_response(user)
    await log_activity(session, "LOGIN_SUCCESS", user=user)
    return response


# -------------------------------------------------------------------
# FORGOT PASSWORD
# -------------------------------------------------------------------
@router.post("/forgot-password")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_db_session)
):
    if not payload.email.strip():
        raise HTTPException(status_code=400, detail="Email is required")

    user = await request_password_reset(session, payload.email)
    if user:
        await log_activity(session, "PASSWORD_RESET_REQUESTED", user=user)

    # Same answer whether or not the account exists
    return {
        "detail": "If an account with that email exists, a password reset request "
                  "has been submitted to an administrator."
    }


# -------------------------------------------------------------------
# PROFILE
# -------------------------------------------------------------------
@router.get("/profile", response_model=UserRead)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserRead)
async def edit_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        user = await update_profile(session, current_user, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    response = UserRead.model_validate(user)
    await log_activity(session, "PROFILE_UPDATED", user=user)
    return response
