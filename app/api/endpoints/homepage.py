# app/api/endpoints/homepage.py

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from app.api.deps import get_db_session
from app.core.rbac import require_super_admin
from app.models.homepage import HomepageFeature, TeamMember
from app.models.user import User
from app.schemas.homepage import (
    FeatureCreate,
    FeatureRead,
    FeatureUpdate,
    ReorderRequest,
    TeamMemberCreate,
    TeamMemberRead,
    TeamMemberUpdate,
)
from app.services.activity_service import log_activity
from app.services.homepage_service import (
    create_item,
    delete_item,
    get_item,
    list_items,
    reorder_items,
    update_item,
)

router = APIRouter(prefix="/api", tags=["Homepage"])


# ===================================================================
# TEAM MEMBERS
# ===================================================================
@router.get("/team", response_model=List[TeamMemberRead])
async def list_team(
    visible_only: bool = Query(False),
    session: AsyncSession = Depends(get_db_session),
):
    return await list_items(session, TeamMember, visible_only=visible_only)


@router.post("/team", response_model=TeamMemberRead, status_code=status.HTTP_201_CREATED)
async def add_team_member(
    data: TeamMemberCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_super_admin),
):
    member = await create_item(session, TeamMember, data)
    response = TeamMemberRead.model_validate(member)
    await log_activity(session, "TEAM_MEMBER_CREATED", user=current_user, details=member.name)
    return response


@router.post("/team/reorder", response_model=List[TeamMemberRead])
async def reorder_team(
    payload: ReorderRequest,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_super_admin),
):
    try:
        return await reorder_items(session, TeamMember, payload.ordered_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/team/{member_id}", response_model=TeamMemberRead)
async def edit_team_member(
    member_id: UUID,
    data: TeamMemberUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_super_admin),
):
    member = await get_item(session, TeamMember, member_id)
    if not member:
        raise HTTPException(404, "Team member not found")

    try:
        return await update_item(session, member, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/team/{member_id}")
async def remove_team_member(
    member_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_super_admin),
):
    member = await get_item(session, TeamMember, member_id)
    if not member:
        raise HTTPException(404, "Team member not found")

    name = member.name
    await delete_item(session, member)
    await log_activity(session, "TEAM_MEMBER_DELETED", user=current_user, details=name)
    return {"detail": "Team member deleted"}


# ===================================================================
# HOMEPAGE FEATURES
# ===================================================================
@router.get("/features", response_model=List[FeatureRead])
async def list_features(
    visible_only: bool = Query(False),
    session: AsyncSession = Depends(get_db_session),
):
    return await list_items(session, HomepageFeature, visible_only=visible_only)


@router.post("/features", response_model=FeatureRead, status_code=status.HTTP_201_CREATED)
async def add_feature(
    data: FeatureCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_super_admin),
):
    feature = await create_item(session, HomepageFeature, data)
    response = FeatureRead.model_validate(feature)
    await log_activity(session, "FEATURE_CREATED", user=current_user, details=feature.title)
    return response


@router.post("/features/reorder", response_model=List[FeatureRead])
async def reorder_features(
    payload: ReorderRequest,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_super_admin),
):
    try:
        return await reorder_items(session, HomepageFeature, payload.ordered_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/features/{feature_id}", response_model=FeatureRead)
async def edit_feature(
    feature_id: UUID,
    data: FeatureUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_super_admin),
):
    feature = await get_item(session, HomepageFeature, feature_id)
    if not feature:
        raise HTTPException(404, "Feature not found")

    try:
        return await update_item(session, feature, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/features/{feature_id}")
async def remove_feature(
    feature_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_super_admin),
):
    feature = await get_item(session, HomepageFeature, feature_id)
    if not feature:
        raise HTTPException(404, "Feature not found")

    title = feature.title
    await delete_item(session, feature)
    await log_activity(session, "FEATURE_DELETED", user=current_user, details=title)
    return {"detail": "Feature deleted"}
