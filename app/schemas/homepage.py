from pydantic import BaseModel, field_validator
from typing import List, Optional
from uuid import UUID


def _required(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Missing required fields")
    return v.strip()


# ---------------------------------------------------------
# TEAM MEMBERS
# ---------------------------------------------------------
class TeamMemberCreate(BaseModel):
    name: str
    role: str
    bio: str
    avatar_url: Optional[str] = None
    is_ceo: bool = False
    is_visible: bool = True

    @field_validator("name", "role", "bio")
    def not_blank(cls, v):
        return _required(v)


class TeamMemberUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    is_ceo: Optional[bool] = None
    is_visible: Optional[bool] = None


class TeamMemberRead(BaseModel):
    id: UUID
    name: str
    role: str
    bio: str
    avatar_url: Optional[str] = None
    is_ceo: bool
    is_visible: bool
    display_order: int

    class Config:
        from_attributes = True


# ---------------------------------------------------------
# HOMEPAGE FEATURES
# ---------------------------------------------------------
class FeatureCreate(BaseModel):
    icon: str
    title: str
    description: str
    is_visible: bool = True

    @field_validator("icon", "title", "description")
    def not_blank(cls, v):
        return _required(v)


class FeatureUpdate(BaseModel):
    icon: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    is_visible: Optional[bool] = None


class FeatureRead(BaseModel):
    id: UUID
    icon: str
    title: str
    description: str
    is_visible: bool
    display_order: int

    class Config:
        from_attributes = True


class ReorderRequest(BaseModel):
    ordered_ids: List[UUID]
