# app/models/homepage.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, String, Text, Uuid
from datetime import datetime, timezone
from typing import Optional
import uuid


class TeamMember(SQLModel, table=True):
    __tablename__ = "team_members"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    name: str = Field(sa_column=Column(String(128), nullable=False))
    role: str = Field(sa_column=Column(String(128), nullable=False))
    bio: str = Field(sa_column=Column(Text, nullable=False))
    avatar_url: Optional[str] = None
    is_ceo: bool = Field(default=False)
    is_visible: bool = Field(default=True)

    # Homepage position, 0 first
    display_order: int = Field(default=0, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class HomepageFeature(SQLModel, table=True):
    __tablename__ = "homepage_features"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    # Icon name understood by the frontend, e.g. "QrCode"
    icon: str = Field(sa_column=Column(String(64), nullable=False))
    title: str = Field(sa_column=Column(String(128), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    is_visible: bool = Field(default=True)
    display_order: int = Field(default=0, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
