#app/models/activity_log.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from typing import Optional
from uuid import UUID, uuid4
from datetime import datetime, timezone

class ActivityLog(SQLModel, table=True):
    __tablename__ = "activity_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    log_id: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True)
    )

    # Public user id, or the attempted email for failed logins
    user_identifier: str = Field(default="unknown_user")

    user_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    )

    # e.g. "LOGIN_SUCCESS", "STUDENT_CREATED"
    action: str = Field(index=True)
    details: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    activity_timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
