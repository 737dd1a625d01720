from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy import Enum as SAEnum
from datetime import datetime, timezone
from typing import Optional
import uuid

from app.models.enums import Gender


class Student(SQLModel, table=True):
    __tablename__ = "students"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    # Public identifier, e.g. ADERA/STU/2024/00205
    student_id: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True)
    )

    name: str = Field(
        sa_column=Column(String, nullable=False)
    )

    gender: Optional[Gender] = Field(
        default=None,
        sa_column=Column(SAEnum(Gender, name="gender"), nullable=True)
    )

    class_grade: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    profile_image_url: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )

    # Payload encoded in the printed QR code
    qr_code_data: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True, unique=True)
    )

    created_by_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, onupdate=lambda: datetime.now(timezone.utc))
    )
