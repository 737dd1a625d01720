# app/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy import Enum as SAEnum
from datetime import datetime, timezone
import uuid
from enum import Enum
from typing import Optional

class UserRole(str, Enum):
    SuperAdmin = "Super Admin"
    Admin = "Admin"
    User = "User"

class UserStatus(str, Enum):
    Active = "Active"
    Inactive = "Inactive"


def _enum_values(enum_cls):
    # Store "Super Admin", not the member name "SuperAdmin"
    return [member.value for member in enum_cls]


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    # Public identifier, e.g. ADERA/USR/2024/00001
    user_id: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True)
    )

    full_name: str = Field(nullable=False)
    email: str = Field(nullable=False, index=True, unique=True)
    password_hash: Optional[str] = Field(default=None)

    role: UserRole = Field(
        sa_column=Column(
            SAEnum(UserRole, name="user_role", values_callable=_enum_values),
            nullable=False,
        )
    )
    status: UserStatus = Field(
        default=UserStatus.Active,
        sa_column=Column(
            SAEnum(UserStatus, name="user_status", values_callable=_enum_values),
            nullable=False,
        )
    )

    department_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    )
    created_by_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    )

    password_change_required: bool = Field(default=True)
    # Set by the forgot-password form, cleared when an admin resets the password
    password_reset_requested: bool = Field(default=False)
    profile_image_url: Optional[str] = Field(default=None)

    # --- Capability flags (see app.models.enums.Capability) ---
    can_read_dashboard: bool = Field(default=False)
    can_scan_id: bool = Field(default=False)
    can_read_students: bool = Field(default=False)
    can_write_students: bool = Field(default=False)
    can_create_students: bool = Field(default=False)
    can_delete_students: bool = Field(default=False)
    can_export_students: bool = Field(default=False)
    can_read_attendance: bool = Field(default=False)
    can_export_attendance: bool = Field(default=False)
    can_read_activity_log: bool = Field(default=False)
    can_read_users: bool = Field(default=False)
    can_write_users: bool = Field(default=False)
    can_read_departments: bool = Field(default=False)
    can_write_departments: bool = Field(default=False)
    can_manage_site_settings: bool = Field(default=False)
    can_see_all_records: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, onupdate=lambda: datetime.now(timezone.utc))
    )
