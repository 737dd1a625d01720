from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, EmailStr
from app.models.user import UserRole, UserStatus


# ---------------------------------------------------------
# CAPABILITY FLAGS (shared by create / update / read)
# ---------------------------------------------------------
class CapabilityFlags(BaseModel):
    can_read_dashboard: bool = False
    can_scan_id: bool = False
    can_read_students: bool = False
    can_write_students: bool = False
    can_create_students: bool = False
    can_delete_students: bool = False
    can_export_students: bool = False
    can_read_attendance: bool = False
    can_export_attendance: bool = False
    can_read_activity_log: bool = False
    can_read_users: bool = False
    can_write_users: bool = False
    can_read_departments: bool = False
    can_write_departments: bool = False
    can_manage_site_settings: bool = False
    can_see_all_records: bool = False


CAPABILITY_FIELDS = tuple(CapabilityFlags.model_fields)


# ---------------------------------------------------------
# CREATE USER (password comes from the role default)
# ---------------------------------------------------------
class UserCreate(CapabilityFlags):
    full_name: str
    email: EmailStr
    role: UserRole
    status: UserStatus = UserStatus.Active
    department_id: Optional[UUID] = None
    profile_image_url: Optional[str] = None


# ---------------------------------------------------------
# UPDATE USER (all optional, flags included)
# ---------------------------------------------------------
class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    department_id: Optional[UUID] = None
    profile_image_url: Optional[str] = None

    can_read_dashboard: Optional[bool] = None
    can_scan_id: Optional[bool] = None
    can_read_students: Optional[bool] = None
    can_write_students: Optional[bool] = None
    can_create_students: Optional[bool] = None
    can_delete_students: Optional[bool] = None
    can_export_students: Optional[bool] = None
    can_read_attendance: Optional[bool] = None
    can_export_attendance: Optional[bool] = None
    can_read_activity_log: Optional[bool] = None
    can_read_users: Optional[bool] = None
    can_write_users: Optional[bool] = None
    can_read_departments: Optional[bool] = None
    can_write_departments: Optional[bool] = None
    can_manage_site_settings: Optional[bool] = None
    can_see_all_records: Optional[bool] = None


# ---------------------------------------------------------
# PROFILE UPDATE (self service)
# ---------------------------------------------------------
class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    profile_image_url: Optional[str] = None


# ---------------------------------------------------------
# READ USER (response, never includes the password hash)
# ---------------------------------------------------------
class UserRead(CapabilityFlags):
    id: UUID
    user_id: str
    full_name: str
    email: str
    role: UserRole
    status: UserStatus
    department_id: Optional[UUID] = None
    created_by_id: Optional[UUID] = None
    password_change_required: bool
    password_reset_requested: bool = False
    profile_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
