from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class SettingsRead(BaseModel):
    """Public view. Default password hashes are deliberately absent."""
    site_name: str
    id_prefix: str
    school_name: Optional[str] = None
    id_card_title: str
    color_theme: str
    show_homepage: bool
    homepage_subtitle: Optional[str] = None
    company_logo_url: Optional[str] = None
    id_card_logo_url: Optional[str] = None
    updated_at: datetime

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    site_name: Optional[str] = None
    id_prefix: Optional[str] = None
    school_name: Optional[str] = None
    id_card_title: Optional[str] = None
    color_theme: Optional[str] = None
    show_homepage: Optional[bool] = None
    homepage_subtitle: Optional[str] = None
    company_logo_url: Optional[str] = None
    id_card_logo_url: Optional[str] = None

    # Plain text in, stored hashed
    default_user_password: Optional[str] = None
    default_admin_password: Optional[str] = None
    default_super_admin_password: Optional[str] = None
