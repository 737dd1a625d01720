from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Integer, String
from typing import Optional
from datetime import datetime, timezone


class AppSettings(SQLModel, table=True):
    __tablename__ = "app_settings"

    # Single row, always id=1
    id: int = Field(
        default=1,
        sa_column=Column(Integer, primary_key=True, autoincrement=False)
    )

    site_name: str = Field(default="MealAttend")
    id_prefix: str = Field(default="ADERA", sa_column=Column(String(32), nullable=False))
    school_name: Optional[str] = None
    id_card_title: str = Field(default="STUDENT ID")
    color_theme: str = Field(default="default")
    show_homepage: bool = Field(default=True)
    homepage_subtitle: Optional[str] = None
    company_logo_url: Optional[str] = None
    id_card_logo_url: Optional[str] = None

    # bcrypt hashes; never serialised to clients
    default_user_password: Optional[str] = None
    default_admin_password: Optional[str] = None
    default_super_admin_password: Optional[str] = None

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
