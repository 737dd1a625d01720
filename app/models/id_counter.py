from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Integer, String


class IdCounter(SQLModel, table=True):
    """One row per entity type. Written only by app.services.id_service."""
    __tablename__ = "id_counters"

    type: str = Field(
        sa_column=Column(String(32), primary_key=True)
    )

    count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0)
    )
