from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime

class ActivityLogRead(BaseModel):
    id: UUID
    log_id: str
    user_identifier: str
    user_id: Optional[UUID] = None
    action: str
    details: Optional[str] = None
    activity_timestamp: datetime

    class Config:
        from_attributes = True
