from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class NotificationRead(BaseModel):
    id: int
    trek_id: Optional[int] = None
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
