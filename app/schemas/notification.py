# app/schemas/notification.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class NotificationOut(BaseModel):
    id: int
    user_id: Optional[int]
    type: str
    message: str
    is_read: bool
    is_system: bool
    created_at: datetime
    user_name: Optional[str] = None

    class Config:
        from_attributes = True
