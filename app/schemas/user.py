# app/schemas/user.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    plate_number: Optional[str]
    status: str
    is_email_verified: bool
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class UserWithSlotOut(UserOut):
    slot_id: Optional[int] = None
    slot_number: Optional[str] = None
    slot_status: Optional[str] = None
    assigned_at: Optional[datetime] = None


class AdminOut(BaseModel):
    id: int
    name: str
    email: str
    role: str
    is_email_verified: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class RejectUserIn(BaseModel):
    rejection_reason: Optional[str] = None
