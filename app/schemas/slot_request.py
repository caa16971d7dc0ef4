# app/schemas/slot_request.py
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional
from app.utils.time_utils import to_naive_utc


class SlotRequestCreate(BaseModel):
    # Optional here so the workflow reports missing times with its own message
    requested_entry_time: Optional[datetime] = None
    requested_exit_time: Optional[datetime] = None
    reason: Optional[str] = None

    @field_validator("requested_entry_time", "requested_exit_time")
    @classmethod
    def normalise(cls, v):
        return to_naive_utc(v)


class ApproveRequestIn(BaseModel):
    request_id: int
    slot_id: int


class RejectRequestIn(BaseModel):
    request_id: int
    reason: Optional[str] = None


class SlotRequestOut(BaseModel):
    id: int
    user_id: int
    slot_id: Optional[int]
    requested_entry_time: datetime
    requested_exit_time: datetime
    reason: Optional[str]
    status: str
    rejection_reason: Optional[str]
    approved_at: Optional[datetime]
    rejected_at: Optional[datetime]
    created_at: Optional[datetime]
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    plate_number: Optional[str] = None
    slot_number: Optional[str] = None

    class Config:
        from_attributes = True
