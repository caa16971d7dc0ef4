# app/schemas/ticket.py
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional
from app.utils.time_utils import to_naive_utc


class TimeWindowIn(BaseModel):
    """Planned entry/exit window for ticket requests and fee estimates."""
    requested_entry_time: Optional[datetime] = None
    requested_exit_time: Optional[datetime] = None

    @field_validator("requested_entry_time", "requested_exit_time")
    @classmethod
    def normalise(cls, v):
        return to_naive_utc(v)


class TicketIdIn(BaseModel):
    ticket_id: int


class FeeEstimateOut(BaseModel):
    duration: int          # minutes
    amount: int
    hourly_rate: int
    currency: str


class TicketOut(BaseModel):
    id: int
    user_id: int
    slot_id: Optional[int]
    request_id: Optional[int]
    requested_entry_time: Optional[datetime]
    requested_exit_time: Optional[datetime]
    actual_entry_time: Optional[datetime]
    actual_exit_time: Optional[datetime]
    duration: Optional[int]
    amount: Optional[int]
    status: str
    created_at: Optional[datetime]
    user_name: Optional[str] = None
    plate_number: Optional[str] = None
    slot_number: Optional[str] = None

    class Config:
        from_attributes = True
