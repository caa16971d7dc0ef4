# app/schemas/parking_slot.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Literal


class ParkingSlotOut(BaseModel):
    id: int
    slot_number: str
    location: Optional[str]
    status: str
    user_id: Optional[int]
    assigned_at: Optional[datetime]
    holder_name: Optional[str] = None
    holder_email: Optional[str] = None
    holder_plate: Optional[str] = None

    class Config:
        from_attributes = True


class ParkingSlotCreate(BaseModel):
    slot_number: str = Field(..., min_length=1, max_length=50)
    location: Optional[str] = None


class ParkingSlotUpdate(BaseModel):
    slot_number: Optional[str] = Field(None, min_length=1, max_length=50)
    location: Optional[str] = None
    status: Optional[Literal["available", "maintenance"]] = None


class AssignSlotIn(BaseModel):
    user_id: int
