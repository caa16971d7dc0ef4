# app/models/parking_slot.py
"""
Parking slot inventory.
status == "occupied" exactly when user_id is set. Only assign_to() and
release() may change either field; every code path goes through them.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.exceptions import InvalidState

SLOT_STATUSES = ("available", "occupied", "maintenance")
ADMIN_SETTABLE_STATUSES = ("available", "maintenance")


class ParkingSlot(Base):
    __tablename__ = "parking_slots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_number = Column(String(50), unique=True, nullable=False, index=True)
    location = Column(String(255))
    status = Column(String(20), default="available", nullable=False, index=True)
    # unique: one slot per user (NULLs don't collide)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), unique=True, nullable=True)
    assigned_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    holder = relationship("User", lazy="joined")

    @property
    def is_occupied(self) -> bool:
        return self.status == "occupied"

    @property
    def holder_name(self):
        return self.holder.name if self.holder else None

    @property
    def holder_email(self):
        return self.holder.email if self.holder else None

    @property
    def holder_plate(self):
        return self.holder.plate_number if self.holder else None

    def assign_to(self, user_id: int, now: datetime = None):
        """Bind the slot to a user: status and owner change together."""
        if self.user_id is not None or self.status == "occupied":
            raise InvalidState(f"Slot {self.slot_number} is already assigned to another user")
        if self.status != "available":
            raise InvalidState(f"Slot {self.slot_number} is not available ({self.status})")
        self.user_id = user_id
        self.status = "occupied"
        self.assigned_at = now or datetime.utcnow()

    def release(self):
        """Return the slot to the pool: status and owner cleared together."""
        self.user_id = None
        self.status = "available"
        self.assigned_at = None

    def __repr__(self):
        return f"<ParkingSlot {self.slot_number} status={self.status} user={self.user_id}>"
