# app/models/slot_request.py
"""
A user's request to park over [requested_entry_time, requested_exit_time].
pending → approved | rejected (both terminal). On approval the chosen slot
is recorded in slot_id and a pending ticket is issued.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from app.database import Base

REQUEST_STATUSES = ("pending", "approved", "rejected")
MAX_REASON_LENGTH = 500


class SlotRequest(Base):
    __tablename__ = "slot_requests"
    __table_args__ = (
        # At most one pending request per user, enforced by the database
        Index(
            "uq_slot_requests_user_pending",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    slot_id = Column(Integer, ForeignKey("parking_slots.id", ondelete="SET NULL"))
    requested_entry_time = Column(DateTime, nullable=False)
    requested_exit_time = Column(DateTime, nullable=False)
    reason = Column(String(MAX_REASON_LENGTH))
    status = Column(String(20), default="pending", nullable=False, index=True)
    rejection_reason = Column(Text)
    approved_at = Column(DateTime)
    rejected_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User", lazy="joined")
    slot = relationship("ParkingSlot", lazy="joined")

    @property
    def user_name(self):
        return self.user.name if self.user else None

    @property
    def user_email(self):
        return self.user.email if self.user else None

    @property
    def plate_number(self):
        return self.user.plate_number if self.user else None

    @property
    def slot_number(self):
        return self.slot.slot_number if self.slot else None

    def __repr__(self):
        return f"<SlotRequest {self.id} user={self.user_id} status={self.status}>"
