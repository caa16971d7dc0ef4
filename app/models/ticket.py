# app/models/ticket.py
"""
Billable parking session.
pending --activate--> active --complete--> completed; pending may be cancelled.
duration (minutes) and amount are only set on completion.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from app.database import Base

TICKET_STATUSES = ("pending", "active", "completed", "cancelled")
OPEN_TICKET_STATUSES = ("pending", "active")


class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (
        # At most one open (pending/active) ticket per user
        Index(
            "uq_tickets_user_open",
            "user_id",
            unique=True,
            postgresql_where=text("status IN ('pending', 'active')"),
            sqlite_where=text("status IN ('pending', 'active')"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    slot_id = Column(Integer, ForeignKey("parking_slots.id", ondelete="SET NULL"))
    request_id = Column(Integer, ForeignKey("slot_requests.id", ondelete="SET NULL"))
    requested_entry_time = Column(DateTime)
    requested_exit_time = Column(DateTime)
    actual_entry_time = Column(DateTime)
    actual_exit_time = Column(DateTime)
    duration = Column(Integer)               # minutes, set on completion
    amount = Column(Integer)                 # currency units, set on completion
    status = Column(String(20), default="pending", nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", lazy="joined")
    slot = relationship("ParkingSlot", lazy="joined")

    @property
    def user_name(self):
        return self.user.name if self.user else None

    @property
    def plate_number(self):
        return self.user.plate_number if self.user else None

    @property
    def slot_number(self):
        return self.slot.slot_number if self.slot else None

    def __repr__(self):
        return f"<Ticket {self.id} user={self.user_id} status={self.status} amount={self.amount}>"
