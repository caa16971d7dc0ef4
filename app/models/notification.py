# app/models/notification.py
"""
Append-only messages to a user (or system-wide when user_id is null).
Written as a side effect of approval, rejection, assignment and release.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type = Column(String(50), nullable=False, index=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    is_system = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User")

    @property
    def user_name(self):
        return self.user.name if self.user else None

    def __repr__(self):
        return f"<Notification {self.id} user={self.user_id} type={self.type} read={self.is_read}>"
