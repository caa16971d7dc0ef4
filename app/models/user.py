# app/models/user.py
"""
Registered drivers.
Created unverified + pending at registration, verified by OTP,
approved or rejected by an admin.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text
from app.database import Base

USER_STATUSES = ("pending", "approved", "rejected")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)          # argon2 hash
    plate_number = Column(String(20), index=True)
    status = Column(String(20), default="pending", nullable=False, index=True)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    rejection_reason = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    role = "user"

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"

    def __repr__(self):
        return f"<User {self.id} email={self.email} status={self.status}>"
