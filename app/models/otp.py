# app/models/otp.py
"""
One-time codes for email verification and password reset.
Keyed by (email, type, role); single use; short-lived.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from app.database import Base

OTP_TYPES = ("verification", "reset")
OTP_ROLES = ("user", "admin")


class Otp(Base):
    __tablename__ = "otps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    type = Column(String(20), nullable=False)
    role = Column(String(20), nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Otp {self.id} email={self.email} type={self.type} used={self.is_used}>"
