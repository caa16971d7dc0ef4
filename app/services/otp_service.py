# app/services/otp_service.py
"""
One-time codes for email verification and password reset.
A code verifies at most once: consume_otp() marks the row used in the same
transaction as the change it authorises.
"""

import secrets
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from app.config import settings
from app.models.otp import Otp, OTP_TYPES, OTP_ROLES
from app.utils.exceptions import InvalidOrExpired, ValidationFailed
from app.utils.logger import get_logger

logger = get_logger(__name__)


def generate_code(length: int = None) -> str:
    length = length or settings.OTP_LENGTH
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def issue_otp(db: Session, email: str, otp_type: str, role: str, now: datetime = None) -> Otp:
    """Add a fresh code to the session. The caller commits."""
    if otp_type not in OTP_TYPES or role not in OTP_ROLES:
        raise ValidationFailed(f"Unsupported code {otp_type}/{role}")
    now = now or datetime.utcnow()
    otp = Otp(
        email=email,
        code=generate_code(),
        type=otp_type,
        role=role,
        is_used=False,
        expires_at=now + timedelta(minutes=settings.OTP_EXPIRY_MINUTES),
        created_at=now,
    )
    db.add(otp)
    logger.info(f"[OTP] Issued {otp_type} code for {role} {email}")
    return otp


def consume_otp(db: Session, email: str, code: str, otp_type: str, role: str,
                now: datetime = None) -> Otp:
    """Find a matching unused, unexpired code and mark it used. The caller commits."""
    now = now or datetime.utcnow()
    otp = (
        db.query(Otp)
        .filter(
            Otp.email == email,
            Otp.code == code,
            Otp.type == otp_type,
            Otp.role == role,
            Otp.is_used.is_(False),
            Otp.expires_at > now,
        )
        .order_by(Otp.created_at.desc(), Otp.id.desc())
        .first()
    )
    if not otp:
        label = "reset" if otp_type == "reset" else "verification"
        raise InvalidOrExpired(f"Invalid or expired {label} code")
    otp.is_used = True
    return otp


def delete_expired(db: Session, now: datetime = None) -> int:
    now = now or datetime.utcnow()
    deleted = db.query(Otp).filter(Otp.expires_at < now).delete(synchronize_session=False)
    db.commit()
    return deleted
