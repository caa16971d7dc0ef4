# app/services/billing.py
"""
Parking fee arithmetic and time-window validation.

duration = minutes between entry and exit, rounded up
amount   = ceil(duration / 60 × HOURLY_RATE), i.e. prorated per minute, rounded up

calculate_fee() is the only place the formula lives: estimates and ticket
completion both call it, so a preview always matches the final bill for the
same timestamps.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple
from app.config import settings
from app.models.slot_request import MAX_REASON_LENGTH
from app.utils.exceptions import ValidationFailed


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def duration_minutes(entry: datetime, exit_: datetime) -> int:
    delta = exit_ - entry
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    return max(0, _ceil_div(micros, 60 * 1_000_000))


def calculate_fee(entry: datetime, exit_: datetime, hourly_rate: Optional[int] = None) -> Tuple[int, int]:
    """Return (duration_minutes, amount) for a session."""
    rate = settings.HOURLY_RATE if hourly_rate is None else hourly_rate
    duration = duration_minutes(entry, exit_)
    return duration, _ceil_div(duration * rate, 60)


def estimate(entry: Optional[datetime], exit_: Optional[datetime]) -> dict:
    """Up-front cost preview. Needs no ticket and writes nothing."""
    if not entry or not exit_:
        raise ValidationFailed("Entry and exit times are required")
    if exit_ <= entry:
        raise ValidationFailed("Exit time must be after entry time")
    duration, amount = calculate_fee(entry, exit_)
    return {
        "duration": duration,
        "amount": amount,
        "hourly_rate": settings.HOURLY_RATE,
        "currency": settings.CURRENCY,
    }


def validate_window(entry: Optional[datetime], exit_: Optional[datetime],
                    reason: Optional[str] = None, now: Optional[datetime] = None):
    """
    Checks, in order: both present, entry in the future, exit after entry,
    duration within MAX_PARKING_HOURS, reason within 500 characters.
    """
    now = now or datetime.utcnow()
    if not entry or not exit_:
        raise ValidationFailed("Entry and exit times are required")
    if entry <= now:
        raise ValidationFailed("Entry time must be in the future")
    if exit_ <= entry:
        raise ValidationFailed("Exit time must be after entry time")
    if exit_ - entry > timedelta(hours=settings.MAX_PARKING_HOURS):
        raise ValidationFailed(f"Parking duration cannot exceed {settings.MAX_PARKING_HOURS} hours")
    if reason is not None and len(reason) > MAX_REASON_LENGTH:
        raise ValidationFailed(f"Reason must be a string with maximum length of {MAX_REASON_LENGTH} characters")
