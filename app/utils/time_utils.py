# app/utils/time_utils.py
"""
All timestamps are stored as naive UTC. Client input may carry an offset
(e.g. "2026-10-20T08:00:00Z"); it is converted here before any comparison.
"""

from datetime import datetime, timezone
from typing import Optional

CSV_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_timestamp(value: Optional[datetime]) -> str:
    """Format for CSV export. Empty string when null."""
    return value.strftime(CSV_TIME_FORMAT) if value else ""
