# app/services/export_service.py
"""CSV export of ticket history, for a single user or for the whole site."""

import csv
import io
from datetime import date, datetime, time, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from app.models.ticket import Ticket, TICKET_STATUSES
from app.utils.exceptions import ValidationFailed
from app.utils.time_utils import format_timestamp

USER_COLUMNS = [
    "id", "slot_number", "plate_number", "status",
    "requested_entry_time", "requested_exit_time",
    "actual_entry_time", "actual_exit_time",
    "duration", "amount", "created_at",
]
ADMIN_COLUMNS = USER_COLUMNS[:1] + ["user_name"] + USER_COLUMNS[1:]

_TIME_COLUMNS = {
    "requested_entry_time", "requested_exit_time",
    "actual_entry_time", "actual_exit_time", "created_at",
}


def _filtered(db: Session, user_id: Optional[int], status: Optional[str],
              start_date: Optional[date], end_date: Optional[date]):
    q = db.query(Ticket)
    if user_id is not None:
        q = q.filter(Ticket.user_id == user_id)
    if status and status != "all":
        if status not in TICKET_STATUSES:
            raise ValidationFailed("Invalid status value")
        q = q.filter(Ticket.status == status)
    if start_date:
        q = q.filter(Ticket.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        # end_date is inclusive
        q = q.filter(Ticket.created_at < datetime.combine(end_date + timedelta(days=1), time.min))
    return q.order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()


def _cell(ticket: Ticket, column: str):
    value = getattr(ticket, column)
    if column in _TIME_COLUMNS:
        return format_timestamp(value)
    return "" if value is None else value


def render_csv(tickets, columns) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(columns)
    for ticket in tickets:
        writer.writerow([_cell(ticket, c) for c in columns])
    return buffer.getvalue()


def export_user_tickets(db: Session, user_id: int, status: str = None,
                        start_date: date = None, end_date: date = None,
                        today: date = None):
    """Returns (filename, csv_text)."""
    tickets = _filtered(db, user_id, status, start_date, end_date)
    today = today or datetime.utcnow().date()
    return f"ticket-history-{user_id}-{today.isoformat()}.csv", render_csv(tickets, USER_COLUMNS)


def export_all_tickets(db: Session, status: str = None, start_date: date = None,
                       end_date: date = None, today: date = None):
    tickets = _filtered(db, None, status, start_date, end_date)
    today = today or datetime.utcnow().date()
    return f"all-tickets-{today.isoformat()}.csv", render_csv(tickets, ADMIN_COLUMNS)
