# app/services/ticket_service.py
"""
Ticket lifecycle: pending → active → completed (or pending → cancelled).
Activation stamps the actual entry, completion stamps the actual exit,
bills it via billing.calculate_fee() and releases the holder's slot.
"""

from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.parking_slot import ParkingSlot
from app.models.ticket import Ticket, TICKET_STATUSES, OPEN_TICKET_STATUSES
from app.models.user import User
from app.services.billing import calculate_fee, validate_window
from app.services.notification_service import create_notification
from app.utils.exceptions import Conflict, InvalidState, NotFound, ValidationFailed
from app.utils.pagination import paginate
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise NotFound("Ticket not found")
    return ticket


def open_ticket_for(db: Session, user_id: int):
    return (db.query(Ticket)
            .filter(Ticket.user_id == user_id, Ticket.status.in_(OPEN_TICKET_STATUSES))
            .order_by(Ticket.created_at.desc())
            .first())


def create_ticket(db: Session, user: User, requested_entry_time: datetime,
                  requested_exit_time: datetime, now: datetime = None) -> Ticket:
    """A user holding a slot asks for a ticket over a planned window."""
    if open_ticket_for(db, user.id):
        raise Conflict("You already have an active ticket")

    slot = db.query(ParkingSlot).filter(
        ParkingSlot.user_id == user.id, ParkingSlot.status == "occupied"
    ).first()
    if not slot:
        raise NotFound("No parking slot assigned")

    validate_window(requested_entry_time, requested_exit_time, now=now)

    ticket = Ticket(
        user_id=user.id,
        slot_id=slot.id,
        requested_entry_time=requested_entry_time,
        requested_exit_time=requested_exit_time,
        status="pending",
    )
    db.add(ticket)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("You already have an active ticket")
    db.refresh(ticket)
    logger.info(f"[TICKET] Requested #{ticket.id} by user {user.id} for slot {slot.slot_number}")
    return ticket


def activate_ticket(db: Session, ticket_id: int, now: datetime = None) -> Ticket:
    ticket = get_ticket(db, ticket_id)
    if ticket.status != "pending":
        raise InvalidState("Only pending tickets can be activated")
    ticket.status = "active"
    ticket.actual_entry_time = now or datetime.utcnow()
    create_notification(db, ticket.user_id, "ticket_activated",
                        f"Your parking ticket #{ticket.id} is now active.")
    db.commit()
    db.refresh(ticket)
    logger.info(f"[TICKET] Activated #{ticket.id}")
    return ticket


def complete_ticket(db: Session, ticket_id: int, now: datetime = None) -> Ticket:
    ticket = get_ticket(db, ticket_id)
    if ticket.status != "active":
        raise InvalidState("Only active tickets can be completed")

    now = now or datetime.utcnow()
    duration, amount = calculate_fee(ticket.actual_entry_time, now)
    ticket.actual_exit_time = now
    ticket.duration = duration
    ticket.amount = amount
    ticket.status = "completed"

    if ticket.slot_id is not None:
        slot = db.query(ParkingSlot).filter(ParkingSlot.id == ticket.slot_id).first()
        if slot and slot.user_id == ticket.user_id:
            slot.release()

    create_notification(
        db, ticket.user_id, "ticket_completed",
        f"Your parking session has ended. Duration: {duration} minutes. Amount due: {amount}.",
    )
    db.commit()
    db.refresh(ticket)
    logger.info(f"[TICKET] Completed #{ticket.id} duration={duration}min amount={amount}")
    return ticket


def cancel_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = get_ticket(db, ticket_id)
    if ticket.status != "pending":
        raise InvalidState("Only pending tickets can be cancelled")
    ticket.status = "cancelled"
    create_notification(db, ticket.user_id, "ticket_cancelled",
                        f"Your parking ticket #{ticket.id} has been cancelled.")
    db.commit()
    db.refresh(ticket)
    logger.info(f"[TICKET] Cancelled #{ticket.id}")
    return ticket


# ── Queries ──────────────────────────────────────────────────────────────────

def get_active_for_user(db: Session, user_id: int):
    return open_ticket_for(db, user_id)


def history_for_user(db: Session, user_id: int, page=1, limit=10) -> dict:
    q = (db.query(Ticket)
         .filter(Ticket.user_id == user_id)
         .order_by(Ticket.created_at.desc(), Ticket.id.desc()))
    return paginate(q, page, limit)


def admin_active(db: Session):
    return (db.query(Ticket)
            .filter(Ticket.status.in_(OPEN_TICKET_STATUSES))
            .order_by(Ticket.requested_entry_time.asc(), Ticket.id.asc())
            .all())


def admin_all(db: Session, page=1, limit=10, status: str = None) -> dict:
    q = db.query(Ticket)
    if status and status != "all":
        if status not in TICKET_STATUSES:
            raise ValidationFailed("Invalid status value")
        q = q.filter(Ticket.status == status)
    return paginate(q.order_by(Ticket.created_at.desc(), Ticket.id.desc()), page, limit)
