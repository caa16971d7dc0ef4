# app/services/slot_request_service.py
"""
Slot request workflow: a user asks for a parking window, an admin approves
(binding a slot and issuing a pending ticket) or rejects it.
"""

from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.parking_slot import ParkingSlot
from app.models.slot_request import SlotRequest, REQUEST_STATUSES
from app.models.ticket import Ticket, OPEN_TICKET_STATUSES
from app.models.user import User
from app.services import slot_service
from app.services.billing import validate_window
from app.services.email_service import request_approved_email, request_rejected_email
from app.services.notification_service import create_notification
from app.utils.exceptions import Conflict, InvalidState, NotFound, ValidationFailed
from app.utils.pagination import paginate, sanitize_search, like_pattern
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _has_open_ticket(db: Session, user_id: int) -> bool:
    return db.query(Ticket).filter(
        Ticket.user_id == user_id, Ticket.status.in_(OPEN_TICKET_STATUSES)
    ).first() is not None


def _has_active_request(db: Session, user_id: int) -> bool:
    """A pending request, or an approved one whose slot the user still holds."""
    pending = db.query(SlotRequest).filter(
        SlotRequest.user_id == user_id, SlotRequest.status == "pending"
    ).first()
    if pending:
        return True
    held = (
        db.query(SlotRequest)
        .join(ParkingSlot, SlotRequest.slot_id == ParkingSlot.id)
        .filter(
            SlotRequest.user_id == user_id,
            SlotRequest.status == "approved",
            ParkingSlot.user_id == user_id,
        )
        .first()
    )
    return held is not None


def create_request(db: Session, user: User, requested_entry_time: datetime,
                   requested_exit_time: datetime, reason: str = None,
                   now: datetime = None) -> SlotRequest:
    validate_window(requested_entry_time, requested_exit_time, reason, now=now)

    if _has_active_request(db, user.id):
        raise Conflict("You already have an active slot request")
    if _has_open_ticket(db, user.id):
        raise Conflict("You already have an active ticket")

    request = SlotRequest(
        user_id=user.id,
        requested_entry_time=requested_entry_time,
        requested_exit_time=requested_exit_time,
        reason=reason,
        status="pending",
    )
    db.add(request)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("You already have an active slot request")
    db.refresh(request)
    logger.info(f"[REQUEST] Created #{request.id} by user {user.id}")
    return request


def _get_pending(db: Session, request_id: int) -> SlotRequest:
    request = db.query(SlotRequest).filter(SlotRequest.id == request_id).first()
    if not request:
        raise NotFound("Slot request not found")
    if request.status != "pending":
        raise InvalidState("Request has already been processed")
    return request


def approve_request(db: Session, request_id: int, slot_id: int, now: datetime = None):
    """
    Bind the slot to the requester, approve the request and issue a pending
    ticket for the requested window, all in one commit.
    Returns (request, ticket, emails).
    """
    now = now or datetime.utcnow()
    request = _get_pending(db, request_id)
    slot = slot_service.get_slot(db, slot_id)
    if slot.status != "available":
        raise InvalidState("Parking slot is not available")

    slot_service.bind_slot(db, slot, request.user_id, now=now)

    request.status = "approved"
    request.slot_id = slot.id
    request.approved_at = now

    ticket = Ticket(
        user_id=request.user_id,
        slot_id=slot.id,
        request_id=request.id,
        requested_entry_time=request.requested_entry_time,
        requested_exit_time=request.requested_exit_time,
        status="pending",
    )
    db.add(ticket)
    create_notification(db, request.user_id, "slot_assigned",
                        f"Your slot request has been approved. You have been assigned slot {slot.slot_number}.")
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User already has an active ticket")
    db.refresh(request)
    db.refresh(ticket)
    logger.info(f"[REQUEST] Approved #{request.id} → slot {slot.slot_number}, ticket #{ticket.id}")

    user = request.user
    return request, ticket, [request_approved_email(user.email, user.name, slot.slot_number)]


def reject_request(db: Session, request_id: int, reason: str, now: datetime = None):
    """Returns (request, emails). The slot inventory is untouched."""
    if not reason or not reason.strip():
        raise ValidationFailed("Rejection reason is required")
    request = _get_pending(db, request_id)

    request.status = "rejected"
    request.rejection_reason = reason.strip()
    request.rejected_at = now or datetime.utcnow()
    create_notification(db, request.user_id, "slot_request_rejected",
                        f"Your slot request has been rejected. Reason: {request.rejection_reason}")
    db.commit()
    db.refresh(request)
    logger.info(f"[REQUEST] Rejected #{request.id}")

    user = request.user
    return request, [request_rejected_email(user.email, user.name, request.rejection_reason)]


# ── Listing ──────────────────────────────────────────────────────────────────

def list_for_user(db: Session, user_id: int, page=1, limit=10, search: str = "") -> dict:
    q = (db.query(SlotRequest)
         .outerjoin(ParkingSlot, SlotRequest.slot_id == ParkingSlot.id)
         .filter(SlotRequest.user_id == user_id))
    search = sanitize_search(search)
    if search:
        q = q.filter(ParkingSlot.slot_number.ilike(like_pattern(search)))
    return paginate(q.order_by(SlotRequest.created_at.desc(), SlotRequest.id.desc()), page, limit)


def list_pending(db: Session):
    return (db.query(SlotRequest)
            .filter(SlotRequest.status == "pending")
            .order_by(SlotRequest.requested_entry_time.asc(), SlotRequest.id.asc())
            .all())


def list_all(db: Session, page=1, limit=10, search: str = "", status: str = None) -> dict:
    q = (db.query(SlotRequest)
         .join(User, SlotRequest.user_id == User.id)
         .outerjoin(ParkingSlot, SlotRequest.slot_id == ParkingSlot.id))
    search = sanitize_search(search)
    if search:
        pattern = like_pattern(search)
        q = q.filter(or_(
            User.name.ilike(pattern),
            User.email.ilike(pattern),
            ParkingSlot.slot_number.ilike(pattern),
        ))
    if status and status != "all":
        if status not in REQUEST_STATUSES:
            raise ValidationFailed("Invalid status value")
        q = q.filter(SlotRequest.status == status)
    return paginate(q.order_by(SlotRequest.created_at.desc(), SlotRequest.id.desc()), page, limit)
