# app/services/user_service.py
"""Admin-side user management: listing, approval and rejection."""

from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.models.parking_slot import ParkingSlot
from app.models.user import User, USER_STATUSES
from app.services import slot_service
from app.services.email_service import user_approved_email, user_rejected_email
from app.services.notification_service import create_notification
from app.utils.exceptions import InvalidState, NotFound, ValidationFailed
from app.utils.pagination import paginate, sanitize_search, like_pattern
from app.utils.logger import get_logger

logger = get_logger(__name__)

SORT_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "plate_number": User.plate_number,
    "status": User.status,
    "created_at": User.created_at,
}


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def with_slot(user: User, slot) -> dict:
    """Flatten a user and their (optional) slot into one record."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "plate_number": user.plate_number,
        "status": user.status,
        "is_email_verified": user.is_email_verified,
        "rejection_reason": user.rejection_reason,
        "created_at": user.created_at,
        "slot_id": slot.id if slot else None,
        "slot_number": slot.slot_number if slot else None,
        "slot_status": slot.status if slot else None,
        "assigned_at": slot.assigned_at if slot else None,
    }


def list_users(db: Session, page=1, limit=10, search: str = "", plate_number: str = "",
               status: str = None, sort_by: str = "created_at", order: str = "desc") -> dict:
    q = db.query(User)

    search = sanitize_search(search)
    if search:
        pattern = like_pattern(search)
        q = q.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    plate_number = sanitize_search(plate_number)
    if plate_number:
        q = q.filter(User.plate_number.ilike(like_pattern(plate_number)))

    if status and status != "all":
        if status not in USER_STATUSES:
            raise ValidationFailed("Invalid status value")
        q = q.filter(User.status == status)

    column = SORT_COLUMNS.get(sort_by, User.created_at)
    q = q.order_by(column.asc() if str(order).lower() == "asc" else column.desc(), User.id.asc())
    return paginate(q, page, limit)


def get_user_with_slot(db: Session, user_id: int) -> dict:
    user = get_user(db, user_id)
    return with_slot(user, slot_service.slot_held_by(db, user.id))


def list_pending_users(db: Session):
    """Verified accounts waiting for an admin decision."""
    return (db.query(User)
            .filter(User.status == "pending", User.is_email_verified.is_(True))
            .order_by(User.created_at.asc())
            .all())


def users_with_slots(db: Session):
    rows = (db.query(User, ParkingSlot)
            .outerjoin(ParkingSlot, ParkingSlot.user_id == User.id)
            .order_by(User.created_at.desc())
            .all())
    return [with_slot(user, slot) for user, slot in rows]


def approve_user(db: Session, user_id: int):
    """
    Approve a pending user and bind them the first available slot.
    Returns (user, slot, emails).
    """
    user = get_user(db, user_id)
    if user.status != "pending":
        raise NotFound("User not found or already processed")

    slot = (db.query(ParkingSlot)
            .filter(ParkingSlot.status == "available", ParkingSlot.user_id.is_(None))
            .order_by(ParkingSlot.slot_number.asc())
            .first())
    if not slot:
        raise InvalidState("No available parking slots")

    slot_service.bind_slot(db, slot, user.id)
    user.status = "approved"
    user.rejection_reason = None
    create_notification(db, user.id, "approval",
                        f"Your account has been approved. You have been assigned parking slot {slot.slot_number}.")
    db.commit()
    db.refresh(user)
    logger.info(f"[USER] Approved user {user.id} → slot {slot.slot_number}")
    return user, slot, [user_approved_email(user.email, user.name, slot.slot_number)]


def reject_user(db: Session, user_id: int, reason: str):
    """Returns (user, emails)."""
    if not reason or not reason.strip():
        raise ValidationFailed("Rejection reason is required")
    user = get_user(db, user_id)
    if user.status != "pending":
        raise NotFound("User not found or already processed")

    user.status = "rejected"
    user.rejection_reason = reason.strip()
    create_notification(db, user.id, "rejection",
                        f"Your account has been rejected. Reason: {user.rejection_reason}")
    db.commit()
    db.refresh(user)
    logger.info(f"[USER] Rejected user {user.id}")
    return user, [user_rejected_email(user.email, user.name, user.rejection_reason)]


def user_counts(db: Session) -> dict:
    return {
        "total": db.query(User).count(),
        "pending": db.query(User).filter(
            User.status == "pending", User.is_email_verified.is_(True)
        ).count(),
        "approved": db.query(User).filter(User.status == "approved").count(),
        "rejected": db.query(User).filter(User.status == "rejected").count(),
    }
