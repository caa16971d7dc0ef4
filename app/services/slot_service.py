# app/services/slot_service.py
"""
Slot inventory: listing, CRUD, statistics and the assign / release transitions.
Slot status and owner only ever change through ParkingSlot.assign_to() and
ParkingSlot.release().
"""

from datetime import datetime
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.parking_slot import ParkingSlot, SLOT_STATUSES, ADMIN_SETTABLE_STATUSES
from app.models.user import User
from app.services.notification_service import create_notification
from app.utils.exceptions import Conflict, InvalidState, NotFound, ValidationFailed
from app.utils.pagination import paginate, sanitize_search, like_pattern
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_slot(db: Session, slot_id: int) -> ParkingSlot:
    slot = db.query(ParkingSlot).filter(ParkingSlot.id == slot_id).first()
    if not slot:
        raise NotFound("Parking slot not found")
    return slot


def slot_held_by(db: Session, user_id: int):
    return db.query(ParkingSlot).filter(ParkingSlot.user_id == user_id).first()


# ── Listing ──────────────────────────────────────────────────────────────────

def list_available(db: Session, page=1, limit=10, search: str = "") -> dict:
    q = db.query(ParkingSlot).filter(ParkingSlot.status == "available")
    search = sanitize_search(search)
    if search:
        q = q.filter(ParkingSlot.slot_number.ilike(like_pattern(search)))
    return paginate(q.order_by(ParkingSlot.slot_number.asc()), page, limit)


def list_occupied(db: Session):
    return (db.query(ParkingSlot)
            .filter(ParkingSlot.status == "occupied")
            .order_by(ParkingSlot.slot_number.asc()).all())


def get_my_slot(db: Session, user_id: int) -> ParkingSlot:
    slot = db.query(ParkingSlot).filter(
        ParkingSlot.user_id == user_id, ParkingSlot.status == "occupied"
    ).first()
    if not slot:
        raise NotFound("No parking slot assigned")
    return slot


def list_slots(db: Session, page=1, limit=10, search: str = "", status: str = "all") -> dict:
    """Admin listing: search across slot number and holder name/email/plate."""
    q = db.query(ParkingSlot).outerjoin(User, ParkingSlot.user_id == User.id)
    search = sanitize_search(search)
    if search:
        pattern = like_pattern(search)
        q = q.filter(or_(
            ParkingSlot.slot_number.ilike(pattern),
            User.name.ilike(pattern),
            User.email.ilike(pattern),
            User.plate_number.ilike(pattern),
        ))
    if status and status != "all":
        if status not in SLOT_STATUSES:
            raise ValidationFailed("Invalid status value")
        q = q.filter(ParkingSlot.status == status)
    return paginate(q.order_by(ParkingSlot.slot_number.asc()), page, limit)


def list_all_slots(db: Session):
    return db.query(ParkingSlot).order_by(ParkingSlot.slot_number.asc()).all()


def recent_assignments(db: Session, limit: int = 5):
    return (db.query(ParkingSlot)
            .filter(ParkingSlot.status == "occupied")
            .order_by(ParkingSlot.assigned_at.desc())
            .limit(limit).all())


def counts_by_status(db: Session) -> dict:
    rows = db.query(ParkingSlot.status, func.count(ParkingSlot.id)).group_by(ParkingSlot.status).all()
    counts = {s: 0 for s in SLOT_STATUSES}
    counts.update({status: count for status, count in rows})
    return counts


def utilization_rate(occupied: int, total: int) -> float:
    return round(occupied / total * 100, 2) if total else 0.0


def slot_stats(db: Session) -> dict:
    counts = counts_by_status(db)
    total = sum(counts.values())
    return {
        "total": total,
        **counts,
        "utilization_rate": utilization_rate(counts["occupied"], total),
        "recent_assignments": recent_assignments(db),
    }


# ── Admin CRUD ───────────────────────────────────────────────────────────────

def create_slot(db: Session, slot_number: str, location: str = None) -> ParkingSlot:
    slot_number = slot_number.strip()
    if db.query(ParkingSlot).filter(ParkingSlot.slot_number == slot_number).first():
        raise Conflict("Slot number already exists")
    slot = ParkingSlot(slot_number=slot_number, location=location, status="available")
    db.add(slot)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Slot number already exists")
    db.refresh(slot)
    logger.info(f"[SLOT] Created {slot.slot_number}")
    return slot


def update_slot(db: Session, slot_id: int, slot_number: str = None, location: str = None,
                status: str = None) -> ParkingSlot:
    slot = get_slot(db, slot_id)

    if slot_number is not None:
        slot_number = slot_number.strip()
        taken = db.query(ParkingSlot).filter(
            ParkingSlot.slot_number == slot_number, ParkingSlot.id != slot_id
        ).first()
        if taken:
            raise Conflict("Slot number already exists")
        slot.slot_number = slot_number

    if location is not None:
        slot.location = location

    if status is not None and status != slot.status:
        if slot.is_occupied:
            raise InvalidState("Cannot change the status of an occupied slot; release it first")
        if status not in ADMIN_SETTABLE_STATUSES:
            raise ValidationFailed("Status can only be set to available or maintenance")
        slot.status = status

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Slot number already exists")
    db.refresh(slot)
    logger.info(f"[SLOT] Updated {slot.slot_number} status={slot.status}")
    return slot


def delete_slot(db: Session, slot_id: int):
    slot = get_slot(db, slot_id)
    if slot.is_occupied:
        raise InvalidState("Cannot delete occupied slot")
    slot_number = slot.slot_number
    db.delete(slot)
    db.commit()
    logger.info(f"[SLOT] Deleted {slot_number}")


# ── Transitions ──────────────────────────────────────────────────────────────

def bind_slot(db: Session, slot: ParkingSlot, user_id: int, now: datetime = None):
    """Assign inside the caller's transaction. Enforces one slot per user."""
    if slot_held_by(db, user_id):
        raise InvalidState(
            "User already has an assigned slot. Please release the current slot before assigning a new one."
        )
    slot.assign_to(user_id, now=now)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise Conflict("User already has an assigned slot")


def assign_slot(db: Session, slot_id: int, user_id: int) -> ParkingSlot:
    """Admin: bind a slot to a user directly."""
    slot = get_slot(db, slot_id)
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    bind_slot(db, slot, user.id)
    create_notification(db, user.id, "slot_assigned",
                        f"You have been assigned parking slot {slot.slot_number}.")
    db.commit()
    db.refresh(slot)
    logger.info(f"[SLOT] Assigned {slot.slot_number} → user {user.id}")
    return slot


def release_slot(db: Session, user_id: int) -> ParkingSlot:
    """User gives back their slot."""
    slot = db.query(ParkingSlot).filter(
        ParkingSlot.user_id == user_id, ParkingSlot.status == "occupied"
    ).first()
    if not slot:
        raise NotFound("No parking slot assigned to release")
    slot.release()
    create_notification(db, user_id, "slot_released", "You have released your parking slot.")
    db.commit()
    logger.info(f"[SLOT] Released {slot.slot_number} by user {user_id}")
    return slot
