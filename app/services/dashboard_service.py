# app/services/dashboard_service.py
"""Read-only summaries for the admin and user dashboards."""

from sqlalchemy.orm import Session
from app.models.notification import Notification
from app.models.parking_slot import ParkingSlot
from app.services import notification_service, slot_service, ticket_service, user_service


def admin_dashboard(db: Session) -> dict:
    counts = slot_service.counts_by_status(db)
    total = sum(counts.values())
    recent = (db.query(Notification)
              .order_by(Notification.created_at.desc(), Notification.id.desc())
              .limit(5).all())
    return {
        "users": user_service.user_counts(db),
        "slots": {
            "total": total,
            **counts,
            "utilization_rate": slot_service.utilization_rate(counts["occupied"], total),
        },
        "recent_notifications": recent,
    }


def parking_stats(db: Session) -> dict:
    return slot_service.slot_stats(db)


def user_dashboard(db: Session, user_id: int) -> dict:
    slot = db.query(ParkingSlot).filter(
        ParkingSlot.user_id == user_id,
        ParkingSlot.status == "occupied",
    ).first()
    return {
        "slot": slot,
        "active_ticket": ticket_service.get_active_for_user(db, user_id),
        "notifications": notification_service.recent_for_user(db, user_id),
        "unread_count": notification_service.unread_count(db, user_id),
    }
