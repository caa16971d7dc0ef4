# app/services/notification_service.py
"""
Notification writes and reads.
create_notification() joins the caller's transaction and never commits, so
a notification exists only if the state change that caused it was committed.
"""

from sqlalchemy.orm import Session
from app.models.notification import Notification
from app.utils.exceptions import NotFound
from app.utils.pagination import paginate
from app.utils.logger import get_logger

logger = get_logger(__name__)


def create_notification(db: Session, user_id, notification_type: str, message: str) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=notification_type,
        message=message,
        is_read=False,
        is_system=user_id is None,
    )
    db.add(notification)
    logger.info(f"[NOTIFY][{notification_type}] user={user_id} {message}")
    return notification


def list_for_user(db: Session, user_id: int, page=1, limit=10) -> dict:
    q = (db.query(Notification)
         .filter(Notification.user_id == user_id)
         .order_by(Notification.created_at.desc(), Notification.id.desc()))
    result = paginate(q, page, limit)
    result["unread"] = unread_count(db, user_id)
    return result


def recent_for_user(db: Session, user_id: int, limit: int = 5):
    return (db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit).all())


def unread_count(db: Session, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id, Notification.is_read.is_(False)
    ).count()


def _owned(db: Session, user_id: int, notification_id: int) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id, Notification.user_id == user_id
    ).first()
    if not notification:
        raise NotFound("Notification not found")
    return notification


def mark_read(db: Session, user_id: int, notification_id: int) -> Notification:
    notification = _owned(db, user_id, notification_id)
    notification.is_read = True
    db.commit()
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.user_id == user_id, Notification.is_read.is_(False)
    ).update({Notification.is_read: True}, synchronize_session=False)
    db.commit()
    return updated


def delete_notification(db: Session, user_id: int, notification_id: int):
    db.delete(_owned(db, user_id, notification_id))
    db.commit()
