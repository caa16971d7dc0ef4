# app/routers/users.py
"""Approved-user self service: dashboard, profile and notifications."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.routers.deps import require_approved_user
from app.schemas.auth import ChangePasswordIn, ProfileUpdate
from app.schemas.notification import NotificationOut
from app.schemas.parking_slot import ParkingSlotOut
from app.schemas.ticket import TicketOut
from app.schemas.user import UserOut
from app.services import auth_service, dashboard_service, notification_service
from app.utils.responses import success_response, serialize, serialize_page

router = APIRouter()


@router.get("/dashboard", summary="Slot, active ticket and latest notifications")
def dashboard(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    data = dashboard_service.user_dashboard(db, user.id)
    return success_response(data={
        "slot": serialize(ParkingSlotOut, data["slot"]),
        "active_ticket": serialize(TicketOut, data["active_ticket"]),
        "notifications": serialize(NotificationOut, data["notifications"]),
        "unread_count": data["unread_count"],
    })


@router.get("/profile", summary="Own profile")
def get_profile(user: User = Depends(require_approved_user)):
    return success_response(data=serialize(UserOut, user))


@router.put("/profile", summary="Update name / email")
def update_profile(body: ProfileUpdate, user: User = Depends(require_approved_user),
                   db: Session = Depends(get_db)):
    user = auth_service.update_profile(db, user, body.name, body.email)
    return success_response("Profile updated successfully", serialize(UserOut, user))


@router.put("/change-password", summary="Change own password")
def change_password(body: ChangePasswordIn, user: User = Depends(require_approved_user),
                    db: Session = Depends(get_db)):
    auth_service.change_password(db, user, body.current_password, body.new_password)
    return success_response("Password changed successfully")


@router.get("/notifications", summary="Own notifications, newest first")
def notifications(page: int = 1, limit: int = 10, user: User = Depends(require_approved_user),
                  db: Session = Depends(get_db)):
    result = notification_service.list_for_user(db, user.id, page, limit)
    return success_response(data=serialize_page(NotificationOut, result))


@router.post("/notifications/read-all", summary="Mark every notification read")
def read_all(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_read(db, user.id)
    return success_response("All notifications marked as read", {"updated": updated})


@router.post("/notifications/{notification_id}/read", summary="Mark one notification read")
def read_one(notification_id: int, user: User = Depends(require_approved_user),
             db: Session = Depends(get_db)):
    notification = notification_service.mark_read(db, user.id, notification_id)
    return success_response("Notification marked as read", serialize(NotificationOut, notification))


@router.delete("/notifications/{notification_id}", summary="Delete one notification")
def delete_one(notification_id: int, user: User = Depends(require_approved_user),
               db: Session = Depends(get_db)):
    notification_service.delete_notification(db, user.id, notification_id)
    return success_response("Notification deleted")
