# app/routers/admin.py
"""Admin console: profile, dashboards, user approval and slot inventory."""

from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.admin import Admin
from app.routers.deps import require_admin
from app.schemas.auth import ChangePasswordIn, ProfileUpdate
from app.schemas.notification import NotificationOut
from app.schemas.parking_slot import AssignSlotIn, ParkingSlotCreate, ParkingSlotOut, ParkingSlotUpdate
from app.schemas.user import AdminOut, RejectUserIn, UserOut, UserWithSlotOut
from app.services import auth_service, dashboard_service, slot_service, user_service
from app.services.email_service import queue_emails
from app.utils.responses import success_response, serialize, serialize_page

router = APIRouter()


def _stats_out(stats: dict) -> dict:
    return {**stats, "recent_assignments": serialize(ParkingSlotOut, stats["recent_assignments"])}


# ── Profile ──────────────────────────────────────────────────────────────────

@router.get("/profile", summary="Own admin profile")
def get_profile(admin: Admin = Depends(require_admin)):
    return success_response(data=serialize(AdminOut, admin))


@router.put("/profile", summary="Update admin name / email")
def update_profile(body: ProfileUpdate, admin: Admin = Depends(require_admin),
                   db: Session = Depends(get_db)):
    admin = auth_service.update_profile(db, admin, body.name, body.email)
    return success_response("Profile updated successfully", serialize(AdminOut, admin))


@router.put("/change-password", summary="Change admin password")
def change_password(body: ChangePasswordIn, admin: Admin = Depends(require_admin),
                    db: Session = Depends(get_db)):
    auth_service.change_password(db, admin, body.current_password, body.new_password)
    return success_response("Password changed successfully")


# ── Dashboards ───────────────────────────────────────────────────────────────

@router.get("/dashboard", summary="User and slot totals plus recent activity")
def dashboard(admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    data = dashboard_service.admin_dashboard(db)
    return success_response(data={
        **data,
        "recent_notifications": serialize(NotificationOut, data["recent_notifications"]),
    })


@router.get("/parking-stats", summary="Slot counts by status and utilization")
def parking_stats(admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    return success_response(data=_stats_out(dashboard_service.parking_stats(db)))


# ── Users ────────────────────────────────────────────────────────────────────

@router.get("/pending-users", summary="Verified users awaiting approval")
def pending_users(admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    return success_response(data=serialize(UserOut, user_service.list_pending_users(db)))


@router.get("/users", summary="Users — search, filter, sort, paginate")
def list_users(
    page: int = 1,
    limit: int = 10,
    search: str = "",
    plate_number: str = "",
    status: Optional[str] = None,
    sort_by: str = "created_at",
    order: str = "desc",
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = user_service.list_users(db, page, limit, search, plate_number, status, sort_by, order)
    return success_response(data=serialize_page(UserOut, result))


@router.get("/users-with-slots", summary="Every user with their slot, if any")
def users_with_slots(admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    return success_response(data=serialize(UserWithSlotOut, user_service.users_with_slots(db)))


@router.get("/users/{user_id}", summary="One user with their slot")
def get_user(user_id: int, admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    return success_response(data=serialize(UserWithSlotOut, user_service.get_user_with_slot(db, user_id)))


@router.post("/users/{user_id}/approve", summary="Approve a user and assign the first free slot")
def approve_user(user_id: int, background_tasks: BackgroundTasks,
                 admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    user, slot, emails = user_service.approve_user(db, user_id)
    queue_emails(background_tasks, emails)
    return success_response("User approved and slot assigned", {
        "user": serialize(UserOut, user),
        "slot": serialize(ParkingSlotOut, slot),
    })


@router.post("/users/{user_id}/reject", summary="Reject a pending user")
def reject_user(user_id: int, body: RejectUserIn, background_tasks: BackgroundTasks,
                admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    user, emails = user_service.reject_user(db, user_id, body.rejection_reason)
    queue_emails(background_tasks, emails)
    return success_response("User rejected", serialize(UserOut, user))


# ── Parking slots ────────────────────────────────────────────────────────────

@router.get("/parking-slots", summary="Slots — search, status filter, paginate")
def list_slots(page: int = 1, limit: int = 10, search: str = "", status: str = "all",
               admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    result = slot_service.list_slots(db, page, limit, search, status)
    return success_response(data=serialize_page(ParkingSlotOut, result))


@router.get("/parking-slots/all", summary="Every slot with holder info")
def all_slots(admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    return success_response(data=serialize(ParkingSlotOut, slot_service.list_all_slots(db)))


@router.get("/parking-slots/stats", summary="Slot statistics")
def slot_stats(admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    return success_response(data=_stats_out(slot_service.slot_stats(db)))


@router.post("/parking-slots", status_code=status.HTTP_201_CREATED, summary="Create a slot")
def create_slot(body: ParkingSlotCreate, admin: Admin = Depends(require_admin),
                db: Session = Depends(get_db)):
    slot = slot_service.create_slot(db, body.slot_number, body.location)
    return success_response("Parking slot created successfully", serialize(ParkingSlotOut, slot))


@router.put("/parking-slots/{slot_id}", summary="Rename, relocate or change status of a slot")
def update_slot(slot_id: int, body: ParkingSlotUpdate, admin: Admin = Depends(require_admin),
                db: Session = Depends(get_db)):
    slot = slot_service.update_slot(db, slot_id, body.slot_number, body.location, body.status)
    return success_response("Parking slot updated successfully", serialize(ParkingSlotOut, slot))


@router.delete("/parking-slots/{slot_id}", summary="Delete an unoccupied slot")
def delete_slot(slot_id: int, admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    slot_service.delete_slot(db, slot_id)
    return success_response("Parking slot deleted successfully")


@router.post("/parking-slots/{slot_id}/assign", summary="Assign a slot to a user")
def assign_slot(slot_id: int, body: AssignSlotIn, admin: Admin = Depends(require_admin),
                db: Session = Depends(get_db)):
    slot = slot_service.assign_slot(db, slot_id, body.user_id)
    return success_response("Parking slot assigned successfully", serialize(ParkingSlotOut, slot))
