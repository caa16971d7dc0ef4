# app/routers/slot_requests.py
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.admin import Admin
from app.models.user import User
from app.routers.deps import require_admin, require_approved_user
from app.schemas.slot_request import ApproveRequestIn, RejectRequestIn, SlotRequestCreate, SlotRequestOut
from app.schemas.ticket import TicketOut
from app.services import slot_request_service
from app.services.email_service import queue_emails
from app.utils.responses import success_response, serialize, serialize_page

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Request a parking window")
def create_request(body: SlotRequestCreate, user: User = Depends(require_approved_user),
                   db: Session = Depends(get_db)):
    request = slot_request_service.create_request(
        db, user, body.requested_entry_time, body.requested_exit_time, body.reason
    )
    return success_response("Slot request created successfully", serialize(SlotRequestOut, request))


@router.get("", summary="The caller's requests — searchable by slot number")
def my_requests(page: int = 1, limit: int = 10, search: str = "",
                user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    result = slot_request_service.list_for_user(db, user.id, page, limit, search)
    return success_response(data=serialize_page(SlotRequestOut, result))


@router.get("/admin/pending", summary="Pending requests, earliest entry first")
def pending(admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    return success_response(data=serialize(SlotRequestOut, slot_request_service.list_pending(db)))


@router.get("/admin/all", summary="All requests — search, status filter, paginate")
def all_requests(page: int = 1, limit: int = 10, search: str = "", status: Optional[str] = None,
                 admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    result = slot_request_service.list_all(db, page, limit, search, status)
    return success_response(data=serialize_page(SlotRequestOut, result))


@router.post("/admin/approve", summary="Approve a request: bind the slot, issue a ticket")
def approve(body: ApproveRequestIn, background_tasks: BackgroundTasks,
            admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    request, ticket, emails = slot_request_service.approve_request(db, body.request_id, body.slot_id)
    queue_emails(background_tasks, emails)
    return success_response("Slot request approved successfully", {
        "request": serialize(SlotRequestOut, request),
        "ticket": serialize(TicketOut, ticket),
    })


@router.post("/admin/reject", summary="Reject a request with a reason")
def reject(body: RejectRequestIn, background_tasks: BackgroundTasks,
           admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    request, emails = slot_request_service.reject_request(db, body.request_id, body.reason)
    queue_emails(background_tasks, emails)
    return success_response("Slot request rejected successfully", serialize(SlotRequestOut, request))
