# app/routers/tickets.py
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.admin import Admin
from app.models.user import User
from app.routers.deps import require_admin, require_approved_user
from app.schemas.ticket import FeeEstimateOut, TicketIdIn, TicketOut, TimeWindowIn
from app.services import billing, export_service, ticket_service
from app.utils.responses import success_response, serialize, serialize_page

router = APIRouter()


def _csv_response(filename: str, content: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ── User ─────────────────────────────────────────────────────────────────────

@router.get("/my/active", summary="The caller's pending or active ticket")
def my_active(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    ticket = ticket_service.get_active_for_user(db, user.id)
    return success_response(data={"ticket": serialize(TicketOut, ticket)})


@router.get("/my/history", summary="The caller's tickets, newest first")
def my_history(page: int = 1, limit: int = 10, user: User = Depends(require_approved_user),
               db: Session = Depends(get_db)):
    result = ticket_service.history_for_user(db, user.id, page, limit)
    return success_response(data=serialize_page(TicketOut, result))


@router.get("/my/export", summary="The caller's ticket history as CSV")
def my_export(status: Optional[str] = None, start_date: Optional[date] = None,
              end_date: Optional[date] = None, user: User = Depends(require_approved_user),
              db: Session = Depends(get_db)):
    filename, content = export_service.export_user_tickets(db, user.id, status, start_date, end_date)
    return _csv_response(filename, content)


@router.post("/request", status_code=status.HTTP_201_CREATED, summary="Request a ticket for the held slot")
def request_ticket(body: TimeWindowIn, user: User = Depends(require_approved_user),
                   db: Session = Depends(get_db)):
    ticket = ticket_service.create_ticket(db, user, body.requested_entry_time, body.requested_exit_time)
    return success_response("Ticket requested successfully", serialize(TicketOut, ticket))


@router.post("/calculate", summary="Estimate the fee for a planned window")
def calculate(body: TimeWindowIn, user: User = Depends(require_approved_user)):
    result = billing.estimate(body.requested_entry_time, body.requested_exit_time)
    return success_response(data=FeeEstimateOut(**result).model_dump())


# ── Admin ────────────────────────────────────────────────────────────────────

@router.get("/admin/active", summary="Pending and active tickets")
def admin_active(admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    return success_response(data=serialize(TicketOut, ticket_service.admin_active(db)))


@router.get("/admin/all", summary="All tickets — status filter, paginate")
def admin_all(page: int = 1, limit: int = 10, status: Optional[str] = None,
              admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    result = ticket_service.admin_all(db, page, limit, status)
    return success_response(data=serialize_page(TicketOut, result))


@router.get("/admin/export", summary="All tickets as CSV")
def admin_export(status: Optional[str] = None, start_date: Optional[date] = None,
                 end_date: Optional[date] = None, admin: Admin = Depends(require_admin),
                 db: Session = Depends(get_db)):
    filename, content = export_service.export_all_tickets(db, status, start_date, end_date)
    return _csv_response(filename, content)


@router.post("/admin/activate", summary="Vehicle arrived: start the session")
def activate(body: TicketIdIn, admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    ticket = ticket_service.activate_ticket(db, body.ticket_id)
    return success_response("Ticket activated successfully", serialize(TicketOut, ticket))


@router.post("/admin/complete", summary="Vehicle left: bill the session and free the slot")
def complete(body: TicketIdIn, admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    ticket = ticket_service.complete_ticket(db, body.ticket_id)
    return success_response("Ticket completed successfully", serialize(TicketOut, ticket))


@router.post("/admin/cancel", summary="Cancel a pending ticket")
def cancel(body: TicketIdIn, admin: Admin = Depends(require_admin), db: Session = Depends(get_db)):
    ticket = ticket_service.cancel_ticket(db, body.ticket_id)
    return success_response("Ticket cancelled successfully", serialize(TicketOut, ticket))
