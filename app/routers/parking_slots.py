# app/routers/parking_slots.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.routers.deps import require_approved_user
from app.schemas.parking_slot import ParkingSlotOut
from app.services import slot_service
from app.utils.responses import success_response, serialize, serialize_page

router = APIRouter()


@router.get("/available", summary="Available slots — searchable by slot number")
def available(page: int = 1, limit: int = 10, search: str = "",
              user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    result = slot_service.list_available(db, page, limit, search)
    return success_response(data=serialize_page(ParkingSlotOut, result))


@router.get("/occupied", summary="Occupied slots with holder name and plate")
def occupied(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    return success_response(data=serialize(ParkingSlotOut, slot_service.list_occupied(db)))


@router.get("/my-slot", summary="The caller's assigned slot")
def my_slot(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    return success_response(data=serialize(ParkingSlotOut, slot_service.get_my_slot(db, user.id)))


@router.post("/release", summary="Give back the caller's slot")
def release(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    slot = slot_service.release_slot(db, user.id)
    return success_response("Parking slot released successfully", serialize(ParkingSlotOut, slot))
