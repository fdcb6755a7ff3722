from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import time, datetime, date
from telemed.database import get_db
from telemed.models.schedule import ScheduleSlot
from telemed.core.lifecycle import ScheduleSlotStatus, slot_actions
from telemed.routers.common import commit_or_500, get_doctor_or_404
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/doctors", tags=["schedule"])

class ScheduleSlotCreate(BaseModel):
    date: date
    start_time: time
    end_time: time

class ScheduleSlotResponse(ScheduleSlotCreate):
    id: int
    doctor_id: int
    status: ScheduleSlotStatus
    actions: List[str] = []

def slot_to_response(slot: ScheduleSlot) -> dict:
    return {
        "id": slot.id,
        "doctor_id": slot.doctor_id,
        "date": slot.date,
        "start_time": slot.start_time,
        "end_time": slot.end_time,
        "status": slot.status,
        "actions": slot_actions(slot.status),
    }

def query_available_slots(db: Session, doctor_id: int, on: Optional[date] = None):
    """Upcoming available slots of a doctor, earliest first."""
    now = datetime.now()
    query = db.query(ScheduleSlot).filter(
        ScheduleSlot.doctor_id == doctor_id,
        ScheduleSlot.status == ScheduleSlotStatus.AVAILABLE,
        or_(
            ScheduleSlot.date > now.date(),
            and_(ScheduleSlot.date == now.date(), ScheduleSlot.start_time > now.time())
        )
    )
    if on:
        query = query.filter(ScheduleSlot.date == on)
    return query.order_by(ScheduleSlot.date, ScheduleSlot.start_time)

@router.post("/{doctor_id}/schedule", response_model=ScheduleSlotResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule_slot(
    doctor_id: int,
    slot: ScheduleSlotCreate,
    db: Session = Depends(get_db)
):
    get_doctor_or_404(db, doctor_id)

    # Validate time slot
    if slot.start_time >= slot.end_time:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End time must be after start time"
        )

    db_slot = ScheduleSlot(
        doctor_id=doctor_id,
        status=ScheduleSlotStatus.AVAILABLE,
        **slot.model_dump()
    )

    db.add(db_slot)
    commit_or_500(db, "create schedule slot")
    db.refresh(db_slot)
    logger.info(f"Doctor {doctor_id} added slot {db_slot.date} {db_slot.start_time}-{db_slot.end_time}")
    return slot_to_response(db_slot)

@router.get("/{doctor_id}/schedule", response_model=List[ScheduleSlotResponse])
async def get_schedule(
    doctor_id: int,
    db: Session = Depends(get_db)
):
    slots = db.query(ScheduleSlot).filter(
        ScheduleSlot.doctor_id == doctor_id
    ).order_by(ScheduleSlot.date, ScheduleSlot.start_time).all()
    return [slot_to_response(slot) for slot in slots]

@router.get("/{doctor_id}/available-slots", response_model=List[ScheduleSlotResponse])
async def get_available_slots(
    doctor_id: int,
    limit: int = Query(5, ge=1, le=10),
    on: Optional[date] = None,
    db: Session = Depends(get_db)
):
    """
    Returns the doctor's next available consultation slots, from today on.
    """
    slots = query_available_slots(db, doctor_id, on).limit(limit).all()
    return [slot_to_response(slot) for slot in slots]

@router.delete("/{doctor_id}/schedule/{slot_id}")
async def delete_schedule_slot(
    doctor_id: int,
    slot_id: int,
    db: Session = Depends(get_db)
):
    db_slot = db.query(ScheduleSlot).filter(
        ScheduleSlot.id == slot_id,
        ScheduleSlot.doctor_id == doctor_id
    ).first()

    if not db_slot:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule slot not found"
        )

    # Booked and completed slots stay on record
    if "delete" not in slot_actions(db_slot.status):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Only available slots can be deleted"
        )

    db.delete(db_slot)
    commit_or_500(db, "delete schedule slot")
    return {"message": "Schedule slot deleted successfully"}
