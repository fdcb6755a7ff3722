from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from datetime import date, datetime, time
import qrcode
from io import BytesIO
import base64
import json
from telemed.database import get_db
from telemed.models.doctor import Doctor
from telemed.models.appointment import Appointment
from telemed.models.schedule import ScheduleSlot
from telemed.core.lifecycle import (
    APPOINTMENT_TRANSITIONS,
    SCHEDULE_SLOT_TRANSITIONS,
    AppointmentStatus,
    ConsultationType,
    ScheduleSlotStatus,
    validate_transition,
)
from telemed.routers.common import commit_or_500, get_patient_or_404
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["appointments"])

class AppointmentCreate(BaseModel):
    user_id: str
    doctor_id: int
    slot_id: int
    consultation_type: ConsultationType = ConsultationType.VIDEO
    notes: Optional[str] = None

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus

class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    patient_id: int
    consultation_request_id: Optional[int] = None
    date: date
    start_time: time
    end_time: time
    consultation_type: ConsultationType
    status: AppointmentStatus
    qr_code: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None

def appointment_to_response(appointment: Appointment, doctor_name: Optional[str] = None) -> dict:
    return {
        "id": appointment.id,
        "doctor_id": appointment.doctor_id,
        "patient_id": appointment.patient_id,
        "consultation_request_id": appointment.consultation_request_id,
        "date": appointment.date,
        "start_time": appointment.start_time,
        "end_time": appointment.end_time,
        "consultation_type": appointment.consultation_type,
        "status": appointment.status,
        "qr_code": appointment.qr_code,
        "notes": appointment.notes,
        "created_at": appointment.created_at,
        "doctor_name": doctor_name,
        "patient_name": appointment.patient.full_name if appointment.patient else None,
    }

def verification_payload(appointment: Appointment) -> str:
    return json.dumps({
        "appointment_id": appointment.id,
        "patient_id": appointment.patient_id,
        "patient_name": appointment.patient.full_name,
        "appointment_time": datetime.combine(appointment.date, appointment.start_time).isoformat(),
        "status": appointment.status.value
    })

def render_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(version=1, box_size=10, border=5)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = BytesIO()
    img.save(buffered, format="PNG")
    return buffered.getvalue()

def stored_qr_code(appointment: Appointment) -> str:
    return base64.b64encode(render_qr_png(verification_payload(appointment))).decode()

def get_appointment_or_404(db: Session, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).options(
        joinedload(Appointment.patient),
        joinedload(Appointment.doctor)
    ).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )
    return appointment

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment: AppointmentCreate,
    db: Session = Depends(get_db)
):
    """
    Book one of the doctor's available slots directly, without a consultation request.
    """
    patient = get_patient_or_404(db, appointment.user_id)

    slot = db.query(ScheduleSlot).filter(
        ScheduleSlot.id == appointment.slot_id,
        ScheduleSlot.doctor_id == appointment.doctor_id
    ).first()
    if not slot:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule slot not found"
        )

    if slot.status != ScheduleSlotStatus.AVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Time slot is not available"
        )

    db_appointment = Appointment(
        doctor_id=appointment.doctor_id,
        patient_id=patient.id,
        schedule_slot_id=slot.id,
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        consultation_type=appointment.consultation_type,
        status=AppointmentStatus.SCHEDULED,
        notes=appointment.notes
    )
    db_appointment.patient = patient
    db.add(db_appointment)
    slot.status = validate_transition(
        "schedule slot", slot.status, ScheduleSlotStatus.BOOKED, SCHEDULE_SLOT_TRANSITIONS
    )

    # Flush for the id, then embed the verification data as a base64 QR code
    db.flush()
    db_appointment.qr_code = stored_qr_code(db_appointment)
    commit_or_500(db, "book appointment")

    logger.info(f"Appointment {db_appointment.id} booked on slot {slot.id}")
    saved = get_appointment_or_404(db, db_appointment.id)
    return appointment_to_response(saved, saved.doctor.full_name)

@router.get("/patient/{user_id}", response_model=List[AppointmentResponse])
async def get_patient_appointments(
    user_id: str,
    db: Session = Depends(get_db)
):
    patient = get_patient_or_404(db, user_id)
    appointments = db.query(Appointment).filter(
        Appointment.patient_id == patient.id
    ).order_by(Appointment.date, Appointment.start_time).all()

    # Resolve doctor names with one lookup over the collected ids
    doctor_ids = {a.doctor_id for a in appointments}
    doctors = db.query(Doctor).filter(Doctor.id.in_(doctor_ids)).all() if doctor_ids else []
    names = {d.id: d.full_name for d in doctors}

    return [appointment_to_response(a, names.get(a.doctor_id)) for a in appointments]

@router.get("/doctor/{doctor_id}", response_model=List[AppointmentResponse])
async def get_doctor_appointments(
    doctor_id: int,
    db: Session = Depends(get_db)
):
    appointments = db.query(Appointment).options(
        joinedload(Appointment.patient),
        joinedload(Appointment.doctor)
    ).filter(
        Appointment.doctor_id == doctor_id
    ).order_by(Appointment.date, Appointment.start_time).all()
    return [appointment_to_response(a, a.doctor.full_name) for a in appointments]

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db)
):
    appointment = get_appointment_or_404(db, appointment_id)
    return appointment_to_response(appointment, appointment.doctor.full_name)

@router.put("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    db: Session = Depends(get_db)
):
    appointment = get_appointment_or_404(db, appointment_id)
    appointment.status = validate_transition(
        "appointment", appointment.status, payload.status, APPOINTMENT_TRANSITIONS
    )

    # A cancelled booking frees its slot again
    slot = appointment.schedule_slot
    if payload.status == AppointmentStatus.CANCELLED and slot and slot.status == ScheduleSlotStatus.BOOKED:
        slot.status = validate_transition(
            "schedule slot", slot.status, ScheduleSlotStatus.AVAILABLE, SCHEDULE_SLOT_TRANSITIONS
        )

    # The stored code carries the status, keep it in step
    appointment.qr_code = stored_qr_code(appointment)
    commit_or_500(db, "update appointment status")
    appointment = get_appointment_or_404(db, appointment_id)
    return appointment_to_response(appointment, appointment.doctor.full_name)

@router.get("/{appointment_id}/qr-code")
async def get_appointment_qr_code(
    appointment_id: int,
    db: Session = Depends(get_db)
):
    appointment = get_appointment_or_404(db, appointment_id)
    img_bytes = render_qr_png(verification_payload(appointment))
    return Response(content=img_bytes, media_type="image/png")
