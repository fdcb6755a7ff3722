from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session, joinedload
from typing import List, Literal, Optional
from datetime import datetime
from telemed.database import get_db
from telemed.models.patient import Patient
from telemed.models.consultation import ConsultationRequest
from telemed.models.prescription import Prescription
from telemed.core.lifecycle import (
    CONSULTATION_TRANSITIONS,
    ConsultationStatus,
    ConsultationType,
    SlotConfirmationStatus,
    classify_urgency,
    consultation_actions,
    default_confirmation_message,
    validate_transition,
)
from telemed.routers.common import commit_or_500, get_doctor_or_404, get_patient_or_404
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["consultations"])

class PatientProfile(BaseModel):
    full_name: str
    phone: Optional[str] = None
    emergency_contact: Optional[str] = None

class ConsultationRequestCreate(BaseModel):
    user_id: str
    doctor_id: int
    symptoms: str
    consultation_type: ConsultationType = ConsultationType.VIDEO
    request_message: Optional[str] = None
    # Used to create the patient profile on a first request
    patient: Optional[PatientProfile] = None

class DoctorDecision(BaseModel):
    decision: Literal["accept", "reject"]
    message: str

class SessionConfirmation(BaseModel):
    decision: Literal["confirm", "reschedule"]
    message: Optional[str] = None

class PatientSummary(BaseModel):
    full_name: str
    phone: Optional[str] = None
    emergency_contact: Optional[str] = None

    class Config:
        from_attributes = True

class ConsultationRequestResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    symptoms: str
    consultation_type: ConsultationType
    request_message: Optional[str] = None
    status: ConsultationStatus
    doctor_response: Optional[str] = None
    created_at: Optional[datetime] = None
    urgency: str
    actions: List[str]
    patient: Optional[PatientSummary] = None
    doctor_name: Optional[str] = None

class BookingResponse(BaseModel):
    id: int
    kind: Literal["consultation", "prescription_confirmed"]
    patient_id: int
    symptoms: str
    consultation_type: ConsultationType
    status: str
    created_at: Optional[datetime] = None
    scheduled_time: Optional[str] = None
    request_message: Optional[str] = None
    patient: Optional[PatientSummary] = None

def request_to_response(request: ConsultationRequest) -> dict:
    return {
        "id": request.id,
        "patient_id": request.patient_id,
        "doctor_id": request.doctor_id,
        "symptoms": request.symptoms,
        "consultation_type": request.consultation_type,
        "request_message": request.request_message,
        "status": request.status,
        "doctor_response": request.doctor_response,
        "created_at": request.created_at,
        "urgency": classify_urgency(request.symptoms),
        "actions": consultation_actions(request.status),
        "patient": PatientSummary.model_validate(request.patient) if request.patient else None,
        "doctor_name": request.doctor.full_name if request.doctor else None,
    }

def get_request_or_404(db: Session, request_id: int) -> ConsultationRequest:
    request = db.query(ConsultationRequest).options(
        joinedload(ConsultationRequest.patient),
        joinedload(ConsultationRequest.doctor)
    ).filter(ConsultationRequest.id == request_id).first()
    if not request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Consultation request not found"
        )
    return request

def get_or_create_patient(db: Session, user_id: str, profile: Optional[PatientProfile]) -> Patient:
    patient = db.query(Patient).filter(Patient.user_id == user_id).first()
    if patient:
        return patient

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Patient profile not found. Provide patient details to create one."
        )

    patient = Patient(user_id=user_id, **profile.model_dump())
    db.add(patient)
    db.flush()
    logger.info(f"Created patient profile {patient.id} for user {user_id}")
    return patient

@router.post(
    "/api/consultations",
    response_model=ConsultationRequestResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_consultation_request(
    payload: ConsultationRequestCreate,
    db: Session = Depends(get_db)
):
    if not payload.symptoms.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please fill in all required fields."
        )

    doctor = get_doctor_or_404(db, payload.doctor_id)
    if not doctor.available:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Doctor is not accepting consultation requests"
        )

    patient = get_or_create_patient(db, payload.user_id, payload.patient)

    request = ConsultationRequest(
        patient_id=patient.id,
        doctor_id=doctor.id,
        symptoms=payload.symptoms,
        consultation_type=payload.consultation_type,
        request_message=payload.request_message,
        status=ConsultationStatus.PENDING
    )
    db.add(request)
    commit_or_500(db, "send consultation request")

    logger.info(f"Consultation request {request.id} sent to doctor {doctor.id}")
    return request_to_response(get_request_or_404(db, request.id))

@router.get(
    "/api/doctors/{doctor_id}/consultation-requests",
    response_model=List[ConsultationRequestResponse]
)
async def get_doctor_requests(
    doctor_id: int,
    status_filter: Optional[ConsultationStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db)
):
    query = db.query(ConsultationRequest).options(
        joinedload(ConsultationRequest.patient),
        joinedload(ConsultationRequest.doctor)
    ).filter(ConsultationRequest.doctor_id == doctor_id)

    if status_filter:
        query = query.filter(ConsultationRequest.status == status_filter)

    requests = query.order_by(
        ConsultationRequest.created_at.desc(),
        ConsultationRequest.id.desc()
    ).all()
    return [request_to_response(r) for r in requests]

@router.get(
    "/api/patients/{user_id}/consultation-requests",
    response_model=List[ConsultationRequestResponse]
)
async def get_patient_requests(
    user_id: str,
    db: Session = Depends(get_db)
):
    patient = get_patient_or_404(db, user_id)
    requests = db.query(ConsultationRequest).options(
        joinedload(ConsultationRequest.patient),
        joinedload(ConsultationRequest.doctor)
    ).filter(
        ConsultationRequest.patient_id == patient.id
    ).order_by(
        ConsultationRequest.created_at.desc(),
        ConsultationRequest.id.desc()
    ).all()
    return [request_to_response(r) for r in requests]

@router.get("/api/consultations/{request_id}", response_model=ConsultationRequestResponse)
async def get_consultation_request(
    request_id: int,
    db: Session = Depends(get_db)
):
    return request_to_response(get_request_or_404(db, request_id))

@router.put("/api/consultations/{request_id}/respond", response_model=ConsultationRequestResponse)
async def respond_to_request(
    request_id: int,
    payload: DoctorDecision,
    db: Session = Depends(get_db)
):
    """
    Doctor accepts or rejects a pending request with a message to the patient.
    """
    request = get_request_or_404(db, request_id)

    if not payload.message.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A response message is required"
        )

    target = ConsultationStatus.ACCEPTED if payload.decision == "accept" else ConsultationStatus.REJECTED
    request.status = validate_transition(
        "consultation request", request.status, target, CONSULTATION_TRANSITIONS
    )
    request.doctor_response = payload.message
    commit_or_500(db, "update consultation request")

    return request_to_response(get_request_or_404(db, request_id))

@router.put("/api/consultations/{request_id}/confirm", response_model=ConsultationRequestResponse)
async def confirm_session(
    request_id: int,
    payload: SessionConfirmation,
    db: Session = Depends(get_db)
):
    """
    Doctor confirms an accepted session or asks the patient to reschedule.
    """
    request = get_request_or_404(db, request_id)

    confirm = payload.decision == "confirm"
    target = ConsultationStatus.CONFIRMED if confirm else ConsultationStatus.RESCHEDULED
    request.status = validate_transition(
        "consultation request", request.status, target, CONSULTATION_TRANSITIONS
    )

    message = (payload.message or "").strip()
    request.doctor_response = message or default_confirmation_message(
        confirm, request.consultation_type.value
    )
    commit_or_500(db, "send confirmation")

    return request_to_response(get_request_or_404(db, request_id))

@router.get("/api/doctors/{doctor_id}/bookings", response_model=List[BookingResponse])
async def get_bookings(
    doctor_id: int,
    consultation_type: ConsultationType,
    db: Session = Depends(get_db)
):
    """
    Sessions waiting on the doctor: accepted requests of the given modality and
    prescriptions whose proposed slot the patient confirmed.
    """
    accepted = db.query(ConsultationRequest).options(
        joinedload(ConsultationRequest.patient)
    ).filter(
        ConsultationRequest.doctor_id == doctor_id,
        ConsultationRequest.consultation_type == consultation_type,
        ConsultationRequest.status == ConsultationStatus.ACCEPTED
    ).all()

    confirmed_prescriptions = db.query(Prescription).join(
        Prescription.consultation_request
    ).options(
        joinedload(Prescription.consultation_request).joinedload(ConsultationRequest.patient)
    ).filter(
        Prescription.doctor_id == doctor_id,
        ConsultationRequest.consultation_type == consultation_type,
        Prescription.consultation_status == SlotConfirmationStatus.CONFIRMED
    ).all()

    bookings = []
    for request in accepted:
        bookings.append({
            "id": request.id,
            "kind": "consultation",
            "patient_id": request.patient_id,
            "symptoms": request.symptoms,
            "consultation_type": request.consultation_type,
            "status": request.status.value,
            "created_at": request.created_at,
            "scheduled_time": None,
            "request_message": request.request_message,
            "patient": PatientSummary.model_validate(request.patient) if request.patient else None,
        })

    for prescription in confirmed_prescriptions:
        scheduled_time = None
        if prescription.selected_consultation_date and prescription.selected_consultation_time:
            scheduled_time = f"{prescription.selected_consultation_date} {prescription.selected_consultation_time}"
        patient = prescription.consultation_request.patient
        bookings.append({
            "id": prescription.id,
            "kind": "prescription_confirmed",
            "patient_id": prescription.patient_id,
            "symptoms": "Follow-up consultation from prescription",
            "consultation_type": prescription.consultation_request.consultation_type,
            "status": SlotConfirmationStatus.CONFIRMED.value,
            "created_at": prescription.created_at,
            "scheduled_time": scheduled_time,
            "request_message": f"Patient confirmed {consultation_type.value} consultation from prescription",
            "patient": PatientSummary.model_validate(patient) if patient else None,
        })

    bookings.sort(key=lambda b: (b["created_at"] is not None, b["created_at"]), reverse=True)
    return bookings
