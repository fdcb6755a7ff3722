from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from datetime import date, datetime, time
from io import BytesIO
from xml.sax.saxutils import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from telemed.database import get_db
from telemed.models.consultation import ConsultationRequest
from telemed.models.prescription import Prescription
from telemed.core.lifecycle import (
    CONSULTATION_TRANSITIONS,
    SCHEDULE_SLOT_TRANSITIONS,
    SLOT_CONFIRMATION_TRANSITIONS,
    ConsultationStatus,
    ConsultationType,
    ScheduleSlotStatus,
    SlotConfirmationStatus,
    prescription_actions,
    prescription_response_message,
    validate_transition,
)
from telemed.routers.common import commit_or_500, get_patient_or_404
from telemed.routers.schedule import query_available_slots
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prescriptions", tags=["prescriptions"])

class PrescriptionCreate(BaseModel):
    doctor_id: int
    consultation_request_id: int
    medications: str
    dosage_instructions: str
    notes: Optional[str] = None
    health_tips: Optional[str] = None
    follow_up_date: Optional[date] = None

class SlotConfirmation(BaseModel):
    user_id: str
    confirm: bool

class PrescriptionResponse(BaseModel):
    id: int
    doctor_id: int
    patient_id: int
    consultation_request_id: int
    medications: str
    dosage_instructions: str
    notes: Optional[str] = None
    health_tips: Optional[str] = None
    follow_up_date: Optional[date] = None
    selected_consultation_date: Optional[date] = None
    selected_consultation_time: Optional[time] = None
    consultation_status: SlotConfirmationStatus
    created_at: Optional[datetime] = None
    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None
    consultation_type: Optional[ConsultationType] = None
    actions: List[str]

def prescription_to_response(prescription: Prescription) -> dict:
    doctor = prescription.doctor
    request = prescription.consultation_request
    return {
        "id": prescription.id,
        "doctor_id": prescription.doctor_id,
        "patient_id": prescription.patient_id,
        "consultation_request_id": prescription.consultation_request_id,
        "medications": prescription.medications,
        "dosage_instructions": prescription.dosage_instructions,
        "notes": prescription.notes,
        "health_tips": prescription.health_tips,
        "follow_up_date": prescription.follow_up_date,
        "selected_consultation_date": prescription.selected_consultation_date,
        "selected_consultation_time": prescription.selected_consultation_time,
        "consultation_status": prescription.consultation_status,
        "created_at": prescription.created_at,
        "doctor_name": doctor.full_name if doctor else None,
        "doctor_specialization": doctor.specialization if doctor else None,
        "consultation_type": request.consultation_type if request else None,
        "actions": prescription_actions(
            prescription.consultation_status,
            prescription.selected_consultation_date
        ),
    }

def _prescription_query(db: Session):
    return db.query(Prescription).options(
        joinedload(Prescription.doctor),
        joinedload(Prescription.patient),
        joinedload(Prescription.consultation_request)
    )

def get_prescription_or_404(db: Session, prescription_id: int) -> Prescription:
    prescription = _prescription_query(db).filter(Prescription.id == prescription_id).first()
    if not prescription:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prescription not found"
        )
    return prescription

@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_prescription(
    prescription: PrescriptionCreate,
    db: Session = Depends(get_db)
):
    """
    Issue a prescription for a consultation request, optionally proposing the
    first free slot on the follow-up date. The prescription, the slot booking
    and the request completion are committed together.
    """
    if not prescription.medications.strip() or not prescription.dosage_instructions.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please fill in all required fields."
        )

    request = db.query(ConsultationRequest).filter(
        ConsultationRequest.id == prescription.consultation_request_id
    ).first()
    if not request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Consultation request not found"
        )

    if request.doctor_id != prescription.doctor_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to prescribe for this consultation request"
        )

    completed = validate_transition(
        "consultation request", request.status, ConsultationStatus.COMPLETED, CONSULTATION_TRANSITIONS
    )

    selected_slot = None
    if prescription.follow_up_date:
        selected_slot = query_available_slots(
            db, prescription.doctor_id, prescription.follow_up_date
        ).first()
        if not selected_slot:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No available slots on the follow-up date. Choose a different date or remove it."
            )

    db_prescription = Prescription(
        doctor_id=prescription.doctor_id,
        patient_id=request.patient_id,
        consultation_request_id=request.id,
        medications=prescription.medications,
        dosage_instructions=prescription.dosage_instructions,
        notes=prescription.notes,
        health_tips=prescription.health_tips,
        follow_up_date=prescription.follow_up_date,
        selected_consultation_date=selected_slot.date if selected_slot else None,
        selected_consultation_time=selected_slot.start_time if selected_slot else None,
        schedule_slot_id=selected_slot.id if selected_slot else None,
        consultation_status=SlotConfirmationStatus.PENDING
    )
    db.add(db_prescription)

    if selected_slot:
        selected_slot.status = validate_transition(
            "schedule slot", selected_slot.status, ScheduleSlotStatus.BOOKED, SCHEDULE_SLOT_TRANSITIONS
        )

    request.status = completed
    request.doctor_response = prescription_response_message(
        db_prescription.selected_consultation_date,
        db_prescription.selected_consultation_time
    )

    commit_or_500(db, "create prescription")
    logger.info(f"Prescription {db_prescription.id} issued for consultation request {request.id}")

    return prescription_to_response(get_prescription_or_404(db, db_prescription.id))

@router.get("/patient/{user_id}", response_model=List[PrescriptionResponse])
async def get_patient_prescriptions(
    user_id: str,
    db: Session = Depends(get_db)
):
    patient = get_patient_or_404(db, user_id)
    prescriptions = _prescription_query(db).filter(
        Prescription.patient_id == patient.id
    ).order_by(Prescription.created_at.desc(), Prescription.id.desc()).all()
    return [prescription_to_response(p) for p in prescriptions]

@router.get("/doctor/{doctor_id}", response_model=List[PrescriptionResponse])
async def get_doctor_prescriptions(
    doctor_id: int,
    db: Session = Depends(get_db)
):
    prescriptions = _prescription_query(db).filter(
        Prescription.doctor_id == doctor_id
    ).order_by(Prescription.created_at.desc(), Prescription.id.desc()).all()
    return [prescription_to_response(p) for p in prescriptions]

@router.get("/{prescription_id}", response_model=PrescriptionResponse)
async def get_prescription(
    prescription_id: int,
    db: Session = Depends(get_db)
):
    return prescription_to_response(get_prescription_or_404(db, prescription_id))

@router.put("/{prescription_id}/consultation", response_model=PrescriptionResponse)
async def answer_consultation_slot(
    prescription_id: int,
    payload: SlotConfirmation,
    db: Session = Depends(get_db)
):
    """
    Patient accepts or declines the follow-up slot proposed with a prescription.
    Declining puts the slot back on the doctor's calendar.
    """
    prescription = get_prescription_or_404(db, prescription_id)

    # Verify the current user is the patient
    if prescription.patient.user_id != payload.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to answer this consultation slot"
        )

    if not prescription.selected_consultation_date:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This prescription has no consultation slot to confirm"
        )

    target = SlotConfirmationStatus.CONFIRMED if payload.confirm else SlotConfirmationStatus.DECLINED
    prescription.consultation_status = validate_transition(
        "consultation slot", prescription.consultation_status, target, SLOT_CONFIRMATION_TRANSITIONS
    )

    if not payload.confirm:
        slot = prescription.schedule_slot
        # Completed slots stay on record
        if slot and slot.status == ScheduleSlotStatus.BOOKED:
            slot.status = validate_transition(
                "schedule slot", slot.status, ScheduleSlotStatus.AVAILABLE, SCHEDULE_SLOT_TRANSITIONS
            )

    commit_or_500(db, "update consultation status")
    return prescription_to_response(get_prescription_or_404(db, prescription_id))

@router.get("/{prescription_id}/pdf")
async def get_prescription_pdf(
    prescription_id: int,
    db: Session = Depends(get_db)
):
    prescription = get_prescription_or_404(db, prescription_id)
    doctor = prescription.doctor
    patient = prescription.patient

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter)
    styles = getSampleStyleSheet()
    story = []

    # Title
    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=24,
        spaceAfter=30
    )
    story.append(Paragraph("Medical Prescription", title_style))

    # Doctor Information
    story.append(Paragraph("Doctor Information:", styles['Heading2']))
    story.append(Paragraph(f"Name: {doctor.full_name}", styles['Normal']))
    story.append(Paragraph(f"Specialization: {doctor.specialization}", styles['Normal']))
    if doctor.license_number:
        story.append(Paragraph(f"License Number: {doctor.license_number}", styles['Normal']))
    story.append(Spacer(1, 20))

    # Patient Information
    story.append(Paragraph("Patient Information:", styles['Heading2']))
    story.append(Paragraph(f"Name: {patient.full_name}", styles['Normal']))
    if patient.phone:
        story.append(Paragraph(f"Phone: {patient.phone}", styles['Normal']))
    story.append(Spacer(1, 20))

    # Medications
    med_table = Table([
        ["Medications", "Dosage Instructions"],
        [Paragraph(escape(prescription.medications), styles["Normal"]),
         Paragraph(escape(prescription.dosage_instructions), styles["Normal"])]
    ])
    med_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 14),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('GRID', (0, 0), (-1, -1), 1, colors.black)
    ]))
    story.append(med_table)
    story.append(Spacer(1, 20))

    for heading, text in (("Notes:", prescription.notes), ("Health Tips:", prescription.health_tips)):
        if text:
            story.append(Paragraph(heading, styles['Heading2']))
            story.append(Paragraph(escape(text), styles["Normal"]))
            story.append(Spacer(1, 20))

    if prescription.follow_up_date:
        story.append(Paragraph(f"Follow-up Date: {prescription.follow_up_date.isoformat()}", styles['Normal']))
    if prescription.selected_consultation_date and prescription.selected_consultation_time:
        story.append(Paragraph(
            f"Consultation Slot: {prescription.selected_consultation_date.isoformat()} "
            f"{prescription.selected_consultation_time.strftime('%H:%M')} "
            f"({prescription.consultation_status.value})",
            styles['Normal']
        ))

    # Date
    if prescription.created_at:
        story.append(Paragraph(f"Date: {prescription.created_at.strftime('%Y-%m-%d %H:%M')}", styles['Normal']))

    # Build PDF
    doc.build(story)

    return Response(
        content=buffer.getvalue(),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="prescription_{prescription_id}.pdf"'}
    )
