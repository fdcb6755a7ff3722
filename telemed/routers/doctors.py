from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from telemed.database import get_db
from telemed.models.doctor import Doctor
from telemed.core.matching import rank_doctors
from telemed.routers.common import commit_or_500, get_doctor_or_404
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/doctors", tags=["doctors"])

class DoctorResponse(BaseModel):
    id: int
    full_name: str
    specialization: str
    experience_years: int
    bio: Optional[str] = None
    available: bool

    class Config:
        from_attributes = True

class DoctorMatchResponse(DoctorResponse):
    match_score: float
    match_reasons: List[str]

class AvailabilityUpdate(BaseModel):
    available: bool

def _available_doctors(db: Session):
    return db.query(Doctor).filter(Doctor.available == True).order_by(Doctor.full_name)

@router.get("", response_model=List[DoctorResponse])
async def list_doctors(
    specialization: Optional[str] = None,
    db: Session = Depends(get_db)
):
    query = _available_doctors(db)

    if specialization:
        query = query.filter(Doctor.specialization.ilike(f"%{specialization}%"))

    return query.all()

@router.get("/match", response_model=List[DoctorMatchResponse])
async def match_doctors(
    symptoms: str = "",
    category: str = "",
    db: Session = Depends(get_db)
):
    """
    Rank available doctors for the patient's symptoms and optional category.
    """
    doctors = _available_doctors(db).all()
    matches = rank_doctors(symptoms, category, doctors)
    logger.info(f"Matched {len(matches)} doctors for category '{category}'")

    return [
        DoctorMatchResponse(
            **DoctorResponse.model_validate(match.doctor).model_dump(),
            match_score=match.score,
            match_reasons=match.top_reasons,
        )
        for match in matches
    ]

@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(
    doctor_id: int,
    db: Session = Depends(get_db)
):
    return get_doctor_or_404(db, doctor_id)

@router.put("/{doctor_id}/availability", response_model=DoctorResponse)
async def update_availability(
    doctor_id: int,
    payload: AvailabilityUpdate,
    db: Session = Depends(get_db)
):
    doctor = get_doctor_or_404(db, doctor_id)
    doctor.available = payload.available
    commit_or_500(db, "update availability")
    db.refresh(doctor)
    logger.info(f"Doctor {doctor_id} availability set to {doctor.available}")
    return doctor
