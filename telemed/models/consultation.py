from sqlalchemy import Column, Integer, ForeignKey, DateTime, Enum, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from telemed.database import Base, enum_values
from telemed.core.lifecycle import ConsultationStatus, ConsultationType

class ConsultationRequest(Base):
    __tablename__ = "consultation_requests"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    symptoms = Column(Text, nullable=False)
    consultation_type = Column(Enum(ConsultationType, values_callable=enum_values), default=ConsultationType.VIDEO)
    request_message = Column(Text, nullable=True)
    status = Column(Enum(ConsultationStatus, values_callable=enum_values), default=ConsultationStatus.PENDING)
    doctor_response = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    patient = relationship("Patient", back_populates="consultation_requests")
    doctor = relationship("Doctor", back_populates="consultation_requests")
    prescriptions = relationship("Prescription", back_populates="consultation_request")
