from sqlalchemy import Column, Integer, ForeignKey, Date, DateTime, Time, Text, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from telemed.database import Base, enum_values
from telemed.core.lifecycle import SlotConfirmationStatus

class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    consultation_request_id = Column(Integer, ForeignKey("consultation_requests.id"), nullable=False)
    medications = Column(Text, nullable=False)
    dosage_instructions = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    health_tips = Column(Text, nullable=True)
    follow_up_date = Column(Date, nullable=True)
    # Snapshot of the chosen slot as shown to the patient
    selected_consultation_date = Column(Date, nullable=True)
    selected_consultation_time = Column(Time, nullable=True)
    # The slot booked for the proposal; released by id on decline
    schedule_slot_id = Column(Integer, ForeignKey("doctor_schedule.id"), nullable=True)
    consultation_status = Column(
        Enum(SlotConfirmationStatus, values_callable=enum_values),
        default=SlotConfirmationStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    doctor = relationship("Doctor", back_populates="prescriptions")
    patient = relationship("Patient", back_populates="prescriptions")
    consultation_request = relationship("ConsultationRequest", back_populates="prescriptions")
    schedule_slot = relationship("ScheduleSlot")
