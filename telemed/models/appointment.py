from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Time, Enum
from sqlalchemy.orm import relationship
from telemed.database import Base, enum_values
from sqlalchemy.sql import func
from telemed.core.lifecycle import AppointmentStatus, ConsultationType

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    # Direct bookings are not tied to a consultation request
    consultation_request_id = Column(Integer, ForeignKey("consultation_requests.id"), nullable=True)
    schedule_slot_id = Column(Integer, ForeignKey("doctor_schedule.id"), nullable=True)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    consultation_type = Column(Enum(ConsultationType, values_callable=enum_values), default=ConsultationType.VIDEO)
    status = Column(Enum(AppointmentStatus, values_callable=enum_values), default=AppointmentStatus.SCHEDULED)
    qr_code = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    doctor = relationship("Doctor", back_populates="appointments")
    patient = relationship("Patient", back_populates="appointments")
    schedule_slot = relationship("ScheduleSlot")
