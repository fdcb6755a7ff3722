from sqlalchemy import Boolean, Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from telemed.database import Base

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, index=True, nullable=True)  # auth provider id
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    specialization = Column(String, nullable=False)
    license_number = Column(String, nullable=True)
    experience_years = Column(Integer, default=0, nullable=False)
    bio = Column(Text, nullable=True)
    available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    consultation_requests = relationship("ConsultationRequest", back_populates="doctor")
    schedule_slots = relationship("ScheduleSlot", back_populates="doctor")
    prescriptions = relationship("Prescription", back_populates="doctor")
    appointments = relationship("Appointment", back_populates="doctor")
