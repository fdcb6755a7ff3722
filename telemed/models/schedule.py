from sqlalchemy import Column, Integer, ForeignKey, Date, Time, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from telemed.database import Base, enum_values
from telemed.core.lifecycle import ScheduleSlotStatus

class ScheduleSlot(Base):
    __tablename__ = "doctor_schedule"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(Enum(ScheduleSlotStatus, values_callable=enum_values), default=ScheduleSlotStatus.AVAILABLE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    doctor = relationship("Doctor", back_populates="schedule_slots")
