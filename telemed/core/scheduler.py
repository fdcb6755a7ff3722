from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
import logging
from telemed.database import SessionLocal
from telemed.models.appointment import Appointment
from telemed.models.schedule import ScheduleSlot
from telemed.core.config import settings
from telemed.core.lifecycle import (
    APPOINTMENT_TRANSITIONS,
    SCHEDULE_SLOT_TRANSITIONS,
    AppointmentStatus,
    ScheduleSlotStatus,
    validate_transition,
)

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()

def _has_ended(model, now: datetime):
    today = now.date()
    return or_(
        model.date < today,
        and_(model.date == today, model.end_time <= now.time())
    )

def complete_elapsed_bookings(db: Session, now: Optional[datetime] = None) -> dict:
    """
    Mark booked slots and confirmed appointments whose end time has passed as completed.
    """
    now = now or datetime.now()
    summary = {"slots_completed": 0, "appointments_completed": 0}

    try:
        slots = db.query(ScheduleSlot).filter(
            ScheduleSlot.status == ScheduleSlotStatus.BOOKED,
            _has_ended(ScheduleSlot, now)
        ).all()
        for slot in slots:
            slot.status = validate_transition(
                "schedule slot", slot.status, ScheduleSlotStatus.COMPLETED, SCHEDULE_SLOT_TRANSITIONS
            )
            summary["slots_completed"] += 1

        appointments = db.query(Appointment).filter(
            Appointment.status == AppointmentStatus.CONFIRMED,
            _has_ended(Appointment, now)
        ).all()
        for appointment in appointments:
            appointment.status = validate_transition(
                "appointment", appointment.status, AppointmentStatus.COMPLETED, APPOINTMENT_TRANSITIONS
            )
            summary["appointments_completed"] += 1

        if slots or appointments:
            db.commit()
            logger.info(f"📊 Booking sweep summary: {summary}")
        else:
            logger.debug("ℹ️ No elapsed bookings to complete")
        return summary

    except Exception as e:
        logger.error(f"❌ Error completing elapsed bookings: {e}")
        db.rollback()
        raise

def sweep_elapsed_bookings():
    db = SessionLocal()
    try:
        complete_elapsed_bookings(db)
    finally:
        db.close()

def start_scheduler():
    # Sweep elapsed bookings periodically
    scheduler.add_job(
        sweep_elapsed_bookings,
        trigger=IntervalTrigger(minutes=settings.SLOT_SWEEP_INTERVAL_MINUTES),
        id='complete_elapsed_bookings',
        replace_existing=True
    )
    scheduler.start()

def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
