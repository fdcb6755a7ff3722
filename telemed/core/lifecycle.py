"""
Status vocabularies and transition rules

Consultation requests: pending -> accepted/rejected -> confirmed/rescheduled
Any open request -> completed, only when a prescription is issued
Prescription slot confirmation: pending -> confirmed/declined (once)
Schedule slots: available -> booked -> completed, booked -> available on release
Appointments: scheduled -> confirmed -> completed, cancellable until completed
"""
import enum
import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class ConsultationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CONFIRMED = "confirmed"
    RESCHEDULED = "rescheduled"
    COMPLETED = "completed"


class SlotConfirmationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class ScheduleSlotStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    COMPLETED = "completed"


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ConsultationType(str, enum.Enum):
    VIDEO = "video"
    CHAT = "chat"


CONSULTATION_TRANSITIONS = {
    ConsultationStatus.PENDING: [
        ConsultationStatus.ACCEPTED,
        ConsultationStatus.REJECTED,
        ConsultationStatus.COMPLETED,
    ],
    ConsultationStatus.ACCEPTED: [
        ConsultationStatus.CONFIRMED,
        ConsultationStatus.RESCHEDULED,
        ConsultationStatus.COMPLETED,
    ],
    ConsultationStatus.CONFIRMED: [ConsultationStatus.COMPLETED],
    ConsultationStatus.RESCHEDULED: [ConsultationStatus.COMPLETED],
    ConsultationStatus.REJECTED: [],  # Terminal
    ConsultationStatus.COMPLETED: [],  # Terminal
}

SLOT_CONFIRMATION_TRANSITIONS = {
    SlotConfirmationStatus.PENDING: [
        SlotConfirmationStatus.CONFIRMED,
        SlotConfirmationStatus.DECLINED,
    ],
    SlotConfirmationStatus.CONFIRMED: [],
    SlotConfirmationStatus.DECLINED: [],
}

SCHEDULE_SLOT_TRANSITIONS = {
    ScheduleSlotStatus.AVAILABLE: [ScheduleSlotStatus.BOOKED],
    ScheduleSlotStatus.BOOKED: [ScheduleSlotStatus.AVAILABLE, ScheduleSlotStatus.COMPLETED],
    ScheduleSlotStatus.COMPLETED: [],
}

APPOINTMENT_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: [AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED],
    AppointmentStatus.CONFIRMED: [AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED],
    AppointmentStatus.COMPLETED: [],
    AppointmentStatus.CANCELLED: [],
}

# Actions a client may offer for a request in each state
CONSULTATION_ACTIONS = {
    ConsultationStatus.PENDING: ["accept", "reject", "prescribe"],
    ConsultationStatus.ACCEPTED: ["confirm", "reschedule", "prescribe"],
    ConsultationStatus.CONFIRMED: ["prescribe"],
    ConsultationStatus.RESCHEDULED: ["prescribe"],
    ConsultationStatus.REJECTED: [],
    ConsultationStatus.COMPLETED: [],
}

URGENT_KEYWORDS = ["chest pain", "breathing", "emergency", "severe", "urgent"]


class InvalidTransitionError(ValueError):
    """Raised when a status change is not allowed from the current state."""

    def __init__(self, entity: str, current, target):
        self.entity = entity
        self.current = _value(current)
        self.target = _value(target)
        super().__init__(f"Cannot change {entity} status from '{self.current}' to '{self.target}'")


def _value(status) -> str:
    return status.value if isinstance(status, enum.Enum) else str(status)


def can_transition(current, target, transitions: Dict) -> bool:
    enum_type = type(next(iter(transitions)))
    try:
        current = enum_type(_value(current))
        target = enum_type(_value(target))
    except ValueError:
        return False
    return target in transitions.get(current, [])


def validate_transition(entity: str, current, target, transitions: Dict):
    """Return the target status as an enum member or raise InvalidTransitionError."""
    if not can_transition(current, target, transitions):
        raise InvalidTransitionError(entity, current, target)
    enum_type = type(next(iter(transitions)))
    logger.info(f"{entity} status: {_value(current)} -> {_value(target)}")
    return enum_type(_value(target))


def consultation_actions(status) -> List[str]:
    try:
        return list(CONSULTATION_ACTIONS[ConsultationStatus(_value(status))])
    except ValueError:
        return []


def prescription_actions(consultation_status, selected_date: Optional[object]) -> List[str]:
    # The patient can only answer a proposed slot, and only once
    if selected_date and _value(consultation_status) == SlotConfirmationStatus.PENDING.value:
        return ["confirm", "decline"]
    return []


def slot_actions(status) -> List[str]:
    if _value(status) == ScheduleSlotStatus.AVAILABLE.value:
        return ["delete"]
    return []


def classify_urgency(symptoms: Optional[str]) -> str:
    """Display hint only: 'urgent' when the symptoms mention a red-flag keyword."""
    text = (symptoms or "").lower()
    if any(keyword in text for keyword in URGENT_KEYWORDS):
        return "urgent"
    return "normal"


def default_confirmation_message(confirm: bool, consultation_type: str) -> str:
    if confirm:
        return f"Confirmed! I'm ready to start the {consultation_type} consultation. Please be available."
    return (
        f"Sorry, I need to reschedule this {consultation_type} consultation. "
        "Please contact me to arrange a new time."
    )


def prescription_response_message(slot_date=None, slot_time=None) -> str:
    if slot_date and slot_time:
        return f"Prescription provided with consultation slot scheduled for {slot_date} at {_format_time(slot_time)}"
    return "Prescription provided. Available slots for follow-up consultations shown below."


def _format_time(value) -> str:
    return value.strftime("%H:%M:%S") if hasattr(value, "strftime") else str(value)
