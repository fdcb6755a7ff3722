from telemed.models.doctor import Doctor
from telemed.models.patient import Patient
from telemed.models.consultation import ConsultationRequest
from telemed.models.schedule import ScheduleSlot
from telemed.models.prescription import Prescription
from telemed.models.appointment import Appointment
from telemed.models.feedback import Feedback

__all__ = [
    "Doctor",
    "Patient",
    "ConsultationRequest",
    "ScheduleSlot",
    "Prescription",
    "Appointment",
    "Feedback",
]
