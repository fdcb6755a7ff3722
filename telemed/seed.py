from datetime import date, time, timedelta
from telemed.database import Base, SessionLocal, engine
from telemed.models import Doctor, ScheduleSlot
from telemed.core.lifecycle import ScheduleSlotStatus

DOCTORS_TO_ADD = [
    {"full_name": "Dr. Anika Rao", "specialization": "Cardiology", "experience_years": 12},
    {"full_name": "Dr. Ben Carter", "specialization": "General Medicine", "experience_years": 4},
    {"full_name": "Dr. Chloe Martin", "specialization": "Psychiatry", "experience_years": 8},
    {"full_name": "Dr. David Okafor", "specialization": "Dermatology", "experience_years": 6},
    {"full_name": "Dr. Elena Petrova", "specialization": "Neurology", "experience_years": 15},
    {"full_name": "Dr. Farid Haddad", "specialization": "Pulmonology", "experience_years": 3},
]

SLOT_TIMES = [(time(9, 0), time(9, 30)), (time(10, 0), time(10, 30)), (time(14, 0), time(14, 30))]

def seed(days: int = 7):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for data in DOCTORS_TO_ADD:
            exists = db.query(Doctor).filter(Doctor.full_name == data["full_name"]).first()
            if exists:
                print(f"Doctor already exists: {data['full_name']}")
                continue
            doctor = Doctor(available=True, bio=f"{data['specialization']} specialist", **data)
            db.add(doctor)
            db.flush()
            for offset in range(1, days + 1):
                for start, end in SLOT_TIMES:
                    db.add(ScheduleSlot(
                        doctor_id=doctor.id,
                        date=date.today() + timedelta(days=offset),
                        start_time=start,
                        end_time=end,
                        status=ScheduleSlotStatus.AVAILABLE
                    ))
            db.commit()
            print(f"Seeded {data['full_name']}")
    finally:
        db.close()

if __name__ == "__main__":
    seed()
