# tests/test_schedule.py
from datetime import date, time, timedelta

from telemed.core.lifecycle import ScheduleSlotStatus


def test_create_slot(client, make_doctor):
    doctor = make_doctor()
    day = (date.today() + timedelta(days=3)).isoformat()

    response = client.post(
        f"/api/doctors/{doctor.id}/schedule",
        json={"date": day, "start_time": "09:00:00", "end_time": "09:30:00"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "available"
    assert body["actions"] == ["delete"]
    assert body["date"] == day


def test_create_slot_rejects_inverted_times(client, make_doctor):
    doctor = make_doctor()

    response = client.post(
        f"/api/doctors/{doctor.id}/schedule",
        json={"date": date.today().isoformat(), "start_time": "10:00:00", "end_time": "09:00:00"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "End time must be after start time"


def test_create_slot_for_unknown_doctor(client):
    response = client.post(
        "/api/doctors/9999/schedule",
        json={"date": date.today().isoformat(), "start_time": "09:00:00", "end_time": "09:30:00"},
    )
    assert response.status_code == 404


def test_available_slots_skip_past_and_booked(client, make_doctor, make_slot):
    doctor = make_doctor()
    make_slot(doctor, days_ahead=-1)
    make_slot(doctor, days_ahead=1, status=ScheduleSlotStatus.BOOKED)
    later = make_slot(doctor, days_ahead=2, start=time(11, 0), end=time(11, 30))
    earlier = make_slot(doctor, days_ahead=2, start=time(9, 0), end=time(9, 30))

    body = client.get(f"/api/doctors/{doctor.id}/available-slots").json()

    assert [s["id"] for s in body] == [earlier.id, later.id]


def test_available_slots_limit_and_day_filter(client, make_doctor, make_slot):
    doctor = make_doctor()
    for hour in range(9, 16):
        make_slot(doctor, days_ahead=1, start=time(hour, 0), end=time(hour, 30))
    other_day = make_slot(doctor, days_ahead=4)

    assert len(client.get(f"/api/doctors/{doctor.id}/available-slots").json()) == 5
    assert len(client.get(f"/api/doctors/{doctor.id}/available-slots", params={"limit": 10}).json()) == 8
    assert client.get(f"/api/doctors/{doctor.id}/available-slots", params={"limit": 11}).status_code == 422

    on_day = client.get(
        f"/api/doctors/{doctor.id}/available-slots",
        params={"on": other_day.date.isoformat()},
    ).json()
    assert [s["id"] for s in on_day] == [other_day.id]


def test_schedule_lists_every_status(client, make_doctor, make_slot):
    doctor = make_doctor()
    make_slot(doctor, status=ScheduleSlotStatus.BOOKED)
    make_slot(doctor, start=time(10, 0), end=time(10, 30))

    body = client.get(f"/api/doctors/{doctor.id}/schedule").json()

    assert [s["status"] for s in body] == ["booked", "available"]
    assert body[0]["actions"] == []


def test_delete_available_slot(client, make_doctor, make_slot):
    doctor = make_doctor()
    slot = make_slot(doctor)

    response = client.delete(f"/api/doctors/{doctor.id}/schedule/{slot.id}")

    assert response.status_code == 200
    assert client.get(f"/api/doctors/{doctor.id}/schedule").json() == []


def test_booked_slot_cannot_be_deleted(client, make_doctor, make_slot):
    doctor = make_doctor()
    slot = make_slot(doctor, status=ScheduleSlotStatus.BOOKED)

    response = client.delete(f"/api/doctors/{doctor.id}/schedule/{slot.id}")

    assert response.status_code == 409
    assert len(client.get(f"/api/doctors/{doctor.id}/schedule").json()) == 1


def test_delete_slot_of_another_doctor_is_404(client, make_doctor, make_slot):
    owner = make_doctor(full_name="Dr. Owner")
    other = make_doctor(full_name="Dr. Other")
    slot = make_slot(owner)

    assert client.delete(f"/api/doctors/{other.id}/schedule/{slot.id}").status_code == 404


def test_available_slots_skip_slots_already_started_today(client, make_doctor, make_slot):
    doctor = make_doctor()
    make_slot(doctor, days_ahead=0, start=time(0, 0), end=time(0, 1))
    tomorrow = make_slot(doctor, days_ahead=1)

    body = client.get(f"/api/doctors/{doctor.id}/available-slots").json()

    assert [s["id"] for s in body] == [tomorrow.id]
