# tests/test_consultations.py
from telemed.core.lifecycle import ConsultationStatus
from telemed.models import ConsultationRequest, Patient


def send_request(client, doctor, user_id="user-1", symptoms="fever and cough", **extra):
    payload = {
        "user_id": user_id,
        "doctor_id": doctor.id,
        "symptoms": symptoms,
        "consultation_type": "video",
        "patient": {"full_name": "Pat Patient", "phone": "555-0100"},
    }
    payload.update(extra)
    return client.post("/api/consultations", json=payload)


def test_create_request_creates_patient_profile(client, db_session, make_doctor):
    doctor = make_doctor()

    response = send_request(client, doctor)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["actions"] == ["accept", "reject", "prescribe"]
    assert body["urgency"] == "normal"
    assert body["patient"]["full_name"] == "Pat Patient"
    assert body["doctor_name"] == "Dr. Test"
    assert db_session.query(Patient).filter(Patient.user_id == "user-1").count() == 1


def test_existing_patient_is_reused(client, db_session, make_doctor, make_patient):
    doctor = make_doctor()
    patient = make_patient()

    response = client.post("/api/consultations", json={
        "user_id": "user-1",
        "doctor_id": doctor.id,
        "symptoms": "rash",
    })

    assert response.status_code == 201
    assert response.json()["patient_id"] == patient.id
    assert db_session.query(Patient).count() == 1


def test_unknown_patient_without_profile_is_rejected(client, make_doctor):
    doctor = make_doctor()

    response = client.post("/api/consultations", json={
        "user_id": "new-user",
        "doctor_id": doctor.id,
        "symptoms": "rash",
    })

    assert response.status_code == 400


def test_blank_symptoms_are_rejected(client, db_session, make_doctor):
    doctor = make_doctor()

    response = send_request(client, doctor, symptoms="   ")

    assert response.status_code == 400
    assert response.json()["detail"] == "Please fill in all required fields."
    assert db_session.query(ConsultationRequest).count() == 0


def test_unavailable_doctor_is_rejected(client, make_doctor):
    doctor = make_doctor(available=False)
    assert send_request(client, doctor).status_code == 400


def test_urgent_symptoms_are_flagged(client, make_doctor):
    doctor = make_doctor()
    body = send_request(client, doctor, symptoms="Severe chest pain since morning").json()
    assert body["urgency"] == "urgent"


def test_accept_then_confirm(client, make_doctor):
    doctor = make_doctor()
    request_id = send_request(client, doctor).json()["id"]

    accepted = client.put(
        f"/api/consultations/{request_id}/respond",
        json={"decision": "accept", "message": "Happy to help"},
    )
    assert accepted.status_code == 200
    body = accepted.json()
    assert body["status"] == "accepted"
    assert body["doctor_response"] == "Happy to help"
    assert "confirm" in body["actions"] and "reschedule" in body["actions"]

    confirmed = client.put(f"/api/consultations/{request_id}/confirm", json={"decision": "confirm"})
    assert confirmed.status_code == 200
    body = confirmed.json()
    assert body["status"] == "confirmed"
    assert body["doctor_response"].startswith("Confirmed! I'm ready to start the video consultation")
    assert body["actions"] == ["prescribe"]


def test_reschedule_keeps_custom_message(client, make_doctor):
    doctor = make_doctor()
    request_id = send_request(client, doctor).json()["id"]
    client.put(f"/api/consultations/{request_id}/respond", json={"decision": "accept", "message": "ok"})

    body = client.put(
        f"/api/consultations/{request_id}/confirm",
        json={"decision": "reschedule", "message": "Can we do Friday?"},
    ).json()

    assert body["status"] == "rescheduled"
    assert body["doctor_response"] == "Can we do Friday?"


def test_reject_is_terminal(client, db_session, make_doctor):
    doctor = make_doctor()
    request_id = send_request(client, doctor).json()["id"]

    rejected = client.put(
        f"/api/consultations/{request_id}/respond",
        json={"decision": "reject", "message": "Please see a specialist"},
    )
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["actions"] == []

    again = client.put(
        f"/api/consultations/{request_id}/respond",
        json={"decision": "accept", "message": "Changed my mind"},
    )
    assert again.status_code == 409
    request = db_session.get(ConsultationRequest, request_id)
    assert request.status == ConsultationStatus.REJECTED
    assert request.doctor_response == "Please see a specialist"


def test_confirm_requires_accepted_request(client, make_doctor):
    doctor = make_doctor()
    request_id = send_request(client, doctor).json()["id"]

    response = client.put(f"/api/consultations/{request_id}/confirm", json={"decision": "confirm"})

    assert response.status_code == 409
    assert client.get(f"/api/consultations/{request_id}").json()["status"] == "pending"


def test_respond_requires_message(client, make_doctor):
    doctor = make_doctor()
    request_id = send_request(client, doctor).json()["id"]

    response = client.put(
        f"/api/consultations/{request_id}/respond",
        json={"decision": "accept", "message": "  "},
    )

    assert response.status_code == 400


def test_unknown_request_is_404(client):
    assert client.get("/api/consultations/9999").status_code == 404
    assert client.put(
        "/api/consultations/9999/respond", json={"decision": "accept", "message": "hi"}
    ).status_code == 404


def test_doctor_requests_filtered_by_status(client, make_doctor):
    doctor = make_doctor()
    first = send_request(client, doctor).json()["id"]
    second = send_request(client, doctor, symptoms="headache").json()["id"]
    client.put(f"/api/consultations/{first}/respond", json={"decision": "accept", "message": "ok"})

    everything = client.get(f"/api/doctors/{doctor.id}/consultation-requests").json()
    assert {r["id"] for r in everything} == {first, second}

    pending = client.get(
        f"/api/doctors/{doctor.id}/consultation-requests", params={"status": "pending"}
    ).json()
    assert [r["id"] for r in pending] == [second]


def test_patient_requests(client, make_doctor):
    doctor = make_doctor()
    request_id = send_request(client, doctor).json()["id"]

    body = client.get("/api/patients/user-1/consultation-requests").json()

    assert [r["id"] for r in body] == [request_id]
    assert client.get("/api/patients/nobody/consultation-requests").status_code == 404


def test_bookings_show_accepted_requests_of_the_modality(client, make_doctor):
    doctor = make_doctor()
    video = send_request(client, doctor).json()["id"]
    chat = send_request(client, doctor, consultation_type="chat").json()["id"]
    send_request(client, doctor, symptoms="still pending")
    for request_id in (video, chat):
        client.put(f"/api/consultations/{request_id}/respond", json={"decision": "accept", "message": "ok"})

    body = client.get(f"/api/doctors/{doctor.id}/bookings", params={"consultation_type": "video"}).json()

    assert [(b["id"], b["kind"]) for b in body] == [(video, "consultation")]
    assert body[0]["patient"]["full_name"] == "Pat Patient"


def test_bookings_require_modality(client, make_doctor):
    doctor = make_doctor()
    assert client.get(f"/api/doctors/{doctor.id}/bookings").status_code == 422
