import asyncio
from decimal import Decimal

import pytest
from fastapi import HTTPException

from halo_optom.domain.appointments.service import AppointmentService
from halo_optom.models import ChatRoom, Notification, Wallet
from halo_optom.services import videosdk_service

BOOKING = {"type": "online", "method": "chat", "date": "2026-11-02", "start_time": "10:00"}


def balance(db, user):
    db.expire_all()
    wallet = db.query(Wallet).filter(Wallet.user_id == user.id).first()
    return wallet.balance if wallet else None


def pay(db, appointment):
    return asyncio.run(AppointmentService(db).apply_payment_status(appointment, "paid"))


@pytest.fixture
def fake_room(monkeypatch):
    calls = []

    async def create_room():
        calls.append(1)
        return {"roomId": f"room-{len(calls)}"}

    monkeypatch.setattr(videosdk_service, "create_room", create_room)
    return calls


# ----------------------------------------------------------------------
# Booking
# ----------------------------------------------------------------------


def test_patient_books_online_chat_with_price_and_commission(client, patient, optometrist, chat_pricing, auth):
    response = client.post(
        "/api/appointments", headers=auth(patient), json={**BOOKING, "optometrist_id": optometrist.id}
    )

    assert response.status_code == 201
    appointment = response.json()["appointment"]
    assert appointment["status"] == "pending"
    assert appointment["payment_status"] == "unpaid"
    assert appointment["price"] == 100000
    assert appointment["commission_percentage"] == 20
    assert appointment["optometrist"]["id"] == optometrist.id


def test_booking_without_pricing_has_no_price(client, patient, optometrist, auth):
    response = client.post(
        "/api/appointments", headers=auth(patient), json={**BOOKING, "optometrist_id": optometrist.id}
    )
    assert response.status_code == 201
    assert response.json()["appointment"]["price"] is None


def test_online_booking_requires_method(client, patient, optometrist, auth):
    payload = {**BOOKING, "optometrist_id": optometrist.id}
    payload.pop("method")
    assert client.post("/api/appointments", headers=auth(patient), json=payload).status_code == 400


def test_homecare_booking_has_no_method_or_price(client, patient, optometrist, chat_pricing, auth):
    response = client.post(
        "/api/appointments",
        headers=auth(patient),
        json={
            "optometrist_id": optometrist.id,
            "type": "homecare",
            "method": "chat",
            "date": "2026-11-02",
            "start_time": "10:00",
            "location": "Jl. Merdeka 1, Bandung",
        },
    )

    assert response.status_code == 201
    appointment = response.json()["appointment"]
    assert appointment["method"] is None
    assert appointment["price"] is None
    assert appointment["commission_percentage"] == 0


def test_only_patients_book(client, optometrist, make_user, auth):
    other = make_user("optometris")
    response = client.post(
        "/api/appointments", headers=auth(other), json={**BOOKING, "optometrist_id": optometrist.id}
    )
    assert response.status_code == 403


def test_booking_unknown_optometrist(client, patient, auth):
    response = client.post("/api/appointments", headers=auth(patient), json={**BOOKING, "optometrist_id": "nope"})
    assert response.status_code == 404


def test_appointments_are_listed_per_role(client, patient, optometrist, admin, make_user, make_appointment, auth):
    make_appointment(patient, optometrist)
    stranger = make_user("pasien")

    assert len(client.get("/api/appointments", headers=auth(patient)).json()) == 1
    assert len(client.get("/api/appointments", headers=auth(optometrist)).json()) == 1
    assert len(client.get("/api/appointments", headers=auth(admin)).json()) == 1
    assert client.get("/api/appointments", headers=auth(stranger)).json() == []


def test_patients_prefix_serves_same_routes(client, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)
    response = client.get(f"/api/patients/appointments/{appointment.id}", headers=auth(patient))

    assert response.status_code == 200
    assert response.json()["id"] == appointment.id


def test_non_participant_cannot_view(client, patient, optometrist, make_user, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)
    stranger = make_user("pasien")
    assert client.get(f"/api/appointments/{appointment.id}", headers=auth(stranger)).status_code == 403


# ----------------------------------------------------------------------
# Payment transition
# ----------------------------------------------------------------------


def test_payment_credits_commission_once(db, patient, optometrist, make_appointment):
    appointment = make_appointment(patient, optometrist, price=Decimal("100000"), commission_percentage=20)

    pay(db, appointment)
    assert appointment.payment_status == "paid"
    assert appointment.status == "confirmed"
    assert appointment.commission_amount == Decimal("20000.00")
    assert appointment.commission_calculated_at is not None
    assert balance(db, optometrist) == Decimal("20000.00")

    pay(db, appointment)
    assert balance(db, optometrist) == Decimal("20000.00")


def test_paid_appointment_never_returns_to_unpaid(db, patient, optometrist, make_appointment):
    appointment = make_appointment(patient, optometrist)
    pay(db, appointment)

    asyncio.run(AppointmentService(db).apply_payment_status(appointment, "unpaid"))
    assert appointment.payment_status == "paid"


def test_zero_commission_credits_nothing(db, patient, optometrist, make_appointment):
    appointment = make_appointment(patient, optometrist, commission_percentage=0)
    pay(db, appointment)

    assert appointment.payment_status == "paid"
    assert appointment.commission_amount is None
    assert balance(db, optometrist) is None


def test_chat_payment_opens_room_once(db, patient, optometrist, make_appointment):
    appointment = make_appointment(patient, optometrist, method="chat")
    pay(db, appointment)
    pay(db, appointment)

    assert appointment.chat_room_id is not None
    room = db.query(ChatRoom).one()
    assert {p.id for p in room.participants} == {patient.id, optometrist.id}


def test_video_payment_creates_room(db, patient, optometrist, make_appointment, fake_room):
    appointment = make_appointment(patient, optometrist, method="video")
    pay(db, appointment)
    pay(db, appointment)

    assert appointment.video_room_id == "room-1"
    assert len(fake_room) == 1


def test_video_room_failure_retried_on_consultation(client, db, patient, optometrist, make_appointment, monkeypatch, auth):
    async def broken():
        raise HTTPException(status_code=502, detail="Failed to create video room")

    monkeypatch.setattr(videosdk_service, "create_room", broken)
    appointment = make_appointment(patient, optometrist, method="video")
    pay(db, appointment)
    assert appointment.payment_status == "paid"
    assert appointment.video_room_id is None

    async def working():
        return {"roomId": "late-room"}

    monkeypatch.setattr(videosdk_service, "create_room", working)
    response = client.get(f"/api/appointments/{appointment.id}/consultation", headers=auth(patient))

    assert response.status_code == 200
    video = response.json()["data"]["video"]
    assert video["room_id"] == "late-room"
    assert video["token"]


def test_consultation_requires_payment(client, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)
    response = client.get(f"/api/appointments/{appointment.id}/consultation", headers=auth(patient))
    assert response.status_code == 403


def test_next_appointment_includes_chat_room(client, db, patient, optometrist, make_appointment, auth):
    assert client.get("/api/appointments/next", headers=auth(patient)).json() is None

    appointment = make_appointment(patient, optometrist, method="chat")
    pay(db, appointment)

    response = client.get("/api/appointments/next", headers=auth(patient))
    assert response.json()["id"] == appointment.id
    assert response.json()["chat"]["room_id"] == appointment.chat_room_id


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------


def test_status_update_by_optometrist_notifies_patient(client, db, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)

    forbidden = client.patch(
        f"/api/appointments/{appointment.id}/status", headers=auth(patient), json={"status": "confirmed"}
    )
    assert forbidden.status_code == 403

    response = client.patch(
        f"/api/appointments/{appointment.id}/status", headers=auth(optometrist), json={"status": "confirmed"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"
    assert db.query(Notification).filter(Notification.user_id == patient.id).count() == 1


def test_invalid_status_rejected(client, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)
    response = client.patch(
        f"/api/appointments/{appointment.id}/status", headers=auth(optometrist), json={"status": "done"}
    )
    assert response.status_code == 422


def test_reschedule(client, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)
    response = client.patch(
        f"/api/appointments/{appointment.id}/reschedule",
        headers=auth(optometrist),
        json={"date": "2026-11-05", "start_time": "14:00"},
    )

    assert response.status_code == 200
    assert response.json()["date"] == "2026-11-05"
    assert response.json()["start_time"] == "14:00:00"


def test_complete_rules(client, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist, status="confirmed", payment_status="paid")

    assert client.patch(f"/api/appointments/{appointment.id}/complete", headers=auth(patient)).status_code == 403

    done = client.patch(f"/api/appointments/{appointment.id}/complete", headers=auth(optometrist))
    assert done.status_code == 200
    assert done.json()["appointment"]["status"] == "completed"

    again = client.patch(f"/api/appointments/{appointment.id}/complete", headers=auth(optometrist))
    assert again.status_code == 400


def test_complete_does_not_credit_again(client, db, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)
    pay(db, appointment)

    client.patch(f"/api/appointments/{appointment.id}/complete", headers=auth(optometrist))
    assert balance(db, optometrist) == Decimal("20000.00")


def test_patient_cancels_with_reason(client, db, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)

    response = client.post(
        f"/api/appointments/{appointment.id}/cancel", headers=auth(patient), json={"reason": "Sakit"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["cancel_reason"] == "Sakit"
    assert db.query(Notification).filter(Notification.user_id == optometrist.id).count() == 1

    again = client.post(f"/api/appointments/{appointment.id}/cancel", headers=auth(patient), json={})
    assert again.status_code == 400


def test_commission_override_adjusts_wallet_of_paid_appointment(client, db, admin, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)
    pay(db, appointment)

    response = client.patch(
        f"/api/appointments/{appointment.id}/commission",
        headers=auth(admin),
        json={"commission_percentage": 30},
    )

    assert response.status_code == 200
    assert response.json()["commission_amount"] == 30000
    assert balance(db, optometrist) == Decimal("30000.00")


def test_commission_override_on_unpaid_only_stores_percentage(client, db, admin, patient, optometrist, make_appointment, auth):
    appointment = make_appointment(patient, optometrist)
    response = client.patch(
        f"/api/appointments/{appointment.id}/commission",
        headers=auth(admin),
        json={"commission_percentage": 10},
    )

    assert response.json()["commission_percentage"] == 10
    assert response.json()["commission_amount"] is None
    assert balance(db, optometrist) is None
