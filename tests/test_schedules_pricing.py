from datetime import date, time

from halo_optom.domain.schedules.service import ScheduleService
from halo_optom.models import ROLE_OPTOMETRIST, Schedule


def test_optometrist_creates_own_schedule(client, optometrist, auth):
    response = client.post(
        "/api/schedules",
        headers=auth(optometrist),
        json={"day_of_week": "Monday", "start_time": "09:00", "end_time": "12:00"},
    )

    assert response.status_code == 201
    assert response.json()["optometrist_id"] == optometrist.id
    assert response.json()["day_of_week"] == "monday"


def test_patient_cannot_manage_schedules(client, patient, auth):
    response = client.post(
        "/api/schedules",
        headers=auth(patient),
        json={"day_of_week": "monday", "start_time": "09:00", "end_time": "12:00"},
    )
    assert response.status_code == 403


def test_admin_must_name_optometrist(client, admin, optometrist, auth):
    slot = {"day_of_week": "monday", "start_time": "09:00", "end_time": "12:00"}

    assert client.post("/api/schedules", headers=auth(admin), json=slot).status_code == 400
    created = client.post(
        "/api/schedules", headers=auth(admin), json={**slot, "optometrist_id": optometrist.id}
    )
    assert created.status_code == 201


def test_start_must_precede_end(client, optometrist, auth):
    response = client.post(
        "/api/schedules",
        headers=auth(optometrist),
        json={"day_of_week": "monday", "start_time": "12:00", "end_time": "09:00"},
    )
    assert response.status_code == 400


def test_overlapping_schedule_conflicts(client, optometrist, auth):
    headers = auth(optometrist)
    client.post(
        "/api/schedules", headers=headers, json={"day_of_week": "monday", "start_time": "09:00", "end_time": "12:00"}
    )

    overlap = client.post(
        "/api/schedules", headers=headers, json={"day_of_week": "monday", "start_time": "11:00", "end_time": "13:00"}
    )
    assert overlap.status_code == 409

    # Touching intervals do not overlap
    adjacent = client.post(
        "/api/schedules", headers=headers, json={"day_of_week": "monday", "start_time": "12:00", "end_time": "14:00"}
    )
    assert adjacent.status_code == 201

    other_day = client.post(
        "/api/schedules", headers=headers, json={"day_of_week": "tuesday", "start_time": "10:00", "end_time": "11:00"}
    )
    assert other_day.status_code == 201


def test_bulk_create_is_all_or_nothing(client, db, optometrist, auth):
    response = client.post(
        "/api/schedules/bulk",
        headers=auth(optometrist),
        json={
            "schedules": [
                {"day_of_week": "monday", "start_time": "09:00", "end_time": "12:00"},
                {"day_of_week": "monday", "start_time": "10:00", "end_time": "11:00"},
            ]
        },
    )

    assert response.status_code == 409
    assert db.query(Schedule).count() == 0

    ok = client.post(
        "/api/schedules/bulk",
        headers=auth(optometrist),
        json={
            "schedules": [
                {"day_of_week": "monday", "start_time": "09:00", "end_time": "12:00"},
                {"day_of_week": "wednesday", "start_time": "09:00", "end_time": "12:00"},
            ]
        },
    )
    assert ok.status_code == 201
    assert len(ok.json()["data"]) == 2


def test_update_and_delete_owned_schedule(client, optometrist, make_user, auth):
    created = client.post(
        "/api/schedules",
        headers=auth(optometrist),
        json={"day_of_week": "friday", "start_time": "09:00", "end_time": "12:00"},
    ).json()

    other = make_user(ROLE_OPTOMETRIST)
    assert client.put(
        f"/api/schedules/{created['id']}", headers=auth(other), json={"is_active": False}
    ).status_code == 403

    updated = client.put(
        f"/api/schedules/{created['id']}", headers=auth(optometrist), json={"end_time": "15:00"}
    )
    assert updated.status_code == 200
    assert updated.json()["end_time"] == "15:00:00"

    assert client.delete(f"/api/schedules/{created['id']}", headers=auth(optometrist)).status_code == 200
    assert client.get(f"/api/schedules/{created['id']}").status_code == 404


def test_available_dates(db, optometrist):
    db.add(Schedule(optometrist_id=optometrist.id, day_of_week="monday", start_time=time(9, 0), end_time=time(12, 0)))
    db.commit()

    # 2026-11-02 is a Monday
    dates = ScheduleService(db).available_dates(optometrist.id, days=14, start=date(2026, 11, 1))

    assert [d["date"] for d in dates] == ["2026-11-02", "2026-11-09"]
    assert all(d["day_of_week"] == "monday" for d in dates)


def test_optometrist_directory(client, db, optometrist, make_user):
    make_user(ROLE_OPTOMETRIST, is_verified=False)
    db.add(Schedule(optometrist_id=optometrist.id, day_of_week="monday", start_time=time(9, 0), end_time=time(12, 0)))
    db.commit()

    listing = client.get("/api/optometrists").json()["data"]
    assert [o["id"] for o in listing] == [optometrist.id]
    assert listing[0]["schedule"] == [{"day": "monday", "time": "09:00 - 12:00"}]

    detail = client.get(f"/api/optometrists/{optometrist.id}")
    assert detail.status_code == 200
    assert detail.json()["data"]["review_count"] == 0

    slots = client.get(f"/api/optometrists/{optometrist.id}/schedules", params={"date": "2026-11-02"})
    assert slots.json()["data"] == [{"time": "09:00 - 12:00", "available": True}]
    none = client.get(f"/api/optometrists/{optometrist.id}/schedules", params={"date": "2026-11-03"})
    assert none.json()["data"] == []

    assert client.get("/api/optometrists/missing").status_code == 404


# ----------------------------------------------------------------------
# Service pricing
# ----------------------------------------------------------------------


def test_pricing_upsert_and_lookup(client, admin, auth):
    created = client.post(
        "/api/services/pricing", headers=auth(admin), json={"type": "online", "method": "video", "base_price": 150000}
    )
    assert created.status_code == 201
    assert created.json()["data"]["base_price"] == 150000

    updated = client.post(
        "/api/services/pricing", headers=auth(admin), json={"type": "online", "method": "video", "base_price": 175000}
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["id"] == created.json()["data"]["id"]

    lookup = client.get("/api/services/pricing/lookup", params={"type": "online", "method": "video"})
    assert lookup.status_code == 200
    assert lookup.json()["data"]["base_price"] == 175000

    assert client.get("/api/services/pricing/lookup", params={"type": "online", "method": "chat"}).status_code == 404
    assert len(client.get("/api/services/pricing").json()["data"]) == 1


def test_homecare_pricing_refused(client, admin, auth):
    response = client.post(
        "/api/services/pricing", headers=auth(admin), json={"type": "homecare", "base_price": 100000}
    )
    assert response.status_code == 400


def test_pricing_validation_and_auth(client, admin, patient, auth):
    negative = client.post(
        "/api/services/pricing", headers=auth(admin), json={"type": "online", "method": "chat", "base_price": -1}
    )
    assert negative.status_code == 422

    forbidden = client.post(
        "/api/services/pricing", headers=auth(patient), json={"type": "online", "method": "chat", "base_price": 1}
    )
    assert forbidden.status_code == 403


def test_inactive_pricing_not_found_by_lookup(client, admin, auth):
    created = client.post(
        "/api/services/pricing", headers=auth(admin), json={"type": "online", "method": "chat", "base_price": 90000}
    ).json()["data"]

    client.put(f"/api/services/pricing/{created['id']}", headers=auth(admin), json={"is_active": False})

    assert client.get("/api/services/pricing/lookup", params={"type": "online", "method": "chat"}).status_code == 404
    assert client.delete(f"/api/services/pricing/{created['id']}", headers=auth(admin)).status_code == 200
