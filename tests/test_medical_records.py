import csv
import io

import pytest

from halo_optom.domain.medical_records.service import REPORT_HEADER

RECORD = {"diagnosis": "Miopia ringan", "prescription": "S -1.25", "notes": "Kontrol 6 bulan <b>lagi</b>"}


@pytest.fixture
def appointment(patient, optometrist, make_appointment):
    return make_appointment(patient, optometrist, status="completed", payment_status="paid")


def write_record(client, auth, user, appointment):
    return client.post("/api/medical-records", headers=auth(user), json={"appointment_id": appointment.id, **RECORD})


def test_optometrist_writes_record_for_own_appointment(client, patient, optometrist, appointment, auth):
    response = write_record(client, auth, optometrist, appointment)

    assert response.status_code == 201
    record = response.json()
    assert record["patient_id"] == patient.id
    assert record["optometrist_id"] == optometrist.id
    assert record["notes"] == "Kontrol 6 bulan lagi"
    assert record["patient"]["name"] == "Budi Santoso"


def test_only_the_treating_optometrist_writes(client, patient, appointment, make_user, auth):
    assert write_record(client, auth, patient, appointment).status_code == 403
    assert write_record(client, auth, make_user("optometris"), appointment).status_code == 403


def test_one_record_per_appointment(client, admin, optometrist, appointment, auth):
    record_id = write_record(client, auth, optometrist, appointment).json()["id"]
    assert write_record(client, auth, optometrist, appointment).status_code == 400

    # Still refused after the first record is soft-deleted
    client.delete(f"/api/admin/medical-records/{record_id}", headers=auth(admin))
    assert write_record(client, auth, optometrist, appointment).status_code == 400


def test_record_access(client, patient, optometrist, appointment, make_user, auth):
    record_id = write_record(client, auth, optometrist, appointment).json()["id"]
    stranger = make_user("pasien")

    assert client.get(f"/api/medical-records/{record_id}", headers=auth(patient)).status_code == 200
    assert client.get(f"/api/medical-records/{record_id}", headers=auth(stranger)).status_code == 403
    assert client.get(f"/api/medical-records/appointment/{appointment.id}", headers=auth(optometrist)).status_code == 200

    assert len(client.get(f"/api/medical-records/patient/{patient.id}", headers=auth(patient)).json()) == 1
    assert client.get(f"/api/medical-records/patient/{patient.id}", headers=auth(stranger)).status_code == 403


def test_soft_deleted_record_disappears(client, admin, patient, optometrist, appointment, auth):
    record_id = write_record(client, auth, optometrist, appointment).json()["id"]

    assert client.delete(f"/api/admin/medical-records/{record_id}", headers=auth(admin)).status_code == 200

    assert client.get(f"/api/medical-records/{record_id}", headers=auth(patient)).status_code == 404
    assert client.get(f"/api/medical-records/patient/{patient.id}", headers=auth(patient)).json() == []
    assert client.get("/api/admin/medical-records", headers=auth(admin)).json()["meta"]["total"] == 0
    assert client.delete(f"/api/admin/medical-records/{record_id}", headers=auth(admin)).status_code == 404


def test_admin_list_update_and_stats(client, admin, patient, optometrist, appointment, auth):
    record_id = write_record(client, auth, optometrist, appointment).json()["id"]

    listing = client.get("/api/admin/medical-records", headers=auth(admin), params={"search": "miopia"}).json()
    assert [r["id"] for r in listing["data"]] == [record_id]
    assert listing["meta"]["totalPages"] == 1

    updated = client.put(
        f"/api/admin/medical-records/{record_id}", headers=auth(admin), json={"diagnosis": "Miopia sedang"}
    )
    assert updated.json()["diagnosis"] == "Miopia sedang"
    assert updated.json()["prescription"] == "S -1.25"

    stats = client.get("/api/admin/medical-records/stats", headers=auth(admin)).json()
    assert stats["totalRecords"] == 1
    assert stats["recentRecords"] == 1
    assert stats["activePatients"] == 1
    assert stats["activeOptometrists"] == 1

    assert client.get("/api/admin/medical-records", headers=auth(optometrist)).status_code == 403


def test_reports(client, admin, optometrist, patient, appointment, auth):
    assert client.get("/api/admin/medical-records/report", headers=auth(admin)).status_code == 404

    write_record(client, auth, optometrist, appointment)

    report = client.get("/api/admin/medical-records/report", headers=auth(admin))
    assert report.status_code == 200
    rows = list(csv.reader(io.StringIO(report.text)))
    assert rows[0] == REPORT_HEADER
    assert rows[1][2:5] == ["Budi Santoso", "Dr. Sari", "Miopia ringan"]

    per_patient = client.get(f"/api/admin/medical-records/patient/{patient.id}/report", headers=auth(admin))
    assert per_patient.status_code == 200
    assert "medical_records_Budi_Santoso_" in per_patient.headers["content-disposition"]

    assert client.get("/api/admin/medical-records/patient/missing/report", headers=auth(admin)).status_code == 404
