from halo_optom.models import ROLE_ADMIN, ROLE_OPTOMETRIST, ROLE_PATIENT, User


def test_setup_admin_only_once(client):
    payload = {"name": "Root", "email": "root@example.com", "password": "secret123"}

    first = client.post("/api/users/setup-admin", json=payload)
    assert first.status_code == 201
    assert first.json()["role"] == ROLE_ADMIN

    second = client.post(
        "/api/users/setup-admin", json={**payload, "email": "root2@example.com"}
    )
    assert second.status_code == 403


def test_profile_me(client, patient, auth):
    response = client.get("/api/users/profile/me", headers=auth(patient))
    assert response.status_code == 200
    assert response.json()["email"] == patient.email


def test_patient_profile_update_ignores_practitioner_fields(client, patient, auth):
    response = client.put(
        "/api/users/profile/update",
        headers=auth(patient),
        json={"bio": "Suka membaca", "str_number": "STR-999"},
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["bio"] == "Suka membaca"
    assert user["str_number"] is None


def test_optometrist_profile_update_keeps_practitioner_fields(client, optometrist, auth):
    response = client.put(
        "/api/users/profile/update",
        headers=auth(optometrist),
        json={"experience": "5 tahun", "str_number": "STR-123"},
    )

    assert response.status_code == 200
    assert response.json()["user"]["str_number"] == "STR-123"


def test_user_management_requires_admin(client, patient, auth):
    assert client.get("/api/users", headers=auth(patient)).status_code == 403


def test_admin_lists_users_by_role(client, admin, patient, optometrist, auth):
    response = client.get("/api/users", params={"role": ROLE_OPTOMETRIST}, headers=auth(admin))

    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [optometrist.id]


def test_admin_creates_optometrist_unverified_by_default(client, admin, auth):
    response = client.post(
        "/api/users",
        headers=auth(admin),
        json={"name": "Dr. Budi", "email": "budi@example.com", "password": "secret123", "role": ROLE_OPTOMETRIST},
    )

    assert response.status_code == 201
    assert response.json()["is_verified"] is False


def test_admin_verifies_user(client, admin, make_user, auth):
    pending = make_user(ROLE_OPTOMETRIST, is_verified=False)
    response = client.patch(f"/api/users/{pending.id}/verify", headers=auth(admin))

    assert response.status_code == 200
    assert response.json()["user"]["is_verified"] is True


def test_toggle_status_blocks_self(client, admin, patient, auth):
    assert client.patch(f"/api/users/{admin.id}/toggle-status", headers=auth(admin)).status_code == 400

    response = client.patch(f"/api/users/{patient.id}/toggle-status", headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["user"]["is_active"] is False

    # Deactivated accounts are refused on authenticated routes
    assert client.get("/api/users/profile/me", headers=auth(patient)).status_code == 403


def test_delete_user(client, db, admin, patient, auth):
    assert client.delete(f"/api/users/{admin.id}", headers=auth(admin)).status_code == 400

    response = client.delete(f"/api/users/{patient.id}", headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["deleted_id"] == patient.id
    assert db.query(User).filter(User.id == patient.id).first() is None


def test_update_commission(client, admin, optometrist, patient, auth):
    response = client.put(
        f"/api/users/{optometrist.id}/commission",
        headers=auth(admin),
        json={"chat_commission_percentage": 30},
    )
    assert response.status_code == 200
    assert response.json()["user"]["chat_commission_percentage"] == 30
    assert response.json()["user"]["video_commission_percentage"] == 25

    not_optometrist = client.put(
        f"/api/users/{patient.id}/commission",
        headers=auth(admin),
        json={"chat_commission_percentage": 30},
    )
    assert not_optometrist.status_code == 400

    empty = client.put(f"/api/users/{optometrist.id}/commission", headers=auth(admin), json={})
    assert empty.status_code == 400


def test_commission_out_of_range(client, admin, optometrist, auth):
    response = client.put(
        f"/api/users/{optometrist.id}/commission",
        headers=auth(admin),
        json={"video_commission_percentage": 150},
    )
    assert response.status_code == 422


def test_admin_dashboard_routes(client, admin, patient, auth):
    users = client.get("/api/admin/users", headers=auth(admin))
    assert users.status_code == 200
    assert {u["role"] for u in users.json()} == {ROLE_ADMIN, ROLE_PATIENT}

    stats = client.get("/api/admin/stats", headers=auth(admin))
    assert stats.status_code == 200
    assert stats.json()["total_users"] == 2
    assert stats.json()["total_orders"] == 0

    deleted = client.delete(f"/api/admin/users/{patient.id}", headers=auth(admin))
    assert deleted.status_code == 200
    assert deleted.json()["deleted_id"] == patient.id
