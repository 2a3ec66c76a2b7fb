from datetime import timedelta

from halo_optom.auth import create_access_token, parse_duration
from halo_optom.models import ROLE_ADMIN, ROLE_OPTOMETRIST, ROLE_PATIENT

from .conftest import PASSWORD


def test_register_patient_returns_token_and_verified_user(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "  Rina  ", "email": "Rina@Example.com", "password": "secret123", "phone": "0812-3456-7890"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["user"]["email"] == "rina@example.com"
    assert body["user"]["name"] == "Rina"
    assert body["user"]["role"] == ROLE_PATIENT
    assert body["user"]["is_verified"] is True
    assert body["user"]["phone"] == "+6281234567890"
    assert "password_hash" not in body["user"]


def test_register_optometrist_waits_for_verification(client):
    response = client.post(
        "/api/auth/register",
        json={
            "name": "Dr. Andi",
            "email": "andi@example.com",
            "password": "secret123",
            "role": ROLE_OPTOMETRIST,
            "str_number": "STR-001",
        },
    )

    assert response.status_code == 201
    assert response.json()["user"]["is_verified"] is False
    assert response.json()["user"]["str_number"] == "STR-001"


def test_register_rejects_admin_role(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "X", "email": "x@example.com", "password": "secret123", "role": ROLE_ADMIN},
    )
    assert response.status_code == 400


def test_register_duplicate_email_conflicts(client, patient):
    response = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": patient.email, "password": "secret123"},
    )
    assert response.status_code == 409


def test_register_short_password_is_validation_error(client):
    response = client.post(
        "/api/auth/register", json={"name": "X", "email": "x@example.com", "password": "123"}
    )
    assert response.status_code == 422


def test_login_success(client, patient):
    response = client.post("/api/auth/login", json={"email": patient.email, "password": PASSWORD})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == patient.id


def test_login_missing_fields(client):
    assert client.post("/api/auth/login", json={"email": "a@example.com"}).status_code == 400


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert response.status_code == 404


def test_login_wrong_password(client, patient):
    response = client.post("/api/auth/login", json={"email": patient.email, "password": "wrong-password"})
    assert response.status_code == 401


def test_login_deactivated_account(client, make_user):
    user = make_user(ROLE_PATIENT, is_active=False)
    response = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 403


def test_verify_token(client, patient, auth):
    response = client.get("/api/auth/verify", headers=auth(patient))

    assert response.status_code == 200
    assert response.json()["valid"] is True
    assert response.json()["user"]["id"] == patient.id


def test_missing_token_is_unauthorized(client):
    assert client.get("/api/auth/verify").status_code == 401


def test_invalid_token_is_unauthorized(client):
    response = client.get("/api/auth/verify", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_expired_token_sets_header(client, patient):
    token = create_access_token(patient, expires_delta=timedelta(seconds=-10))
    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.headers.get("X-Token-Expired") == "true"


def test_login_is_rate_limited(client):
    from halo_optom.domain.auth import router as auth_router
    from halo_optom.rate_limiter import create_rate_limiter

    client.app.dependency_overrides[auth_router.login_rate_limit] = create_rate_limiter(
        limit=2, window_seconds=60, key_prefix="rate_limit:test-login"
    )

    payload = {"email": "nobody@example.com", "password": PASSWORD}
    statuses = [client.post("/api/auth/login", json=payload).status_code for _ in range(3)]

    assert statuses == [404, 404, 429]


def test_parse_duration():
    assert parse_duration("7d") == timedelta(days=7)
    assert parse_duration("12h") == timedelta(hours=12)
    assert parse_duration("30m") == timedelta(minutes=30)
    assert parse_duration("3600") == timedelta(seconds=3600)
