import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["XENDIT_WEBHOOK_VERIFICATION_TOKEN"] = "test-webhook-token"
os.environ["VIDEOSDK_API_KEY"] = "test-videosdk-key"
os.environ["VIDEOSDK_SECRET_KEY"] = "test-videosdk-secret"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from datetime import date, time  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from halo_optom.auth import create_access_token, hash_password  # noqa: E402
from halo_optom.database import Base, SessionLocal, engine, get_db  # noqa: E402
from halo_optom.main import app  # noqa: E402
from halo_optom.models import (  # noqa: E402
    ROLE_ADMIN,
    ROLE_OPTOMETRIST,
    ROLE_PATIENT,
    Appointment,
    Product,
    ServicePricing,
    User,
)
from halo_optom.rate_limiter import reset_rate_limits  # noqa: E402

PASSWORD = "secret123"
_PASSWORD_HASH = None


def password_hash():
    global _PASSWORD_HASH
    if _PASSWORD_HASH is None:
        _PASSWORD_HASH = hash_password(PASSWORD)
    return _PASSWORD_HASH


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    reset_rate_limits()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=ROLE_PATIENT, **kwargs):
        counter["n"] += 1
        fields = {
            "name": f"{role.title()} {counter['n']}",
            "email": f"{role}{counter['n']}@example.com",
            "password_hash": password_hash(),
            "role": role,
            "is_verified": True,
        }
        fields.update(kwargs)
        user = User(**fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def patient(make_user):
    return make_user(ROLE_PATIENT, name="Budi Santoso")


@pytest.fixture
def optometrist(make_user):
    return make_user(
        ROLE_OPTOMETRIST,
        name="Dr. Sari",
        chat_commission_percentage=20,
        video_commission_percentage=25,
    )


@pytest.fixture
def admin(make_user):
    return make_user(ROLE_ADMIN, name="Admin")


@pytest.fixture
def auth():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture
def chat_pricing(db):
    pricing = ServicePricing(type="online", method="chat", base_price=Decimal("100000"), is_active=True)
    db.add(pricing)
    db.commit()
    return pricing


@pytest.fixture
def make_appointment(db):
    def _make(patient, optometrist, **kwargs):
        fields = {
            "patient_id": patient.id,
            "optometrist_id": optometrist.id,
            "type": "online",
            "method": "chat",
            "date": date(2026, 11, 2),
            "start_time": time(10, 0),
            "status": "pending",
            "payment_status": "unpaid",
            "price": Decimal("100000"),
            "commission_percentage": 20,
        }
        fields.update(kwargs)
        appointment = Appointment(**fields)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def make_product(db):
    def _make(**kwargs):
        fields = {"name": "Kacamata Baca", "price": Decimal("150000"), "stock": 10, "is_active": True}
        fields.update(kwargs)
        product = Product(**fields)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make
