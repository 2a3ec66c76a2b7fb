"""Auth service - registration and credential checks"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import create_access_token, hash_password, verify_password
from ...models import ROLE_OPTOMETRIST, ROLE_PATIENT, User
from ..users.repository import UserRepository
from .schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = (ROLE_PATIENT, ROLE_OPTOMETRIST)


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def register(self, data: RegisterRequest) -> tuple[str, User]:
        role = data.role or ROLE_PATIENT
        if role not in SELF_REGISTER_ROLES:
            raise HTTPException(status_code=400, detail="Invalid role, only pasien or optometris can register")

        if self.repo.get_by_email(self.db, data.email):
            raise HTTPException(status_code=409, detail="Email already registered")

        user = self.repo.create_user(
            self.db,
            name=data.name.strip(),
            email=data.email,
            password_hash=hash_password(data.password),
            role=role,
            phone=data.phone,
            date_of_birth=data.date_of_birth,
            gender=data.gender,
            address=data.address,
            str_number=data.str_number,
            # Patients are usable at once, optometrists wait for admin verification
            is_verified=role == ROLE_PATIENT,
        )
        logger.info(f"✅ Registered {role} {user.id}")
        return create_access_token(user), user

    def login(self, data: LoginRequest) -> tuple[str, User]:
        if not data.email or not data.password:
            raise HTTPException(status_code=400, detail="Email and password are required")

        user = self.repo.get_by_email(self.db, data.email.strip())
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        if not verify_password(data.password, user.password_hash):
            logger.warning(f"⚠️ Failed login for user {user.id}")
            raise HTTPException(status_code=401, detail="Invalid credentials")

        if not user.is_active:
            raise HTTPException(status_code=403, detail="Account is deactivated")

        return create_access_token(user), user
