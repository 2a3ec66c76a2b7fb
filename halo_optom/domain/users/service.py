"""User service - Business logic for user management and profiles"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import hash_password
from ...models import ROLE_ADMIN, ROLE_OPTOMETRIST, ROLE_PATIENT, User
from .repository import UserRepository
from .schemas import CommissionUpdate, ProfileUpdate, SetupAdminRequest, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def list_users(self, role: str = None, search: str = None) -> list[User]:
        return self.repo.list_users(self.db, role=role, search=search)

    def get_user(self, user_id: str) -> User:
        user = self.repo.get_by_id(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def get_optometrist(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if user.role != ROLE_OPTOMETRIST:
            raise HTTPException(status_code=400, detail="User is not an optometrist")
        return user

    def _ensure_email_free(self, email: str, exclude_id: str = None):
        existing = self.repo.get_by_email(self.db, email)
        if existing and existing.id != exclude_id:
            raise HTTPException(status_code=409, detail="Email already registered")

    def create_user(self, data: UserCreate) -> User:
        """Admin creates a user of any role"""
        self._ensure_email_free(data.email)

        is_verified = data.is_verified
        if is_verified is None:
            is_verified = data.role != ROLE_OPTOMETRIST

        user = self.repo.create_user(
            self.db,
            name=data.name.strip(),
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role,
            phone=data.phone,
            is_verified=is_verified,
        )
        logger.info(f"👤 User {user.id} created with role {user.role}")
        return user

    def update_user(self, user_id: str, data: UserUpdate) -> User:
        user = self.get_user(user_id)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("email"):
            self._ensure_email_free(updates["email"], exclude_id=user.id)
        return self.repo.update_user(self.db, user, **updates)

    def delete_user(self, user_id: str, current_user: User) -> dict:
        user = self.get_user(user_id)
        if user.id == current_user.id:
            raise HTTPException(status_code=400, detail="You cannot delete your own account")
        self.repo.delete_user(self.db, user)
        logger.info(f"🗑️ User {user_id} deleted by admin {current_user.id}")
        return {"message": "User deleted", "deleted_id": user_id}

    def verify_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        user.is_verified = True
        self.db.commit()
        self.db.refresh(user)
        return user

    def toggle_status(self, user_id: str, current_user: User) -> User:
        user = self.get_user(user_id)
        if user.id == current_user.id:
            raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
        user.is_active = not user.is_active
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user_id} is_active -> {user.is_active}")
        return user

    def update_commission(self, user_id: str, data: CommissionUpdate) -> User:
        user = self.get_optometrist(user_id)
        if data.chat_commission_percentage is None and data.video_commission_percentage is None:
            raise HTTPException(status_code=400, detail="No commission percentage provided")
        if data.chat_commission_percentage is not None:
            user.chat_commission_percentage = data.chat_commission_percentage
        if data.video_commission_percentage is not None:
            user.video_commission_percentage = data.video_commission_percentage
        self.db.commit()
        self.db.refresh(user)
        return user

    def setup_admin(self, data: SetupAdminRequest) -> User:
        """Create the first admin; refused once any admin exists"""
        if self.repo.admin_exists(self.db):
            raise HTTPException(status_code=403, detail="Admin account already exists")
        self._ensure_email_free(data.email)
        user = self.repo.create_user(
            self.db,
            name=data.name.strip(),
            email=data.email,
            password_hash=hash_password(data.password),
            role=ROLE_ADMIN,
            is_verified=True,
        )
        logger.info(f"🔐 Initial admin {user.id} created")
        return user

    def update_profile(self, user: User, data: ProfileUpdate) -> User:
        updates = data.model_dump(exclude_unset=True)
        if updates.get("email"):
            self._ensure_email_free(updates["email"], exclude_id=user.id)
        if user.role == ROLE_PATIENT:
            # Practitioner fields only apply to optometrists
            for field in ("experience", "certifications", "str_number"):
                updates.pop(field, None)
        return self.repo.update_user(self.db, user, **updates)
