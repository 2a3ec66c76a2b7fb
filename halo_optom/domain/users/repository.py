"""User repository - Database operations for users"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import ROLE_ADMIN, User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    @staticmethod
    def list_users(db: Session, role: Optional[str] = None, search: Optional[str] = None) -> list[User]:
        """List users, newest first, with optional role and name/email search"""
        query = db.query(User)
        if role:
            query = query.filter(User.role == role)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        return query.order_by(User.created_at.desc()).all()

    @staticmethod
    def list_by_role(db: Session, role: str) -> list[User]:
        return db.query(User).filter(User.role == role).all()

    @staticmethod
    def admin_exists(db: Session) -> bool:
        return db.query(User.id).filter(User.role == ROLE_ADMIN).first() is not None

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        """Update a user with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete_user(db: Session, user: User) -> None:
        db.delete(user)
        db.commit()

    @staticmethod
    def count(db: Session, role: Optional[str] = None) -> int:
        query = db.query(func.count(User.id))
        if role:
            query = query.filter(User.role == role)
        return query.scalar() or 0
