"""User router - FastAPI endpoints for user management"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from .schemas import CommissionUpdate, ProfileUpdate, SetupAdminRequest, UserCreate, UserResponse, UserUpdate
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


# ============================================================================
# SELF SERVICE
# ============================================================================


@router.post("/setup-admin", response_model=UserResponse, status_code=201)
async def setup_admin(data: SetupAdminRequest, service: UserService = Depends(get_user_service)):
    """Create the first admin account (only while no admin exists)"""
    return service.setup_admin(data)


@router.get("/profile/me", response_model=UserResponse)
async def get_my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile/update")
async def update_my_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.update_profile(current_user, data)
    return {"message": "Profile updated successfully", "user": UserResponse.model_validate(user)}


# ============================================================================
# ADMIN MANAGEMENT
# ============================================================================


@router.get("", response_model=list[UserResponse])
async def list_users(
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.list_users(role=role, search=search)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    data: UserCreate,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.create_user(data)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.get_user(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UserUpdate,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.update_user(user_id, data)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.delete_user(user_id, current_user)


@router.patch("/{user_id}/verify")
async def verify_user(
    user_id: str,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    user = service.verify_user(user_id)
    return {"message": "User verified", "user": UserResponse.model_validate(user)}


@router.patch("/{user_id}/toggle-status")
async def toggle_user_status(
    user_id: str,
    current_user: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    user = service.toggle_status(user_id, current_user)
    state = "activated" if user.is_active else "deactivated"
    return {"message": f"User {state}", "user": UserResponse.model_validate(user)}


@router.put("/{user_id}/commission")
async def update_commission(
    user_id: str,
    data: CommissionUpdate,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    user = service.update_commission(user_id, data)
    return {
        "message": "Commission updated",
        "user": UserResponse.model_validate(user),
    }


__all__ = ["router"]
