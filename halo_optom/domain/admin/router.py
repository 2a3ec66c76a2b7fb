"""Admin router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from ..users.schemas import UserResponse
from .service import AdminService

router = APIRouter(prefix="/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    return AdminService(db)


@router.get("/users", response_model=list[UserResponse])
async def list_users(_: User = Depends(require_admin), service: AdminService = Depends(get_admin_service)):
    return service.list_users()


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    current_user: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    deleted_id = service.delete_user(user_id, current_user)
    return {"message": "User deleted", "deleted_id": deleted_id}


@router.get("/stats")
async def dashboard_stats(_: User = Depends(require_admin), service: AdminService = Depends(get_admin_service)):
    return service.dashboard_stats()


__all__ = ["router"]
