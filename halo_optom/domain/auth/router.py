"""Auth router - register, login and token verification"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import AUTH_RATE_LIMIT, AUTH_RATE_LIMIT_WINDOW_SECONDS
from ...database import get_db
from ...models import User
from ...rate_limiter import create_rate_limiter
from .schemas import AuthResponse, LoginRequest, RegisterRequest, VerifyResponse
from .service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

login_rate_limit = create_rate_limiter(
    limit=AUTH_RATE_LIMIT, window_seconds=AUTH_RATE_LIMIT_WINDOW_SECONDS, key_prefix="rate_limit:login"
)
register_rate_limit = create_rate_limiter(
    limit=AUTH_RATE_LIMIT, window_seconds=AUTH_RATE_LIMIT_WINDOW_SECONDS, key_prefix="rate_limit:register"
)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    data: RegisterRequest,
    _: None = Depends(register_rate_limit),
    service: AuthService = Depends(get_auth_service),
):
    token, user = service.register(data)
    return {"token": token, "user": user}


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    _: None = Depends(login_rate_limit),
    service: AuthService = Depends(get_auth_service),
):
    token, user = service.login(data)
    return {"token": token, "user": user}


@router.get("/verify", response_model=VerifyResponse)
async def verify(current_user: User = Depends(get_current_user)):
    return {"valid": True, "user": current_user}


__all__ = ["router"]
