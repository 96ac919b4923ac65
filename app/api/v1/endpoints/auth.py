"""
Auth endpoints — registration, login (token issuance), logout & current user.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.api.v1.deps import get_current_user, get_user_service
from app.core.config import settings
from app.models.user import User
from app.schemas.common import LogoutResponse
from app.schemas.token import TokenResponse
from app.schemas.user import LoginRequest, UserCreate, UserRead
from app.services.user_service import UserService

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserRead, status_code=201)
async def register(
    body: UserCreate,
    service: UserService = Depends(get_user_service),
) -> User:
    """Register a new account holding the default ``User`` role."""
    logger.info("Register request: name=%s email=%s age=%d", body.name, body.email, body.age)
    return await service.register(body.name, body.email, body.password, body.age)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    service: UserService = Depends(get_user_service),
) -> TokenResponse:
    """Authenticate with email/password. Returns the token and sets an HttpOnly cookie."""
    logger.info("Login request: email=%s", body.email)
    user, issued = await service.login(body.email, body.password)

    max_age = int((issued.expires_at - datetime.now(timezone.utc)).total_seconds())
    response.set_cookie(
        key=settings.ACCESS_TOKEN_COOKIE_NAME,
        value=issued.token,
        httponly=True,
        secure=settings.COOKIE_SECURE,  # Set to True in HTTPS production
        samesite="strict",
        max_age=max(max_age, 0),
    )

    return TokenResponse(
        access_token=issued.token,
        expires_at=issued.expires_at,
        user_id=user.id,
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
) -> LogoutResponse:
    """Clear the access-token cookie. The token itself stays valid until it expires."""
    response.delete_cookie(settings.ACCESS_TOKEN_COOKIE_NAME, httponly=True, samesite="strict")
    logger.info("User %s logged out", current_user.id)
    return LogoutResponse(message="Logged out")


@router.get("/me", response_model=UserRead)
async def read_current_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Return profile of the currently authenticated user."""
    return current_user
