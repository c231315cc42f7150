"""Admin login against the configured dashboard credentials."""

import secrets

from fastapi import APIRouter, Request
from libs.auth.security import create_access_token
from libs.common.config import get_settings
from libs.common.exceptions import AuthenticationFailed
from libs.common.logging import get_logger
from libs.common.rate_limit import auth_limit
from services.members_service.schemas import LoginRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


@router.post("/login", response_model=TokenResponse)
@auth_limit
async def login(request: Request, credentials: LoginRequest):
    """
    Exchange the dashboard username/password for a bearer token.
    """
    settings = get_settings()
    username_ok = secrets.compare_digest(
        credentials.username.encode(), settings.ADMIN_USERNAME.encode()
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode(), settings.ADMIN_PASSWORD.encode()
    )
    if not (username_ok and password_ok):
        logger.warning("Failed login attempt for %s", credentials.username)
        raise AuthenticationFailed("Invalid credentials")

    token = create_access_token(subject=credentials.username, role="admin")
    return TokenResponse(token=token)
