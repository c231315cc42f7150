"""Admin account endpoints: login, register, profile."""

import uuid

from fastapi import APIRouter, Depends, Request, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.auth.security import create_access_token, get_password_hash, verify_password
from libs.common.exceptions import AuthenticationFailed, InvalidInput, NotFound
from libs.common.logging import get_logger
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.members_service.models import AdminAccount
from services.members_service.schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminRegisterRequest,
    AdminResponse,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin"])
logger = get_logger(__name__)


@router.post("/login", response_model=AdminLoginResponse)
@auth_limit
async def admin_login(
    request: Request,
    credentials: AdminLoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Log in with an admin account from the ``admins`` table."""
    result = await db.execute(
        select(AdminAccount).where(AdminAccount.email == credentials.email)
    )
    admin = result.scalar_one_or_none()
    if not admin or not verify_password(credentials.password, admin.password_hash):
        raise AuthenticationFailed("Invalid credentials")

    token = create_access_token(
        subject=str(admin.id),
        role="admin",
        additional_claims={"email": admin.email, "name": admin.name},
    )
    return AdminLoginResponse(token=token, admin=AdminResponse.model_validate(admin))


@router.post(
    "/register", response_model=AdminResponse, status_code=status.HTTP_201_CREATED
)
async def register_admin(
    payload: AdminRegisterRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create another admin account (admin only)."""
    result = await db.execute(
        select(AdminAccount.id).where(AdminAccount.email == payload.email)
    )
    if result.first() is not None:
        raise InvalidInput("Admin already exists")

    admin = AdminAccount(
        email=payload.email,
        name=payload.name,
        password_hash=get_password_hash(payload.password),
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)

    logger.info(
        "Admin account created",
        extra={"extra_fields": {"admin_id": str(admin.id), "by": current_user.user_id}},
    )
    return admin


@router.get("/profile", response_model=AdminResponse)
async def get_admin_profile(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Return the calling admin's account."""
    try:
        admin_id = uuid.UUID(current_user.user_id)
    except ValueError:
        raise NotFound("Admin not found")

    result = await db.execute(select(AdminAccount).where(AdminAccount.id == admin_id))
    admin = result.scalar_one_or_none()
    if not admin:
        raise NotFound("Admin not found")
    return admin
