"""Role based permission checks.

Admins pass every check. Any other role must have a matching row in
``role_permissions``.

Usage:
    @router.get("/")
    async def list_payments(
        current_user: AuthUser = Depends(require_permission("view_payments")),
    ): ...
"""

import uuid
from typing import Callable

from fastapi import Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.exceptions import PermissionDenied
from libs.common.logging import get_logger
from libs.db.base import Base
from libs.db.session import get_async_db
from sqlalchemy import String, UniqueConstraint, Uuid, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

logger = get_logger(__name__)


class RolePermission(Base):
    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role", "permission_name"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    role: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    permission_name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self):
        return f"<RolePermission {self.role}:{self.permission_name}>"


async def has_permission(db: AsyncSession, role: str, permission_name: str) -> bool:
    if role == "admin":
        return True
    result = await db.execute(
        select(RolePermission.id).where(
            RolePermission.role == role,
            RolePermission.permission_name == permission_name,
        )
    )
    return result.first() is not None


def require_permission(permission_name: str) -> Callable:
    """Build a dependency that enforces ``permission_name`` for the caller."""

    async def _check(
        current_user: AuthUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_db),
    ) -> AuthUser:
        if not await has_permission(db, current_user.role, permission_name):
            logger.info(
                "Permission denied",
                extra={
                    "extra_fields": {
                        "role": current_user.role,
                        "permission": permission_name,
                    }
                },
            )
            raise PermissionDenied()
        return current_user

    return _check
