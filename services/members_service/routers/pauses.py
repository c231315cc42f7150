"""Membership pause and resume endpoints."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.auth.permissions import require_permission
from libs.common.config import get_settings
from libs.common.datetime_utils import get_today
from libs.db.session import get_async_db
from services.members_service.routers._helpers import member_response
from services.members_service.schemas import (
    PauseRequest,
    PauseResponse,
    PauseResult,
    ResumeResult,
)
from services.members_service.services import pause_manager
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members", tags=["pauses"])
settings = get_settings()


@router.post(
    "/{member_id}/pause",
    response_model=PauseResult,
    status_code=status.HTTP_201_CREATED,
)
async def pause_membership(
    member_id: uuid.UUID,
    pause_in: PauseRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """
    Pause an active membership.

    The member's end date is pushed out by the number of paused days.
    """
    pause, member = await pause_manager.request_pause(
        db,
        member_id,
        start_date=pause_in.start_date,
        end_date=pause_in.end_date,
        reason=pause_in.reason,
        actor_id=current_user.user_id,
        today=today,
        max_days=settings.PAUSE_MAX_DAYS,
    )
    await db.commit()
    await db.refresh(pause)
    await db.refresh(member)

    return PauseResult(
        message="Membership paused successfully",
        pause=PauseResponse.model_validate(pause),
        member=member_response(member, today),
    )


@router.post("/{member_id}/resume", response_model=ResumeResult)
async def resume_membership(
    member_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """Resume a paused membership, restoring its original end date."""
    _, member = await pause_manager.resume_membership(
        db, member_id, actor_id=current_user.user_id
    )
    await db.commit()
    await db.refresh(member)

    return ResumeResult(
        message="Membership resumed successfully",
        member=member_response(member, today),
    )


@router.get("/{member_id}/pauses", response_model=list[PauseResponse])
async def list_pauses(
    member_id: uuid.UUID,
    current_user: AuthUser = Depends(require_permission("view_members")),
    db: AsyncSession = Depends(get_async_db),
):
    """Pause history of a member, newest first."""
    return await pause_manager.list_pauses(db, member_id)
