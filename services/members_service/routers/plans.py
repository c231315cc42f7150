"""Membership plan management (``/memberships``)."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.common.exceptions import InvalidInput, NotFound
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.members_service.models import (
    Member,
    MembershipPlan,
    MemberStatus,
    PlanStatus,
)
from services.members_service.routers._helpers import dump_changes
from services.members_service.schemas import (
    PlanCreate,
    PlanDetailResponse,
    PlanMember,
    PlanResponse,
    PlanStats,
    PlanUpdate,
)
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/memberships", tags=["memberships"])


async def _get_plan_or_404(db: AsyncSession, plan_id: uuid.UUID) -> MembershipPlan:
    result = await db.execute(select(MembershipPlan).where(MembershipPlan.id == plan_id))
    plan = result.scalar_one_or_none()
    if not plan:
        raise NotFound("Membership type not found")
    return plan


async def _ensure_name_free(
    db: AsyncSession, name: str, exclude_id: Optional[uuid.UUID] = None
) -> None:
    query = select(MembershipPlan.id).where(MembershipPlan.name == name)
    if exclude_id:
        query = query.where(MembershipPlan.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise InvalidInput("Membership type with this name already exists")


@router.get("/", response_model=list[PlanResponse])
async def list_plans(
    status: Optional[PlanStatus] = None,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List plans ordered by price."""
    query = select(MembershipPlan)
    if status:
        query = query.where(MembershipPlan.status == status)
    result = await db.execute(query.order_by(MembershipPlan.price.asc()))
    return result.scalars().all()


@router.get("/stats/overview", response_model=list[PlanStats])
async def plan_stats(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Total and active member counts per plan."""
    query = (
        select(
            MembershipPlan.id,
            MembershipPlan.name,
            MembershipPlan.price,
            func.count(Member.id).label("total_members"),
            func.coalesce(
                func.sum(case((Member.status == MemberStatus.ACTIVE, 1), else_=0)), 0
            ).label("active_members"),
        )
        .outerjoin(Member, Member.membership_type == MembershipPlan.id)
        .group_by(MembershipPlan.id, MembershipPlan.name, MembershipPlan.price)
        .order_by(MembershipPlan.price.asc())
    )
    result = await db.execute(query)
    return [
        PlanStats(
            id=row.id,
            name=row.name,
            price=row.price,
            total_members=row.total_members,
            active_members=row.active_members,
        )
        for row in result.all()
    ]


@router.get("/{plan_id}", response_model=PlanDetailResponse)
async def get_plan(
    plan_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Plan with the ids and names of its members."""
    plan = await _get_plan_or_404(db, plan_id)
    result = await db.execute(
        select(Member.id, Member.name).where(Member.membership_type == plan_id)
    )
    members = [PlanMember(id=row.id, name=row.name) for row in result.all()]
    return PlanDetailResponse(
        **PlanResponse.model_validate(plan).model_dump(), members=members
    )


@router.post("/", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_in: PlanCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    await _ensure_name_free(db, plan_in.name)

    plan = MembershipPlan(**plan_in.model_dump(), created_by=current_user.user_id)
    db.add(plan)
    await db.commit()
    await db.refresh(plan)

    logger.info("Membership plan created", extra={"extra_fields": {"plan": plan.name}})
    return plan


@router.put("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: uuid.UUID,
    plan_in: PlanUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    plan = await _get_plan_or_404(db, plan_id)
    changes = dump_changes(plan_in)
    if changes.get("name") and changes["name"] != plan.name:
        await _ensure_name_free(db, changes["name"], exclude_id=plan.id)

    for field, value in changes.items():
        setattr(plan, field, value)

    await db.commit()
    await db.refresh(plan)
    return plan


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a plan no member references."""
    plan = await _get_plan_or_404(db, plan_id)
    member_count = (
        await db.execute(
            select(func.count(Member.id)).where(Member.membership_type == plan_id)
        )
    ).scalar_one()
    if member_count:
        raise InvalidInput(
            "Cannot delete membership type that is assigned to members",
            member_count=member_count,
        )

    await db.delete(plan)
    await db.commit()
    return {"message": "Membership type deleted successfully"}
