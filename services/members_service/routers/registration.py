"""Public self-registration for new members."""

from fastapi import APIRouter, Depends, Request, status
from libs.auth.security import get_password_hash
from libs.common.datetime_utils import get_today
from libs.common.exceptions import InvalidInput
from libs.common.logging import get_logger
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.members_service.models import Member, MemberStatus
from services.members_service.routers._helpers import member_response
from services.members_service.schemas import MemberRegister, RegistrationResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/members", tags=["registration"])


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
@auth_limit
async def register_member(
    request: Request,
    registration_in: MemberRegister,
    db: AsyncSession = Depends(get_async_db),
    today=Depends(get_today),
):
    """
    Register a member from the public signup page.

    The account starts as ``pending`` until an admin assigns a plan.
    """
    query = select(Member.id).where(Member.email == registration_in.email)
    result = await db.execute(query)
    if result.first() is not None:
        raise InvalidInput("Email already registered")

    member = Member(
        name=registration_in.name,
        email=registration_in.email,
        phone=registration_in.phone,
        password_hash=get_password_hash(registration_in.password),
        status=MemberStatus.PENDING,
    )
    db.add(member)
    await db.commit()
    await db.refresh(member)

    logger.info(
        "Member registered", extra={"extra_fields": {"member_id": str(member.id)}}
    )
    return RegistrationResponse(
        message="Registration successful", member=member_response(member, today)
    )
