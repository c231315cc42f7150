"""Shared helper functions for members service routers."""

from datetime import date

from services.members_service.models import Member
from services.members_service.schemas import MemberResponse
from services.members_service.services.subscription import evaluate_subscription


def member_response(member: Member, today: date) -> MemberResponse:
    """Serialize a member together with its derived subscription state."""
    state = evaluate_subscription(member.end_date, today)
    return MemberResponse.model_validate(member).model_copy(update=state.as_dict())


def dump_changes(payload) -> dict:
    """Return only the fields the client actually sent, nested models as dicts."""
    return payload.model_dump(exclude_unset=True)
