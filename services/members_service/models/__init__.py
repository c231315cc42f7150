"""Members Service models package.

Re-exports all models and enums so that Alembic and the other services see
every members table on import.
"""

from libs.auth.permissions import RolePermission
from services.members_service.models.admin import AdminAccount
from services.members_service.models.enums import (
    MemberStatus,
    PauseStatus,
    PlanStatus,
    SubscriptionStatus,
)
from services.members_service.models.member import Member, MembershipPause
from services.members_service.models.plan import MembershipPlan

__all__ = [
    "AdminAccount",
    "Member",
    "MemberStatus",
    "MembershipPause",
    "MembershipPlan",
    "PauseStatus",
    "PlanStatus",
    "RolePermission",
    "SubscriptionStatus",
]
