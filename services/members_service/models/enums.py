"""Enum definitions for members service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class MemberStatus(str, enum.Enum):
    PENDING = "pending"
    PENDING_PAYMENT = "pending_payment"
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class PlanStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PauseStatus(str, enum.Enum):
    APPROVED = "approved"
    CANCELLED = "cancelled"


class SubscriptionStatus(str, enum.Enum):
    """Derived on read from the end date, never stored."""

    ACTIVE = "active"
    EXPIRED = "expired"
