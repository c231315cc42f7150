"""Payments Service schemas package."""

from services.payments_service.schemas.main import (
    DuePayment,
    LastPayment,
    MemberPaymentsResponse,
    MemberPaymentStats,
    NotificationBucket,
    NotificationResponse,
    NotificationResults,
    PaymentCreate,
    PaymentDetailResponse,
    PaymentHistoryEntry,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentListItem,
    PaymentListResponse,
    PaymentMemberSummary,
    PaymentResponse,
    PaymentStatsResponse,
    SubscriptionPeriod,
    UpcomingRenewal,
    WebhookAck,
)

__all__ = [
    "DuePayment",
    "LastPayment",
    "MemberPaymentStats",
    "MemberPaymentsResponse",
    "NotificationBucket",
    "NotificationResponse",
    "NotificationResults",
    "PaymentCreate",
    "PaymentDetailResponse",
    "PaymentHistoryEntry",
    "PaymentIntentRequest",
    "PaymentIntentResponse",
    "PaymentListItem",
    "PaymentListResponse",
    "PaymentMemberSummary",
    "PaymentResponse",
    "PaymentStatsResponse",
    "SubscriptionPeriod",
    "UpcomingRenewal",
    "WebhookAck",
]
