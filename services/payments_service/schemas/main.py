import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.schemas import RequestModel
from pydantic import BaseModel, ConfigDict, Field
from services.payments_service.models import PaymentMethod, PaymentStatus, PaymentType


class PaymentCreate(RequestModel):
    member_id: uuid.UUID
    amount: float = Field(..., ge=0)
    payment_date: date
    payment_method: PaymentMethod
    payment_type: PaymentType
    notes: Optional[str] = None
    subscription_months: int = Field(default=1, ge=1, le=36)


class PaymentResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    amount: float
    payment_date: date
    payment_method: PaymentMethod
    payment_type: PaymentType
    status: PaymentStatus
    notes: Optional[str] = None
    stripe_payment_id: Optional[str] = None
    recorded_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentMemberSummary(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    membership_type: Optional[uuid.UUID] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentListItem(PaymentResponse):
    member: Optional[PaymentMemberSummary] = None


class PaymentListResponse(BaseModel):
    payments: list[PaymentListItem]


class PaymentStatsResponse(BaseModel):
    total_amount: float
    by_payment_type: dict[str, float]
    by_payment_method: dict[str, float]


class LastPayment(BaseModel):
    payment_date: date
    amount: float
    payment_type: PaymentType


class DuePayment(BaseModel):
    member_id: uuid.UUID
    name: str
    email: str
    membership_type: Optional[uuid.UUID] = None
    end_date: date
    days_overdue: int
    last_payment: Optional[LastPayment] = None


class UpcomingRenewal(BaseModel):
    member_id: uuid.UUID
    name: str
    email: str
    membership_type: Optional[uuid.UUID] = None
    end_date: date
    days_until_renewal: int


class NotificationBucket(BaseModel):
    total: int
    sent: int
    failed: int
    members: list[dict]


class NotificationResults(BaseModel):
    overdue: NotificationBucket
    upcoming: NotificationBucket


class NotificationResponse(BaseModel):
    success: bool = True
    results: NotificationResults


class SubscriptionPeriod(BaseModel):
    start_date: date
    end_date: date
    total_days: int
    elapsed_days: int
    days_remaining: int
    progress: float
    is_active: bool


class PaymentHistoryEntry(BaseModel):
    id: uuid.UUID
    amount: float
    payment_date: date
    payment_method: PaymentMethod
    payment_type: PaymentType
    status: PaymentStatus

    model_config = ConfigDict(from_attributes=True)


class PaymentDetailResponse(PaymentResponse):
    member: PaymentMemberSummary
    subscription_period: SubscriptionPeriod
    payment_history: list[PaymentHistoryEntry]


class MemberPaymentStats(BaseModel):
    total_amount: float
    completed_payments: int
    pending_payments: int
    last_payment_date: Optional[date] = None


class MemberPaymentsResponse(BaseModel):
    payments: list[PaymentResponse]
    stats: MemberPaymentStats


class PaymentIntentRequest(RequestModel):
    amount: float = Field(..., gt=0)
    member_id: uuid.UUID
    membership_type: Optional[str] = None
    subscription_months: int = Field(default=1, ge=1, le=36)


class PaymentIntentResponse(BaseModel):
    client_secret: str


class WebhookAck(BaseModel):
    received: bool = True
