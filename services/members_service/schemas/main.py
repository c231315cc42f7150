import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.schemas import RequestModel, reject_null
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from services.members_service.models import MemberStatus, PauseStatus, PlanStatus

# ===== AUTH =====


class LoginRequest(RequestModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


class AdminLoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AdminRegisterRequest(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)


class AdminResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class AdminLoginResponse(BaseModel):
    token: str
    admin: AdminResponse


# ===== MEMBERS =====


class EmergencyContact(RequestModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


class MemberRegister(RequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = None
    password: str = Field(..., min_length=6)


class MemberCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    medical_history: Optional[str] = None
    membership_type: uuid.UUID
    start_date: date


class MemberUpdate(RequestModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    medical_history: Optional[str] = None
    membership_type: Optional[uuid.UUID] = None
    start_date: Optional[date] = None
    status: Optional[MemberStatus] = None

    not_null = field_validator("name", "email", "status")(reject_null)


class MemberResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[dict] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    medical_history: Optional[str] = None
    membership_type: Optional[uuid.UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: MemberStatus
    is_paused: bool
    current_pause_id: Optional[uuid.UUID] = None
    last_notification_sent: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Derived on read
    subscription_status: Optional[str] = None
    days_remaining: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class MemberListResponse(BaseModel):
    members: list[MemberResponse]
    total_pages: int
    current_page: int
    total_members: int


class MemberExportRow(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    membership_type: Optional[str] = None
    status: MemberStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    subscription_status: str
    days_remaining: Optional[int] = None


class MemberExportResponse(BaseModel):
    members: list[MemberExportRow]


class RegistrationResponse(BaseModel):
    message: str
    member: MemberResponse


class PlanSummary(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    duration: int
    price: float
    features: list[str] = []

    model_config = ConfigDict(from_attributes=True)


class MemberCreatedResponse(BaseModel):
    message: str
    member: MemberResponse
    membership: PlanSummary


class AttendanceSummary(BaseModel):
    total_days: int
    present_days: int
    attendance_percentage: float
    last_attendance: Optional[date] = None


class PaymentHistoryItem(BaseModel):
    id: uuid.UUID
    amount: float
    payment_date: date
    payment_method: str
    payment_type: str
    status: str


class PaymentSummary(BaseModel):
    total_paid: float
    last_payment: Optional[date] = None
    payment_history: list[PaymentHistoryItem]


class MemberDetailResponse(MemberResponse):
    plan: Optional[PlanSummary] = None
    attendance_stats: AttendanceSummary
    payment_stats: PaymentSummary


# ===== PAUSES =====


class PauseRequest(RequestModel):
    start_date: date
    end_date: date
    reason: Optional[str] = Field(default=None, max_length=1000)


class PauseResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    start_date: date
    end_date: date
    reason: Optional[str] = None
    status: PauseStatus
    original_end_date: date
    new_end_date: date
    created_by: Optional[str] = None
    approved_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PauseResult(BaseModel):
    message: str
    pause: PauseResponse
    member: MemberResponse


class ResumeResult(BaseModel):
    message: str
    member: MemberResponse


# ===== PLANS =====


class PlanCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    duration: int = Field(..., ge=1)
    price: float = Field(..., ge=0)
    features: list[str] = Field(default_factory=list)
    status: PlanStatus = PlanStatus.ACTIVE


class PlanUpdate(RequestModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=1)
    price: Optional[float] = Field(default=None, ge=0)
    features: Optional[list[str]] = None
    status: Optional[PlanStatus] = None

    not_null = field_validator(
        "name", "duration", "price", "features", "status"
    )(reject_null)


class PlanResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    duration: int
    price: float
    features: list[str] = []
    status: PlanStatus
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PlanMember(BaseModel):
    id: uuid.UUID
    name: str


class PlanDetailResponse(PlanResponse):
    members: list[PlanMember] = []


class PlanStats(BaseModel):
    id: uuid.UUID
    name: str
    price: float
    total_members: int
    active_members: int
