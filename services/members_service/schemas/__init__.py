"""Members Service schemas package.

Re-exports all schemas so that router files use a single import namespace.
"""

from services.members_service.schemas.main import (  # noqa: F401
    AdminLoginRequest,
    AdminLoginResponse,
    AdminRegisterRequest,
    AdminResponse,
    AttendanceSummary,
    EmergencyContact,
    LoginRequest,
    MemberCreate,
    MemberCreatedResponse,
    MemberDetailResponse,
    MemberExportResponse,
    MemberExportRow,
    MemberListResponse,
    MemberRegister,
    MemberResponse,
    MemberUpdate,
    PauseRequest,
    PauseResponse,
    PauseResult,
    PaymentHistoryItem,
    PaymentSummary,
    PlanCreate,
    PlanDetailResponse,
    PlanMember,
    PlanResponse,
    PlanStats,
    PlanSummary,
    PlanUpdate,
    RegistrationResponse,
    ResumeResult,
    TokenResponse,
)
