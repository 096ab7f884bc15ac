"""
Pydantic schemas for operation payloads and results.
"""

from userauth.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenRequest,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UserIdRequest,
    UpdateUserRequest,
    PaginationRequest,
    UserResponse,
    SessionResponse,
    RegistrationResponse,
    UserSummary,
    UserListItem,
    ListMeta,
    UserListResponse,
)
from userauth.schemas.common import (
    ErrorResponse,
    SuccessResponse,
    HealthResponse,
)

__all__ = [
    # Requests
    "RegisterRequest",
    "LoginRequest",
    "TokenRequest",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UserIdRequest",
    "UpdateUserRequest",
    "PaginationRequest",
    # Results
    "UserResponse",
    "SessionResponse",
    "RegistrationResponse",
    "UserSummary",
    "UserListItem",
    "ListMeta",
    "UserListResponse",
    # Common
    "ErrorResponse",
    "SuccessResponse",
    "HealthResponse",
]
