"""
Account operation payloads and results.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from userauth.kernel.models.user import UserRole


# Requests

class RegisterRequest(BaseModel):
    """Account registration payload."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=72)
    role: UserRole = UserRole.USER


class LoginRequest(BaseModel):
    """Credentials; ``email`` is normalized the same way as at registration."""

    email: EmailStr
    password: str = Field(..., max_length=72)


class TokenRequest(BaseModel):
    """Payload carrying a bare token (confirmation, session refresh)."""

    token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    user_id: uuid.UUID
    old_password: str = Field(..., max_length=72)
    new_password: str = Field(..., min_length=1, max_length=72)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=72)


class UserIdRequest(BaseModel):
    id: uuid.UUID


class UpdateUserRequest(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    id: uuid.UUID
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    password: Optional[str] = Field(None, min_length=1, max_length=72)


class PaginationRequest(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


# Results

class UserResponse(BaseModel):
    """Sanitized user: every stored field except the credential hash."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
    role: str
    verified: bool
    available: bool
    password_changed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class SessionResponse(BaseModel):
    """Sanitized user plus a session token."""

    user: UserResponse
    token: str


class RegistrationResponse(SessionResponse):
    """Registration result; ``warnings`` lists non-fatal delivery problems."""

    warnings: list[str] = Field(default_factory=list)


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str


class UserListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    email: str
    available: bool
    created_at: datetime


class ListMeta(BaseModel):
    total: int
    page: int
    last_page: int


class UserListResponse(BaseModel):
    data: list[UserListItem]
    meta: ListMeta
