"""Authentication schemas."""
from datetime import datetime
from typing import Optional

from app.core.enums import SystemUserRole, UserStatus
from app.schemas.base import CamelModel
from app.schemas.fields import (
    EmailField, LoginPasswordField, PersonNameField, PhoneNumberField,
    RegistrationEmailField, RequiredText, StrongPasswordField,
)


class LoginRequest(CamelModel):
    """Login request schema."""
    email: EmailField
    password: LoginPasswordField


class RegisterRequest(CamelModel):
    """Self-service registration into an existing company."""
    email: RegistrationEmailField
    first_name: PersonNameField
    last_name: PersonNameField
    password: StrongPasswordField
    phone_number: Optional[PhoneNumberField] = None
    role: SystemUserRole = SystemUserRole.USER
    company_slug: Optional[str] = None  # falls back to DEFAULT_COMPANY_SLUG
    invitation_code: Optional[str] = None


class RefreshTokenRequest(CamelModel):
    """Refresh token request schema."""
    refresh_token: RequiredText


class TokenResponse(CamelModel):
    """Token response schema."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class UserResponse(CamelModel):
    """User response schema."""
    id: str
    company_id: str
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    system_role: SystemUserRole
    status: UserStatus
    email_verified: bool
    email_verified_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime


class LoginResponse(CamelModel):
    """Login response with user and tokens."""
    user: UserResponse
    tokens: TokenResponse
