"""Pydantic schemas."""
from app.schemas.auth import (
    LoginRequest, LoginResponse, RegisterRequest, RefreshTokenRequest,
    TokenResponse, UserResponse,
)
from app.schemas.company import (
    CompanyResponse, CreateInvitationRequest, InvitationListResponse,
    InvitationResponse, JoinCompanyRequest, RegisterCompanyRequest,
    RegisterCompanyResponse,
)
from app.schemas.role import (
    CreatePermissionRequest, CreateRoleRequest, PermissionResponse, RoleResponse,
)

__all__ = [
    "LoginRequest", "LoginResponse", "RegisterRequest", "RefreshTokenRequest",
    "TokenResponse", "UserResponse",
    "CompanyResponse", "CreateInvitationRequest", "InvitationListResponse",
    "InvitationResponse", "JoinCompanyRequest", "RegisterCompanyRequest",
    "RegisterCompanyResponse",
    "CreatePermissionRequest", "CreateRoleRequest", "PermissionResponse", "RoleResponse",
]
