"""Company and invitation schemas."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.core.enums import CompanyStatus, InvitationStatus, SystemUserRole
from app.schemas.auth import UserResponse
from app.schemas.base import CamelModel
from app.schemas.fields import (
    CompanyNameField, DomainField, EmailField, PersonNameField, PhoneNumberField,
    RegistrationEmailField, RequiredText, SlugField, StrongPasswordField,
)


class RegisterCompanyRequest(CamelModel):
    """Public registration of a company together with its first admin."""
    name: CompanyNameField
    slug: SlugField
    domain: Optional[DomainField] = None
    settings: Optional[Dict[str, Any]] = None
    admin_email: RegistrationEmailField
    admin_first_name: PersonNameField
    admin_last_name: PersonNameField
    admin_password: StrongPasswordField
    admin_phone_number: Optional[PhoneNumberField] = None


class JoinCompanyRequest(CamelModel):
    """Request to move the current user into another company."""
    company_identifier: RequiredText  # slug or domain
    invitation_code: Optional[str] = None


class CreateInvitationRequest(CamelModel):
    """Invite an email address into the current company."""
    email: EmailField
    role: SystemUserRole = SystemUserRole.USER


class CompanyResponse(CamelModel):
    id: str
    name: str
    slug: str
    domain: Optional[str] = None
    status: CompanyStatus
    settings: Optional[Dict[str, Any]] = None
    created_at: datetime


class RegisterCompanyResponse(CamelModel):
    company: CompanyResponse
    admin_user: UserResponse


class InvitationResponse(CamelModel):
    id: str
    email: str
    code: str
    role: SystemUserRole
    status: InvitationStatus
    company_id: str
    invited_by: Optional[str] = None
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    created_at: datetime


class InvitationListResponse(CamelModel):
    invitations: List[InvitationResponse]
    total: int
    page: int
    page_size: int
