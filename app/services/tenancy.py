"""Company resolution, invitations and default access-control data."""
import secrets
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import InvitationStatus
from app.core.logging import get_logger
from app.models.company import Company
from app.models.invitation import CompanyInvitation


logger = get_logger(__name__)

# Created for every company registered through the public endpoint
DEFAULT_PERMISSIONS = [
    {"name": "users.read", "resource": "users", "action": "read", "description": "View users"},
    {"name": "users.write", "resource": "users", "action": "write", "description": "Create and update users"},
    {"name": "users.delete", "resource": "users", "action": "delete", "description": "Delete users"},
    {"name": "roles.read", "resource": "roles", "action": "read", "description": "View roles and permissions"},
    {"name": "roles.write", "resource": "roles", "action": "write", "description": "Manage roles and permissions"},
    {"name": "company.read", "resource": "company", "action": "read", "description": "View company details"},
    {"name": "company.write", "resource": "company", "action": "write", "description": "Update company settings"},
]

COMPANY_ADMIN_ROLE = "Company Admin"


def generate_invitation_code() -> str:
    return f"INV{secrets.token_hex(6).upper()}"


async def find_company(db: AsyncSession, identifier: str) -> Optional[Company]:
    """Look a company up by slug, falling back to domain."""
    result = await db.execute(
        select(Company).where(or_(Company.slug == identifier, Company.domain == identifier))
    )
    companies = result.scalars().all()
    for company in companies:
        if company.slug == identifier:
            return company
    return companies[0] if companies else None


async def get_active_company(db: AsyncSession, identifier: str) -> Company:
    company = await find_company(db, identifier)
    if company is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Company '{identifier}' not found",
        )
    if not company.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Company is inactive and cannot be joined",
        )
    return company


def _invalid_invitation(code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Company invitation code '{code}' is invalid or expired",
    )


async def accept_invitation(
    db: AsyncSession,
    company: Company,
    code: str,
    email: str,
) -> CompanyInvitation:
    """Mark a pending invitation as accepted; the caller commits.

    An invitation past its expiry is marked EXPIRED and committed before the
    request is rejected.
    """
    result = await db.execute(select(CompanyInvitation).where(CompanyInvitation.code == code))
    invitation = result.scalar_one_or_none()

    if (
        invitation is None
        or invitation.company_id != company.id
        or invitation.status != InvitationStatus.PENDING
        or invitation.email.lower() != email.lower()
    ):
        logger.warning(f"Rejected invitation code {code} for company {company.id}")
        raise _invalid_invitation(code)

    now = datetime.now(timezone.utc)
    if invitation.is_expired(now):
        invitation.status = InvitationStatus.EXPIRED
        await db.commit()
        logger.info(f"Invitation {invitation.id} expired")
        raise _invalid_invitation(code)

    invitation.status = InvitationStatus.ACCEPTED
    invitation.accepted_at = now
    return invitation


async def resolve_membership(
    db: AsyncSession,
    company: Company,
    email: str,
    invitation_code: Optional[str],
) -> Optional[CompanyInvitation]:
    """Apply the company's joining rules; returns the accepted invitation if any."""
    if invitation_code:
        return await accept_invitation(db, company, invitation_code, email)
    if company.requires_invitation:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="An invitation code is required to join this company",
        )
    return None
