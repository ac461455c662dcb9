"""Company, membership and invitation API endpoints."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.config import settings
from app.core.dependencies import CurrentCompany, CurrentUser, DbSession, TenantContext, require_role
from app.core.enums import ADMIN_ROLES, CompanyStatus, InvitationStatus, SystemUserRole, UserStatus
from app.core.logging import get_logger
from app.core.security import get_password_hash
from app.core.validation import ValidationPipe
from app.models.company import Company
from app.models.invitation import CompanyInvitation
from app.models.role import Permission, Role, RolePermission, UserRole
from app.models.user import User
from app.schemas.auth import UserResponse
from app.schemas.company import (
    CompanyResponse, CreateInvitationRequest, InvitationListResponse,
    InvitationResponse, JoinCompanyRequest, RegisterCompanyRequest,
    RegisterCompanyResponse,
)
from app.services.tenancy import (
    COMPANY_ADMIN_ROLE, DEFAULT_PERMISSIONS, generate_invitation_code,
    get_active_company, resolve_membership,
)


router = APIRouter()
logger = get_logger(__name__)

AdminCtx = Depends(require_role(*ADMIN_ROLES))


@router.post("/register", response_model=RegisterCompanyResponse, status_code=status.HTTP_201_CREATED)
async def register_company(
    db: DbSession,
    request: RegisterCompanyRequest = Depends(ValidationPipe(RegisterCompanyRequest)),
):
    """Register a new company together with its first admin user."""
    conflicts = [
        ("Company", "slug", request.slug, select(Company.id).where(Company.slug == request.slug)),
        ("User", "email", request.admin_email, select(User.id).where(User.email == request.admin_email)),
    ]
    if request.domain:
        conflicts.insert(
            1,
            ("Company", "domain", request.domain, select(Company.id).where(Company.domain == request.domain)),
        )
    for entity, field, value, query in conflicts:
        if (await db.execute(query)).scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{entity} with {field} '{value}' already exists",
            )

    try:
        company = Company(
            name=request.name,
            slug=request.slug,
            domain=request.domain,
            settings=request.settings or {},
            status=CompanyStatus.ACTIVE,
        )
        db.add(company)
        await db.flush()

        admin = User(
            company_id=company.id,
            email=request.admin_email,
            first_name=request.admin_first_name,
            last_name=request.admin_last_name,
            phone_number=request.admin_phone_number,
            hashed_password=get_password_hash(request.admin_password),
            system_role=SystemUserRole.ADMIN,
            status=UserStatus.ACTIVE,
            email_verified=False,
        )
        permissions = [Permission(company_id=company.id, **perm) for perm in DEFAULT_PERMISSIONS]
        admin_role = Role(
            name=COMPANY_ADMIN_ROLE,
            description="Full administrative access to company resources",
            company_id=company.id,
        )
        db.add_all([admin, admin_role, *permissions])
        await db.flush()

        db.add_all([RolePermission(role_id=admin_role.id, permission_id=p.id) for p in permissions])
        db.add(UserRole(user_id=admin.id, role_id=admin_role.id))
        await db.commit()
    except IntegrityError:
        # A concurrent registration took the slug, domain or email
        await db.rollback()
        logger.warning(f"Concurrent registration conflict for company {request.slug}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Company slug, domain or admin email already exists",
        )
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Failed to register company {request.slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to register company: {type(e).__name__}",
        )

    await db.refresh(company)
    await db.refresh(admin)

    logger.info(
        f"Company registered: {company.slug} with admin {admin.email}",
        extra={"company_id": company.id, "user_id": admin.id},
    )

    return RegisterCompanyResponse(
        company=CompanyResponse.model_validate(company),
        admin_user=UserResponse.model_validate(admin),
    )


@router.get("/my-company", response_model=CompanyResponse)
async def get_my_company(company: CurrentCompany):
    """Get the current user's company."""
    return CompanyResponse.model_validate(company)


@router.post("/join", response_model=UserResponse)
async def join_company(
    current_user: CurrentUser,
    db: DbSession,
    request: JoinCompanyRequest = Depends(ValidationPipe(JoinCompanyRequest)),
):
    """Move the current user into another company, by slug or domain."""
    company = await get_active_company(db, request.company_identifier)

    if company.id == current_user.company_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already belongs to this company",
        )

    invitation = await resolve_membership(
        db, company, current_user.email, request.invitation_code
    )

    previous_company_id = current_user.company_id
    # Role assignments belong to the tenant being left
    await db.execute(
        delete(UserRole)
        .where(
            UserRole.user_id == current_user.id,
            UserRole.role_id.in_(select(Role.id).where(Role.company_id == previous_company_id)),
        )
        .execution_options(synchronize_session=False)
    )

    current_user.company_id = company.id
    if invitation is not None:
        current_user.system_role = invitation.role
    elif current_user.system_role != SystemUserRole.SUPERADMIN:
        # Company-level privileges do not travel between tenants
        current_user.system_role = SystemUserRole.USER

    await db.commit()
    await db.refresh(current_user)

    logger.info(
        f"User {current_user.id} moved from company {previous_company_id} to {company.id}",
        extra={"company_id": company.id, "user_id": current_user.id},
    )

    return UserResponse.model_validate(current_user)


@router.post(
    "/my-company/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invitation(
    db: DbSession,
    ctx: TenantContext = AdminCtx,
    request: CreateInvitationRequest = Depends(ValidationPipe(CreateInvitationRequest)),
):
    """Invite an email address into the current company."""
    existing_user = await db.execute(select(User.id).where(User.email == request.email))
    if existing_user.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email {request.email} already exists",
        )

    if request.role == SystemUserRole.SUPERADMIN and ctx.role != SystemUserRole.SUPERADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a SUPERADMIN can invite another SUPERADMIN",
        )

    result = await db.execute(
        select(CompanyInvitation).where(
            CompanyInvitation.email == request.email,
            CompanyInvitation.company_id == ctx.company_id,
        )
    )
    invitation = result.scalar_one_or_none()

    if invitation is not None and invitation.status == InvitationStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Pending invitation already exists for {request.email}",
        )

    expires_at = datetime.now(timezone.utc) + timedelta(days=settings.INVITATION_EXPIRE_DAYS)

    # One invitation row per (email, company): a closed one is reissued in place
    if invitation is None:
        invitation = CompanyInvitation(email=request.email, company_id=ctx.company_id)
        db.add(invitation)
    invitation.code = generate_invitation_code()
    invitation.role = request.role
    invitation.status = InvitationStatus.PENDING
    invitation.invited_by = ctx.user_id
    invitation.expires_at = expires_at
    invitation.accepted_at = None
    invitation.rejected_at = None
    invitation.created_at = datetime.now(timezone.utc)

    await db.commit()
    await db.refresh(invitation)

    logger.info(
        f"Invitation created for {request.email}",
        extra={"company_id": ctx.company_id, "user_id": ctx.user_id},
    )

    return InvitationResponse.model_validate(invitation)


@router.get("/my-company/invitations", response_model=InvitationListResponse)
async def list_invitations(
    db: DbSession,
    ctx: TenantContext = AdminCtx,
    status_filter: Optional[InvitationStatus] = Query(None, alias="status"),
    email: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """List the current company's invitations, newest first."""
    query = select(CompanyInvitation).where(CompanyInvitation.company_id == ctx.company_id)
    count_query = select(func.count(CompanyInvitation.id)).where(
        CompanyInvitation.company_id == ctx.company_id
    )

    if status_filter:
        query = query.where(CompanyInvitation.status == status_filter)
        count_query = count_query.where(CompanyInvitation.status == status_filter)
    if email:
        pattern = f"%{email.lower()}%"
        query = query.where(func.lower(CompanyInvitation.email).like(pattern))
        count_query = count_query.where(func.lower(CompanyInvitation.email).like(pattern))

    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * page_size
    query = query.order_by(CompanyInvitation.created_at.desc()).offset(offset).limit(page_size)
    invitations = (await db.execute(query)).scalars().all()

    return InvitationListResponse(
        invitations=[InvitationResponse.model_validate(i) for i in invitations],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.delete("/my-company/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_invitation(
    invitation_id: str,
    db: DbSession,
    ctx: TenantContext = AdminCtx,
):
    """Cancel a pending invitation."""
    result = await db.execute(
        select(CompanyInvitation).where(
            CompanyInvitation.id == invitation_id,
            CompanyInvitation.company_id == ctx.company_id,
        )
    )
    invitation = result.scalar_one_or_none()

    if invitation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invitation not found",
        )

    if invitation.status != InvitationStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot cancel invitation with status: {invitation.status.value}",
        )

    invitation.status = InvitationStatus.REJECTED
    invitation.rejected_at = datetime.now(timezone.utc)
    await db.commit()

    logger.info(
        f"Invitation {invitation_id} cancelled",
        extra={"company_id": ctx.company_id, "user_id": ctx.user_id},
    )
