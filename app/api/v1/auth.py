"""Authentication API endpoints."""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.dependencies import CurrentUser, DbSession
from app.core.enums import SystemUserRole, UserStatus
from app.core.logging import get_logger
from app.core.security import (
    verify_password, get_password_hash, create_access_token, create_refresh_token,
    decode_token,
)
from app.core.validation import ValidationPipe
from app.models.company import Company
from app.models.user import User
from app.schemas.auth import (
    LoginRequest, LoginResponse, RegisterRequest, RefreshTokenRequest,
    TokenResponse, UserResponse,
)
from app.services.tenancy import get_active_company, resolve_membership


router = APIRouter()
logger = get_logger(__name__)


def issue_tokens(user: User) -> TokenResponse:
    claims = dict(
        user_id=user.id,
        company_id=user.company_id,
        system_role=user.system_role.value,
        email=user.email,
    )
    return TokenResponse(
        access_token=create_access_token(**claims),
        refresh_token=create_refresh_token(**claims),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    db: DbSession,
    request: RegisterRequest = Depends(ValidationPipe(RegisterRequest)),
):
    """Register a user into an existing company (the default one unless told otherwise)."""
    company = await get_active_company(db, request.company_slug or settings.DEFAULT_COMPANY_SLUG)

    existing = await db.execute(select(User.id).where(User.email == request.email))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email '{request.email}' already exists",
        )

    invitation = await resolve_membership(db, company, request.email, request.invitation_code)

    # Elevated roles are only granted through an invitation
    system_role = invitation.role if invitation else SystemUserRole.USER

    user = User(
        company_id=company.id,
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        phone_number=request.phone_number,
        hashed_password=get_password_hash(request.password),
        system_role=system_role,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent registration took the email after the check above
        await db.rollback()
        logger.warning(f"Concurrent registration conflict for email: {request.email}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email '{request.email}' already exists",
        )
    await db.refresh(user)

    logger.info(
        f"User registered: {user.id}, company: {company.id}",
        extra={"company_id": company.id, "user_id": user.id},
    )

    return LoginResponse(user=UserResponse.model_validate(user), tokens=issue_tokens(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    db: DbSession,
    request: LoginRequest = Depends(ValidationPipe(LoginRequest)),
):
    """Authenticate user and return JWT tokens."""
    # Emails are unique system-wide, so login needs no company hint
    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(request.password, user.hashed_password):
        logger.warning(f"Failed login attempt for email: {request.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    company = await db.get(Company, user.company_id)
    if company is None or not company.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Company is inactive",
        )

    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()

    logger.info(
        f"User logged in: {user.id}, company: {user.company_id}",
        extra={"company_id": user.company_id, "user_id": user.id},
    )

    return LoginResponse(user=UserResponse.model_validate(user), tokens=issue_tokens(user))


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    db: DbSession,
    request: RefreshTokenRequest = Depends(ValidationPipe(RefreshTokenRequest)),
):
    """Refresh access token using a valid refresh token."""
    payload = decode_token(request.refresh_token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    if payload.type != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type. Refresh token required.",
        )

    result = await db.execute(select(User).where(User.id == payload.sub))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    return issue_tokens(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: CurrentUser,
):
    """Get current authenticated user information."""
    return UserResponse.model_validate(current_user)
