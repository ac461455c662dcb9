"""Application dependencies for dependency injection."""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.database import get_db
from app.core.enums import SystemUserRole
from app.core.security import decode_token, TokenPayload
from app.core.logging import get_logger
from app.models.user import User
from app.models.company import Company


security = HTTPBearer()
logger = get_logger(__name__)


async def get_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenPayload:
    """Validate and decode the JWT token from the Authorization header."""
    payload = decode_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.type != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type. Access token required.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


async def get_current_user(
    token: TokenPayload = Depends(get_current_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the token's user; it must still exist and be active."""
    result = await db.execute(select(User).where(User.id == token.sub))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive",
        )

    return user


async def get_current_company(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Company:
    """Resolve the user's company; it must be active."""
    # The user row is authoritative: a join may have moved them since the token was issued
    result = await db.execute(select(Company).where(Company.id == user.company_id))
    company = result.scalar_one_or_none()

    if company is None or not company.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Company not found or inactive",
        )

    return company


class TenantContext:
    """Context object containing tenant-scoped information."""

    def __init__(
        self,
        token: TokenPayload,
        user: User,
        company: Company,
    ):
        self.token = token
        self.user = user
        self.company = company
        self.company_id = company.id
        self.user_id = user.id
        self.role = user.system_role


async def get_tenant_context(
    token: TokenPayload = Depends(get_current_token),
    user: User = Depends(get_current_user),
    company: Company = Depends(get_current_company),
) -> TenantContext:
    """Get the full tenant context for the current request."""
    return TenantContext(token=token, user=user, company=company)


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentCompany = Annotated[Company, Depends(get_current_company)]
TenantCtx = Annotated[TenantContext, Depends(get_tenant_context)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


def require_role(*roles: SystemUserRole):
    """Dependency factory to require specific system roles."""
    async def role_checker(ctx: TenantCtx) -> TenantContext:
        if ctx.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{ctx.role.value}' not authorized. "
                       f"Required: {[r.value for r in roles]}",
            )
        return ctx
    return role_checker
