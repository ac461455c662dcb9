"""Security utilities for JWT and password handling."""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError
import uuid

from app.core.config import settings
from app.core.logging import get_logger


logger = get_logger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


class TokenPayload(BaseModel):
    """Claims carried by access and refresh tokens."""
    sub: str  # user_id
    company_id: str
    system_role: str
    email: Optional[str] = None
    type: str = "access"
    exp: datetime
    iat: datetime
    jti: Optional[str] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Hash a plain password, optionally with an explicit bcrypt cost."""
    if rounds is None:
        return pwd_context.hash(password)
    return pwd_context.copy(bcrypt__rounds=rounds).hash(password)


def _create_token(
    token_type: str,
    lifetime: timedelta,
    user_id: str,
    company_id: str,
    system_role: str,
    email: Optional[str] = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "company_id": company_id,
        "system_role": system_role,
        "email": email,
        "type": token_type,
        "exp": now + lifetime,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(
    user_id: str,
    company_id: str,
    system_role: str,
    email: Optional[str] = None,
) -> str:
    """Create a new access token."""
    return _create_token(
        "access",
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        user_id, company_id, system_role, email,
    )


def create_refresh_token(
    user_id: str,
    company_id: str,
    system_role: str,
    email: Optional[str] = None,
) -> str:
    """Create a new refresh token."""
    return _create_token(
        "refresh",
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        user_id, company_id, system_role, email,
    )


def decode_token(token: str) -> Optional[TokenPayload]:
    """Decode and validate a token. Returns None when it is unusable."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
        return TokenPayload(**payload)
    except (JWTError, ValidationError) as e:
        logger.debug(f"Token decode error: {e}")
        return None
