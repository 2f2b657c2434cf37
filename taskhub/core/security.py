"""Security utilities for JWT and password handling."""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError
import uuid

from taskhub.core.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"


class InvalidTokenError(Exception):
    """Raised when a token cannot be trusted (bad signature, malformed, expired)."""


class TokenPayload(BaseModel):
    """Raw JWT claims as issued by `create_access_token`."""
    sub: str  # user_id
    tenant_id: Optional[str] = None  # None for super_admin
    role: str
    type: str = ACCESS_TOKEN_TYPE
    exp: datetime
    iat: datetime
    jti: Optional[str] = None


class TokenClaims(BaseModel):
    """Verified identity triple carried by an access token."""
    user_id: str
    tenant_id: Optional[str] = None
    role: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a plain password."""
    return pwd_context.hash(password)


def create_access_token(
    user_id: str,
    tenant_id: Optional[str],
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed, time-limited access token for the given identity."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS))

    payload = {
        "sub": user_id,
        "tenant_id": tenant_id,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "exp": expire,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }

    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> TokenClaims:
    """Verify a token and return its claims.

    Raises InvalidTokenError on bad signature, expiry, malformed payload
    or a non-access token.
    """
    try:
        raw = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
        payload = TokenPayload(**raw)
    except (JWTError, ValidationError, TypeError) as e:
        raise InvalidTokenError(str(e)) from e

    if payload.type != ACCESS_TOKEN_TYPE:
        raise InvalidTokenError(f"Unexpected token type: {payload.type}")

    return TokenClaims(user_id=payload.sub, tenant_id=payload.tenant_id, role=payload.role)
