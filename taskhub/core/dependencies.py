"""Application dependencies for dependency injection.

Request pipeline, in order:

    bearer credentials -> get_current_token -> get_current_user (AuthContext)
        -> get_scoped_tenant / require_role / require_any_role (where declared)
        -> route handler (resource rules from taskhub.core.permissions)
"""
from typing import Annotated, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.database import get_db
from taskhub.core.enums import UserRole
from taskhub.core.exceptions import Unauthenticated
from taskhub.core.logging import get_logger
from taskhub.core.permissions import (
    AuthContext,
    ensure_any_role,
    ensure_role,
    ensure_tenant_access,
)
from taskhub.core.security import decode_token, InvalidTokenError, TokenClaims
from taskhub.models.tenant import Tenant
from taskhub.models.user import User


# auto_error=False so a missing header is reported as 401 in our envelope
security = HTTPBearer(auto_error=False)
logger = get_logger(__name__)


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenClaims:
    """Validate and decode the JWT token from the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Token missing")

    try:
        return decode_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.info(f"Rejected token: {e}")
        raise Unauthenticated("Invalid or expired token")


async def get_current_user(
    request: Request,
    db: DbSession,
    token: TokenClaims = Depends(get_current_token),
) -> AuthContext:
    """Re-read the user so role changes and deactivation take effect immediately."""
    user = await db.get(User, token.user_id)

    if user is None:
        raise Unauthenticated("User not found")
    if not user.is_active:
        raise Unauthenticated("Account inactive")

    ip_address = request.client.host if request.client else None
    return AuthContext.from_user(user, ip_address=ip_address)


AuthCtx = Annotated[AuthContext, Depends(get_current_user)]


async def get_scoped_tenant(
    tenant_id: str,
    ctx: AuthCtx,
    db: DbSession,
) -> Tenant:
    """Load the tenant named in the path and check the caller may see it."""
    tenant = await db.get(Tenant, tenant_id)
    return ensure_tenant_access(ctx, tenant)


ScopedTenant = Annotated[Tenant, Depends(get_scoped_tenant)]


def require_role(role: UserRole):
    """Dependency factory to require a specific role."""
    async def role_checker(ctx: AuthCtx) -> AuthContext:
        ensure_role(ctx, role)
        return ctx
    return role_checker


def require_any_role(*roles: UserRole):
    """Dependency factory to require any of the given roles."""
    async def role_checker(ctx: AuthCtx) -> AuthContext:
        ensure_any_role(ctx, roles)
        return ctx
    return role_checker


SuperAdminCtx = Annotated[AuthContext, Depends(require_role(UserRole.SUPER_ADMIN))]
