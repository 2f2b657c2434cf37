"""Authentication API endpoints."""
from typing import Optional

from fastapi import APIRouter, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from taskhub.core.audit import AuditService
from taskhub.core.config import settings
from taskhub.core.database import transaction
from taskhub.core.dependencies import AuthCtx, DbSession
from taskhub.core.enums import AuditAction, TenantPlan, TenantStatus, UserRole, plan_limits
from taskhub.core.exceptions import Conflict, Forbidden, NotFound, Unauthenticated
from taskhub.core.logging import get_logger
from taskhub.core.security import verify_password, get_password_hash, create_access_token
from taskhub.models.tenant import Tenant
from taskhub.models.user import User
from taskhub.schemas.auth import (
    RegisterTenantRequest, RegisterTenantResponse, LoginRequest, LoginResponse,
    MeResponse
)
from taskhub.schemas.common import ApiResponse
from taskhub.schemas.tenant import TenantSummary
from taskhub.schemas.user import UserResponse


router = APIRouter()
logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.post(
    "/register-tenant",
    response_model=ApiResponse[RegisterTenantResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_tenant(
    payload: RegisterTenantRequest,
    request: Request,
    db: DbSession,
):
    """Create a tenant on the free plan together with its first tenant_admin."""
    existing = await db.execute(
        select(Tenant.id).where(Tenant.subdomain == payload.subdomain)
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict("Subdomain already exists")

    max_users, max_projects = plan_limits(TenantPlan.FREE)
    tenant = Tenant(
        name=payload.tenant_name,
        subdomain=payload.subdomain,
        status=TenantStatus.ACTIVE,
        subscription_plan=TenantPlan.FREE,
        max_users=max_users,
        max_projects=max_projects,
    )

    try:
        async with transaction(db):
            db.add(tenant)
            await db.flush()

            admin = User(
                tenant_id=tenant.id,
                email=payload.admin_email,
                password_hash=get_password_hash(payload.admin_password),
                full_name=payload.admin_full_name,
                role=UserRole.TENANT_ADMIN,
                is_active=True,
            )
            db.add(admin)
            await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same subdomain
        logger.warning(f"Concurrent registration for subdomain: {payload.subdomain}")
        raise Conflict("Subdomain already exists")

    logger.info(
        f"Tenant registered: {tenant.id} ({tenant.subdomain})",
        extra={"tenant_id": tenant.id, "user_id": admin.id},
    )

    data = RegisterTenantResponse(
        tenant_id=tenant.id,
        subdomain=tenant.subdomain,
        admin_user=UserResponse.model_validate(admin),
    )

    await AuditService.record(
        db,
        action=AuditAction.REGISTER_TENANT,
        tenant_id=data.tenant_id,
        user_id=data.admin_user.id,
        entity_type="tenant",
        entity_id=data.tenant_id,
        ip_address=_client_ip(request),
    )

    return ApiResponse(message="Tenant registered successfully", data=data)


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    payload: LoginRequest,
    request: Request,
    db: DbSession,
):
    """Authenticate a user and return a JWT access token.

    Tenant users log in against their tenant (by id or subdomain); the
    super admin logs in without one.
    """
    tenant: Optional[Tenant] = None
    if payload.tenant_id:
        tenant = await db.get(Tenant, payload.tenant_id)
    elif payload.tenant_subdomain:
        result = await db.execute(
            select(Tenant).where(Tenant.subdomain == payload.tenant_subdomain)
        )
        tenant = result.scalar_one_or_none()

    if (payload.tenant_id or payload.tenant_subdomain) and tenant is None:
        raise NotFound("Tenant not found")
    if tenant is not None and tenant.status != TenantStatus.ACTIVE:
        raise Forbidden("Tenant not active")

    tenant_id = tenant.id if tenant is not None else None
    query = select(User).where(User.email == payload.email)
    if tenant_id is not None:
        query = query.where(User.tenant_id == tenant_id)
    else:
        query = query.where(User.role == UserRole.SUPER_ADMIN)

    result = await db.execute(query.limit(1))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(payload.password, user.password_hash):
        logger.warning(
            f"Failed login attempt for email: {payload.email}",
            extra={"tenant_id": tenant_id},
        )
        raise Unauthenticated(INVALID_CREDENTIALS)

    if not user.is_active:
        raise Forbidden("Account inactive")

    token = create_access_token(
        user_id=user.id,
        tenant_id=user.tenant_id,
        role=user.role.value,
    )

    logger.info(
        f"User logged in: {user.id}, tenant: {user.tenant_id}",
        extra={"tenant_id": user.tenant_id, "user_id": user.id},
    )

    data = LoginResponse(
        user=UserResponse.model_validate(user),
        token=token,
        expires_in=settings.access_token_expire_seconds,
    )

    await AuditService.record(
        db,
        action=AuditAction.LOGIN,
        tenant_id=data.user.tenant_id,
        user_id=data.user.id,
        entity_type="user",
        entity_id=data.user.id,
        ip_address=_client_ip(request),
    )

    return ApiResponse(message="Login successful", data=data)


@router.get("/me", response_model=ApiResponse[MeResponse])
async def get_current_user_info(
    ctx: AuthCtx,
    db: DbSession,
):
    """Get current authenticated user information."""
    user = await db.get(User, ctx.id)
    tenant = await db.get(Tenant, ctx.tenant_id) if ctx.tenant_id else None

    data = MeResponse(
        **UserResponse.model_validate(user).model_dump(),
        tenant=TenantSummary.model_validate(tenant) if tenant is not None else None,
    )
    return ApiResponse(data=data)


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    ctx: AuthCtx,
    db: DbSession,
):
    """Stateless logout: the client discards its token; the event is audited."""
    await AuditService.record(
        db,
        action=AuditAction.LOGOUT,
        tenant_id=ctx.tenant_id,
        user_id=ctx.id,
        entity_type="user",
        entity_id=ctx.id,
        ip_address=ctx.ip_address,
    )
    logger.info(f"User logged out: {ctx.id}", extra={"tenant_id": ctx.tenant_id, "user_id": ctx.id})
    return ApiResponse(message="Logged out successfully")
