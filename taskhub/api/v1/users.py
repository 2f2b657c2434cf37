"""User management API endpoints."""
from typing import Optional

from fastapi import APIRouter, Query, status
from sqlalchemy import select, func, or_, update, delete

from taskhub.core.audit import AuditService
from taskhub.core.database import transaction
from taskhub.core.dependencies import AuthCtx, DbSession, ScopedTenant
from taskhub.core.enums import AuditAction, UserRole
from taskhub.core.exceptions import Conflict, Forbidden
from taskhub.core.logging import get_logger
from taskhub.core.permissions import (
    check_user_delete, check_user_update, ensure_tenant_admin_of
)
from taskhub.core.security import get_password_hash
from taskhub.models.task import Task
from taskhub.models.user import User
from taskhub.schemas.common import ApiResponse, build_pagination
from taskhub.schemas.user import (
    UserCreateRequest, UserUpdateRequest, UserResponse, UserListResponse
)


router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/tenants/{tenant_id}/users",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_user(
    payload: UserCreateRequest,
    tenant: ScopedTenant,
    ctx: AuthCtx,
    db: DbSession,
):
    """Add a user to a tenant, within its subscription's user limit."""
    ensure_tenant_admin_of(ctx, tenant.id)

    user_count = (await db.execute(
        select(func.count(User.id)).where(User.tenant_id == tenant.id)
    )).scalar() or 0
    # Read-then-compare; concurrent creates may overshoot by the number of racing requests
    if user_count >= tenant.max_users:
        raise Forbidden("Subscription limit reached")

    existing = await db.execute(
        select(User.id).where(User.tenant_id == tenant.id, User.email == payload.email)
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict("Email already exists in this tenant")

    user = User(
        tenant_id=tenant.id,
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        full_name=payload.full_name,
        role=payload.role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(
        f"User created: {user.id}, tenant: {tenant.id}",
        extra={"tenant_id": tenant.id, "user_id": ctx.id},
    )

    data = UserResponse.model_validate(user)

    await AuditService.record(
        db,
        action=AuditAction.CREATE_USER,
        tenant_id=data.tenant_id,
        user_id=ctx.id,
        entity_type="user",
        entity_id=data.id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="User created successfully", data=data)


@router.get("/tenants/{tenant_id}/users", response_model=ApiResponse[UserListResponse])
async def list_users(
    tenant: ScopedTenant,
    db: DbSession,
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
):
    """List users of a tenant, newest first."""
    filters = [User.tenant_id == tenant.id]
    if role:
        filters.append(User.role == role)
    if search:
        pattern = f"%{search.lower()}%"
        filters.append(or_(
            func.lower(User.full_name).like(pattern),
            func.lower(User.email).like(pattern),
        ))

    total = (await db.execute(
        select(func.count(User.id)).where(*filters)
    )).scalar() or 0

    result = await db.execute(
        select(User)
        .where(*filters)
        .order_by(User.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    users = [UserResponse.model_validate(u) for u in result.scalars().all()]

    return ApiResponse(data=UserListResponse(
        users=users,
        total=total,
        pagination=build_pagination(page, limit, total),
    ))


@router.put("/users/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    ctx: AuthCtx,
    db: DbSession,
):
    """Update a user.

    A user may rename themselves; any other change needs a tenant_admin of
    the same tenant. Fields missing from the body keep their stored values.
    """
    target = await db.get(User, user_id)
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    action = check_user_update(ctx, target, changes.keys())

    for field, value in changes.items():
        setattr(target, field, value)

    await db.commit()
    await db.refresh(target)

    logger.info(
        f"User updated: {target.id}, fields: {sorted(changes)}",
        extra={"tenant_id": target.tenant_id, "user_id": ctx.id, "action": action.value},
    )

    data = UserResponse.model_validate(target)

    await AuditService.record(
        db,
        action=action,
        tenant_id=data.tenant_id,
        user_id=ctx.id,
        entity_type="user",
        entity_id=data.id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="User updated successfully", data=data)


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: str,
    ctx: AuthCtx,
    db: DbSession,
):
    """Delete a user from the caller's tenant, unassigning their tasks first."""
    target = check_user_delete(ctx, await db.get(User, user_id))
    tenant_id = target.tenant_id

    async with transaction(db):
        await db.execute(
            update(Task).where(Task.assigned_to == user_id).values(assigned_to=None)
        )
        await db.execute(delete(User).where(User.id == user_id))

    logger.info(
        f"User deleted: {user_id}",
        extra={"tenant_id": tenant_id, "user_id": ctx.id},
    )

    await AuditService.record(
        db,
        action=AuditAction.DELETE_USER,
        tenant_id=tenant_id,
        user_id=ctx.id,
        entity_type="user",
        entity_id=user_id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="User deleted successfully")
