"""Tenant API endpoints."""
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func

from taskhub.core.audit import AuditService
from taskhub.core.dependencies import AuthCtx, DbSession, ScopedTenant, SuperAdminCtx, require_any_role
from taskhub.core.enums import AuditAction, TenantPlan, TenantStatus, UserRole
from taskhub.core.logging import get_logger
from taskhub.core.permissions import check_tenant_update
from taskhub.models.project import Project
from taskhub.models.task import Task
from taskhub.models.tenant import Tenant
from taskhub.models.user import User
from taskhub.schemas.common import ApiResponse
from taskhub.schemas.tenant import (
    TenantDetailResponse, TenantResponse, TenantStats, TenantUpdateRequest,
    TenantListItem, TenantListResponse, TenantPagination
)


router = APIRouter()
logger = get_logger(__name__)


def _count_by_tenant(column):
    """Correlated COUNT(*) of rows in `column`'s table owned by the outer tenant."""
    return (
        select(func.count())
        .select_from(column.table)
        .where(column == Tenant.id)
        .correlate(Tenant)
        .scalar_subquery()
    )


@router.get("", response_model=ApiResponse[TenantListResponse])
async def list_tenants(
    ctx: SuperAdminCtx,
    db: DbSession,
    status_filter: Optional[TenantStatus] = Query(None, alias="status"),
    subscription_plan: Optional[TenantPlan] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """List all tenants with user and project counts. Super admin only."""
    filters = []
    if status_filter:
        filters.append(Tenant.status == status_filter)
    if subscription_plan:
        filters.append(Tenant.subscription_plan == subscription_plan)

    total = (await db.execute(
        select(func.count(Tenant.id)).where(*filters)
    )).scalar() or 0

    result = await db.execute(
        select(
            Tenant,
            _count_by_tenant(User.tenant_id).label("total_users"),
            _count_by_tenant(Project.tenant_id).label("total_projects"),
        )
        .where(*filters)
        .order_by(Tenant.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    tenants = [
        TenantListItem(
            **TenantResponse.model_validate(tenant).model_dump(),
            total_users=total_users,
            total_projects=total_projects,
        )
        for tenant, total_users, total_projects in result.all()
    ]

    return ApiResponse(data=TenantListResponse(
        tenants=tenants,
        pagination=TenantPagination(
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_tenants=total,
            limit=limit,
        ),
    ))


@router.get("/{tenant_id}", response_model=ApiResponse[TenantDetailResponse])
async def get_tenant(
    tenant: ScopedTenant,
    db: DbSession,
):
    """Get tenant details with usage stats."""
    total_users = (await db.execute(
        select(func.count(User.id)).where(User.tenant_id == tenant.id)
    )).scalar() or 0
    total_projects = (await db.execute(
        select(func.count(Project.id)).where(Project.tenant_id == tenant.id)
    )).scalar() or 0
    total_tasks = (await db.execute(
        select(func.count(Task.id)).where(Task.tenant_id == tenant.id)
    )).scalar() or 0

    data = TenantDetailResponse(
        **TenantResponse.model_validate(tenant).model_dump(),
        stats=TenantStats(
            total_users=total_users,
            total_projects=total_projects,
            total_tasks=total_tasks,
        ),
    )
    return ApiResponse(data=data)


@router.put(
    "/{tenant_id}",
    response_model=ApiResponse[TenantResponse],
    dependencies=[Depends(require_any_role(UserRole.SUPER_ADMIN, UserRole.TENANT_ADMIN))],
)
async def update_tenant(
    payload: TenantUpdateRequest,
    tenant: ScopedTenant,
    ctx: AuthCtx,
    db: DbSession,
):
    """Update tenant fields. Status, plan and limits are reserved for the super admin."""
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    check_tenant_update(ctx, changes.keys())

    for field, value in changes.items():
        setattr(tenant, field, value)

    await db.commit()
    await db.refresh(tenant)

    logger.info(
        f"Tenant updated: {tenant.id}, fields: {sorted(changes)}",
        extra={"tenant_id": tenant.id, "user_id": ctx.id},
    )

    data = TenantResponse.model_validate(tenant)

    await AuditService.record(
        db,
        action=AuditAction.UPDATE_TENANT,
        tenant_id=data.id,
        user_id=ctx.id,
        entity_type="tenant",
        entity_id=data.id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="Tenant updated successfully", data=data)
