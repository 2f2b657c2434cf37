"""Project API endpoints."""
from typing import Optional

from fastapi import APIRouter, Query, status
from sqlalchemy import select, func, delete

from taskhub.core.audit import AuditService
from taskhub.core.database import transaction
from taskhub.core.dependencies import AuthCtx, DbSession
from taskhub.core.enums import AuditAction, ProjectStatus, TaskStatus
from taskhub.core.exceptions import Forbidden
from taskhub.core.logging import get_logger
from taskhub.core.permissions import (
    ensure_can_modify_project, ensure_has_tenant, ensure_project_readable
)
from taskhub.models.project import Project
from taskhub.models.task import Task
from taskhub.models.tenant import Tenant
from taskhub.models.user import User
from taskhub.schemas.common import ApiResponse, build_pagination
from taskhub.schemas.project import (
    ProjectCreateRequest, ProjectUpdateRequest, ProjectResponse,
    ProjectCreator, ProjectListItem, ProjectListResponse
)


router = APIRouter()
logger = get_logger(__name__)


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreateRequest,
    ctx: AuthCtx,
    db: DbSession,
):
    """Create a project in the caller's tenant, within the plan's project limit."""
    tenant_id = ensure_has_tenant(ctx)
    tenant = await db.get(Tenant, tenant_id)
    max_projects = tenant.max_projects if tenant is not None else 0

    project_count = (await db.execute(
        select(func.count(Project.id)).where(Project.tenant_id == tenant_id)
    )).scalar() or 0
    # Best-effort: two concurrent creates can both pass this check
    if project_count >= max_projects:
        raise Forbidden("Project limit reached")

    project = Project(
        tenant_id=tenant_id,
        name=payload.name,
        description=payload.description,
        status=payload.status,
        created_by=ctx.id,
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)

    logger.info(
        f"Project created: {project.id}, tenant: {tenant_id}",
        extra={"tenant_id": tenant_id, "user_id": ctx.id},
    )

    data = ProjectResponse.model_validate(project)

    await AuditService.record(
        db,
        action=AuditAction.CREATE_PROJECT,
        tenant_id=tenant_id,
        user_id=ctx.id,
        entity_type="project",
        entity_id=data.id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="Project created successfully", data=data)


@router.get("", response_model=ApiResponse[ProjectListResponse])
async def list_projects(
    ctx: AuthCtx,
    db: DbSession,
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """List projects in the caller's tenant with task counters."""
    filters = [Project.tenant_id == ctx.tenant_id]
    if status_filter:
        filters.append(Project.status == status_filter)
    if search:
        filters.append(func.lower(Project.name).like(f"%{search.lower()}%"))

    total = (await db.execute(
        select(func.count(Project.id)).where(*filters)
    )).scalar() or 0

    task_count = (
        select(func.count(Task.id))
        .where(Task.project_id == Project.id)
        .correlate(Project)
        .scalar_subquery()
    )
    completed_task_count = (
        select(func.count(Task.id))
        .where(Task.project_id == Project.id, Task.status == TaskStatus.COMPLETED)
        .correlate(Project)
        .scalar_subquery()
    )

    result = await db.execute(
        select(
            Project,
            User.full_name,
            task_count.label("task_count"),
            completed_task_count.label("completed_task_count"),
        )
        .outerjoin(User, User.id == Project.created_by)
        .where(*filters)
        .order_by(Project.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    projects = [
        ProjectListItem(
            id=project.id,
            name=project.name,
            description=project.description,
            status=project.status,
            created_by=(
                ProjectCreator(id=project.created_by, full_name=creator_name)
                if project.created_by and creator_name is not None else None
            ),
            task_count=tasks or 0,
            completed_task_count=completed or 0,
            created_at=project.created_at,
        )
        for project, creator_name, tasks, completed in result.all()
    ]

    return ApiResponse(data=ProjectListResponse(
        projects=projects,
        total=total,
        pagination=build_pagination(page, limit, total),
    ))


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def get_project(
    project_id: str,
    ctx: AuthCtx,
    db: DbSession,
):
    """Get a project by id."""
    project = ensure_project_readable(ctx, await db.get(Project, project_id))
    return ApiResponse(data=ProjectResponse.model_validate(project))


@router.put("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def update_project(
    project_id: str,
    payload: ProjectUpdateRequest,
    ctx: AuthCtx,
    db: DbSession,
):
    """Update a project. Only a tenant_admin or the project's creator may do so."""
    project = ensure_can_modify_project(ctx, await db.get(Project, project_id))

    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    for field, value in changes.items():
        setattr(project, field, value)

    await db.commit()
    await db.refresh(project)

    logger.info(
        f"Project updated: {project.id}, fields: {sorted(changes)}",
        extra={"tenant_id": project.tenant_id, "user_id": ctx.id},
    )

    data = ProjectResponse.model_validate(project)

    await AuditService.record(
        db,
        action=AuditAction.UPDATE_PROJECT,
        tenant_id=data.tenant_id,
        user_id=ctx.id,
        entity_type="project",
        entity_id=data.id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="Project updated successfully", data=data)


@router.delete("/{project_id}", response_model=ApiResponse[None])
async def delete_project(
    project_id: str,
    ctx: AuthCtx,
    db: DbSession,
):
    """Delete a project and all of its tasks."""
    project = ensure_can_modify_project(ctx, await db.get(Project, project_id))
    tenant_id = project.tenant_id

    async with transaction(db):
        await db.execute(delete(Task).where(Task.project_id == project_id))
        await db.execute(delete(Project).where(Project.id == project_id))

    logger.info(
        f"Project deleted: {project_id}",
        extra={"tenant_id": tenant_id, "user_id": ctx.id},
    )

    await AuditService.record(
        db,
        action=AuditAction.DELETE_PROJECT,
        tenant_id=tenant_id,
        user_id=ctx.id,
        entity_type="project",
        entity_id=project_id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="Project deleted successfully")
