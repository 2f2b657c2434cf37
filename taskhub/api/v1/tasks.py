"""Task API endpoints."""
from typing import Optional

from fastapi import APIRouter, Query, status
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskhub.core.audit import AuditService
from taskhub.core.dependencies import AuthCtx, DbSession
from taskhub.core.enums import AuditAction, TaskPriority, TaskStatus
from taskhub.core.exceptions import BadRequest, NotFound
from taskhub.core.logging import get_logger
from taskhub.core.permissions import AuthContext, ensure_project_readable, ensure_same_tenant
from taskhub.models.project import Project
from taskhub.models.task import Task
from taskhub.models.user import User
from taskhub.schemas.common import ApiResponse, build_pagination
from taskhub.schemas.task import (
    TaskCreateRequest, TaskUpdateRequest, TaskStatusUpdateRequest,
    TaskResponse, TaskListItem, TaskListResponse, TaskAssignee
)


router = APIRouter()
logger = get_logger(__name__)

# high -> medium -> low, then earliest due date with undated tasks last
PRIORITY_RANK = case(
    (Task.priority == TaskPriority.HIGH, 1),
    (Task.priority == TaskPriority.MEDIUM, 2),
    else_=3,
)
DUE_DATE_NULLS_LAST = case((Task.due_date.is_(None), 1), else_=0)


async def ensure_assignee_in_tenant(db: AsyncSession, assigned_to: Optional[str], tenant_id: str) -> None:
    if assigned_to is None:
        return
    result = await db.execute(
        select(User.id).where(User.id == assigned_to, User.tenant_id == tenant_id)
    )
    if result.scalar_one_or_none() is None:
        raise BadRequest("assigned_to must belong to same tenant")


async def load_task(db: AsyncSession, ctx: AuthContext, task_id: str) -> Task:
    task = await db.get(Task, task_id)
    if task is None:
        raise NotFound("Task not found")
    ensure_same_tenant(ctx, task.tenant_id)
    return task


@router.post(
    "/projects/{project_id}/tasks",
    response_model=ApiResponse[TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    project_id: str,
    payload: TaskCreateRequest,
    ctx: AuthCtx,
    db: DbSession,
):
    """Create a task in a project of the caller's tenant."""
    project = ensure_project_readable(ctx, await db.get(Project, project_id))
    await ensure_assignee_in_tenant(db, payload.assigned_to, project.tenant_id)

    task = Task(
        project_id=project.id,
        tenant_id=project.tenant_id,
        title=payload.title,
        description=payload.description,
        status=TaskStatus.TODO,
        priority=payload.priority,
        assigned_to=payload.assigned_to,
        due_date=payload.due_date,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)

    logger.info(
        f"Task created: {task.id}, project: {project.id}",
        extra={"tenant_id": task.tenant_id, "user_id": ctx.id},
    )

    data = TaskResponse.model_validate(task)

    await AuditService.record(
        db,
        action=AuditAction.CREATE_TASK,
        tenant_id=data.tenant_id,
        user_id=ctx.id,
        entity_type="task",
        entity_id=data.id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="Task created successfully", data=data)


@router.get("/projects/{project_id}/tasks", response_model=ApiResponse[TaskListResponse])
async def list_project_tasks(
    project_id: str,
    ctx: AuthCtx,
    db: DbSession,
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    assigned_to: Optional[str] = None,
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
):
    """List a project's tasks, most urgent first."""
    project = ensure_project_readable(ctx, await db.get(Project, project_id))

    filters = [Task.project_id == project.id]
    if status_filter:
        filters.append(Task.status == status_filter)
    if assigned_to:
        filters.append(Task.assigned_to == assigned_to)
    if priority:
        filters.append(Task.priority == priority)
    if search:
        filters.append(func.lower(Task.title).like(f"%{search.lower()}%"))

    total = (await db.execute(
        select(func.count(Task.id)).where(*filters)
    )).scalar() or 0

    result = await db.execute(
        select(Task)
        .options(selectinload(Task.assignee))
        .where(*filters)
        .order_by(PRIORITY_RANK, DUE_DATE_NULLS_LAST, Task.due_date.asc(), Task.created_at.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    tasks = [
        TaskListItem(
            **TaskResponse.model_validate(task).model_dump(),
            assignee=TaskAssignee.model_validate(task.assignee) if task.assignee else None,
        )
        for task in result.scalars().all()
    ]

    return ApiResponse(data=TaskListResponse(
        tasks=tasks,
        total=total,
        pagination=build_pagination(page, limit, total),
    ))


@router.patch("/tasks/{task_id}/status", response_model=ApiResponse[TaskResponse])
async def update_task_status(
    task_id: str,
    payload: TaskStatusUpdateRequest,
    ctx: AuthCtx,
    db: DbSession,
):
    """Move a task to another status."""
    task = await load_task(db, ctx, task_id)

    task.status = payload.status
    await db.commit()
    await db.refresh(task)

    logger.info(
        f"Task status changed: {task.id} -> {task.status.value}",
        extra={"tenant_id": task.tenant_id, "user_id": ctx.id},
    )

    data = TaskResponse.model_validate(task)

    await AuditService.record(
        db,
        action=AuditAction.UPDATE_TASK_STATUS,
        tenant_id=data.tenant_id,
        user_id=ctx.id,
        entity_type="task",
        entity_id=data.id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="Task status updated", data=data)


@router.put("/tasks/{task_id}", response_model=ApiResponse[TaskResponse])
async def update_task(
    task_id: str,
    payload: TaskUpdateRequest,
    ctx: AuthCtx,
    db: DbSession,
):
    """Update task fields. An explicit null clears the assignee or due date."""
    task = await load_task(db, ctx, task_id)

    changes = payload.model_dump(exclude_unset=True)
    # Only these may be cleared; a null for any other field is ignored
    changes = {
        k: v for k, v in changes.items()
        if v is not None or k in ("assigned_to", "due_date")
    }
    if changes.get("assigned_to") is not None:
        await ensure_assignee_in_tenant(db, changes["assigned_to"], task.tenant_id)

    for field, value in changes.items():
        setattr(task, field, value)

    await db.commit()
    await db.refresh(task)

    logger.info(
        f"Task updated: {task.id}, fields: {sorted(changes)}",
        extra={"tenant_id": task.tenant_id, "user_id": ctx.id},
    )

    data = TaskResponse.model_validate(task)

    await AuditService.record(
        db,
        action=AuditAction.UPDATE_TASK,
        tenant_id=data.tenant_id,
        user_id=ctx.id,
        entity_type="task",
        entity_id=data.id,
        ip_address=ctx.ip_address,
    )

    return ApiResponse(message="Task updated successfully", data=data)
