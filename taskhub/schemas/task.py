"""Task schemas."""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from taskhub.core.enums import TaskPriority, TaskStatus
from taskhub.schemas.common import Pagination


class TaskCreateRequest(BaseModel):
    """Request to create a task inside a project."""
    title: str = Field(..., min_length=2, max_length=255)
    description: str = ""
    assigned_to: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None


class TaskUpdateRequest(BaseModel):
    """Partial task update.

    Omitted fields are left alone; an explicit null clears
    `assigned_to` or `due_date`.
    """
    title: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None


class TaskStatusUpdateRequest(BaseModel):
    status: TaskStatus


class TaskAssignee(BaseModel):
    id: str
    full_name: str
    email: str

    class Config:
        from_attributes = True


class TaskResponse(BaseModel):
    """Task response schema."""
    id: str
    project_id: str
    tenant_id: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskListItem(TaskResponse):
    assignee: Optional[TaskAssignee] = None


class TaskListResponse(BaseModel):
    tasks: List[TaskListItem]
    total: int
    pagination: Pagination
