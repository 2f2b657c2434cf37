"""Project schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from taskhub.core.enums import ProjectStatus
from taskhub.schemas.common import Pagination


class ProjectCreateRequest(BaseModel):
    """Request to create a project in the caller's tenant."""
    name: str = Field(..., min_length=2, max_length=255)
    description: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE


class ProjectUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None


class ProjectResponse(BaseModel):
    """Project response schema."""
    id: str
    tenant_id: str
    name: str
    description: str
    status: ProjectStatus
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectCreator(BaseModel):
    id: str
    full_name: str


class ProjectListItem(BaseModel):
    """Project row with creator and task counters."""
    id: str
    name: str
    description: str
    status: ProjectStatus
    created_by: Optional[ProjectCreator] = None
    task_count: int
    completed_task_count: int
    created_at: datetime


class ProjectListResponse(BaseModel):
    projects: List[ProjectListItem]
    total: int
    pagination: Pagination
