"""Pydantic schemas."""
from taskhub.schemas.common import ApiResponse, Pagination, build_pagination
from taskhub.schemas.tenant import (
    TenantSummary, TenantResponse, TenantDetailResponse, TenantUpdateRequest,
    TenantListResponse
)
from taskhub.schemas.user import (
    UserResponse, UserCreateRequest, UserUpdateRequest, UserListResponse
)
from taskhub.schemas.auth import (
    RegisterTenantRequest, RegisterTenantResponse, LoginRequest, LoginResponse,
    MeResponse
)
from taskhub.schemas.project import (
    ProjectCreateRequest, ProjectUpdateRequest, ProjectResponse, ProjectListResponse
)
from taskhub.schemas.task import (
    TaskCreateRequest, TaskUpdateRequest, TaskStatusUpdateRequest, TaskResponse,
    TaskListResponse
)

__all__ = [
    "ApiResponse", "Pagination", "build_pagination",
    "TenantSummary", "TenantResponse", "TenantDetailResponse", "TenantUpdateRequest",
    "TenantListResponse",
    "UserResponse", "UserCreateRequest", "UserUpdateRequest", "UserListResponse",
    "RegisterTenantRequest", "RegisterTenantResponse", "LoginRequest", "LoginResponse",
    "MeResponse",
    "ProjectCreateRequest", "ProjectUpdateRequest", "ProjectResponse", "ProjectListResponse",
    "TaskCreateRequest", "TaskUpdateRequest", "TaskStatusUpdateRequest", "TaskResponse",
    "TaskListResponse",
]
