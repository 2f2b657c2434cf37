"""Tenant schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from taskhub.core.enums import TenantPlan, TenantStatus


class TenantSummary(BaseModel):
    """Tenant fields embedded in the current-user profile."""
    id: str
    name: str
    subdomain: str
    status: TenantStatus
    subscription_plan: TenantPlan
    max_users: int
    max_projects: int

    class Config:
        from_attributes = True


class TenantResponse(TenantSummary):
    """Tenant response schema."""
    created_at: datetime
    updated_at: datetime


class TenantStats(BaseModel):
    total_users: int
    total_projects: int
    total_tasks: int


class TenantDetailResponse(TenantResponse):
    """Tenant with usage counters."""
    stats: TenantStats


class TenantUpdateRequest(BaseModel):
    """Partial tenant update. Only the fields present in the body are applied."""
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    status: Optional[TenantStatus] = None
    subscription_plan: Optional[TenantPlan] = None
    max_users: Optional[int] = Field(None, ge=1)
    max_projects: Optional[int] = Field(None, ge=1)


class TenantListItem(TenantResponse):
    total_users: int
    total_projects: int


class TenantPagination(BaseModel):
    current_page: int
    total_pages: int
    total_tenants: int
    limit: int


class TenantListResponse(BaseModel):
    """Paginated tenant listing for super admins."""
    tenants: List[TenantListItem]
    pagination: TenantPagination
