"""Authentication schemas."""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from taskhub.schemas.tenant import TenantSummary
from taskhub.schemas.user import UserResponse


class RegisterTenantRequest(BaseModel):
    """Self-service signup: a new tenant plus its first tenant_admin."""
    tenant_name: str = Field(..., min_length=2, max_length=255)
    subdomain: str = Field(..., min_length=3, max_length=63)
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=8)
    admin_full_name: str = Field(..., min_length=2, max_length=255)


class RegisterTenantResponse(BaseModel):
    """Created tenant id, its subdomain and the admin account."""
    tenant_id: str
    subdomain: str
    admin_user: UserResponse


class LoginRequest(BaseModel):
    """Login request schema.

    `tenant_id` wins over `tenant_subdomain` when both are sent. Sending
    neither targets the tenant-less super admin.
    """
    email: EmailStr
    password: str = Field(..., min_length=8)
    tenant_subdomain: Optional[str] = None
    tenant_id: Optional[str] = None


class LoginResponse(BaseModel):
    """Login response with user and token."""
    user: UserResponse
    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class MeResponse(UserResponse):
    """Current user with a summary of their tenant (None for super admin)."""
    tenant: Optional[TenantSummary] = None
