"""User schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from taskhub.core.enums import UserRole
from taskhub.schemas.common import Pagination


class UserResponse(BaseModel):
    """User response schema."""
    id: str
    tenant_id: Optional[str] = None
    email: str
    full_name: str
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


def _tenant_role(v: Optional[UserRole]) -> Optional[UserRole]:
    if v == UserRole.SUPER_ADMIN:
        raise ValueError("role must be 'user' or 'tenant_admin'")
    return v


class UserCreateRequest(BaseModel):
    """Tenant admin adding a member to their tenant."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=2, max_length=255)
    role: UserRole = UserRole.USER

    @field_validator("role")
    @classmethod
    def tenant_role_only(cls, v: UserRole) -> UserRole:
        return _tenant_role(v)


class UserUpdateRequest(BaseModel):
    """Partial user update. Omitted fields keep their stored values."""
    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("role")
    @classmethod
    def tenant_role_only(cls, v: Optional[UserRole]) -> Optional[UserRole]:
        return _tenant_role(v)


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
    pagination: Pagination
