"""Enum definitions for the application."""
from enum import Enum


class TenantStatus(str, Enum):
    """Tenant lifecycle status."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    TRIAL = "trial"


class TenantPlan(str, Enum):
    """Tenant subscription plan options."""
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class UserRole(str, Enum):
    """User role options."""
    SUPER_ADMIN = "super_admin"
    TENANT_ADMIN = "tenant_admin"
    USER = "user"


class ProjectStatus(str, Enum):
    """Project status options."""
    ACTIVE = "active"
    ARCHIVED = "archived"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    """Task status options."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority options."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""
    REGISTER_TENANT = "REGISTER_TENANT"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    UPDATE_TENANT = "UPDATE_TENANT"
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    UPDATE_SELF = "UPDATE_SELF"
    DELETE_USER = "DELETE_USER"
    CREATE_PROJECT = "CREATE_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"
    CREATE_TASK = "CREATE_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    UPDATE_TASK_STATUS = "UPDATE_TASK_STATUS"


# max_users / max_projects per plan
PLAN_LIMITS = {
    TenantPlan.FREE: (5, 3),
    TenantPlan.PRO: (25, 15),
    TenantPlan.ENTERPRISE: (100, 50),
}


def plan_limits(plan: TenantPlan) -> tuple[int, int]:
    """Return (max_users, max_projects) for a plan."""
    return PLAN_LIMITS.get(TenantPlan(plan), PLAN_LIMITS[TenantPlan.FREE])
