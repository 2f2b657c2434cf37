"""Authorization rules.

Pure functions over the authenticated caller and already-loaded rows. Each
either returns normally or raises a domain error; none of them touch the
database. Route handlers and the dependencies in `taskhub.core.dependencies`
compose them in a fixed order (existence first, then tenant, then role or
ownership).
"""
from typing import Iterable, Optional, TYPE_CHECKING

from taskhub.core.enums import AuditAction, UserRole
from taskhub.core.exceptions import BadRequest, Forbidden, NotFound

if TYPE_CHECKING:
    from taskhub.models.project import Project
    from taskhub.models.tenant import Tenant
    from taskhub.models.user import User

# Fields only a super admin may change on a tenant
PRIVILEGED_TENANT_FIELDS = frozenset({"status", "subscription_plan", "max_users", "max_projects"})


class AuthContext:
    """Identity of the caller, rebuilt from the users table on every request."""

    def __init__(
        self,
        id: str,
        tenant_id: Optional[str],
        email: str,
        full_name: str,
        role: UserRole,
        is_active: bool = True,
        ip_address: Optional[str] = None,
    ):
        self.id = id
        self.tenant_id = tenant_id
        self.email = email
        self.full_name = full_name
        self.role = UserRole(role)
        self.is_active = is_active
        self.ip_address = ip_address

    @classmethod
    def from_user(cls, user: "User", ip_address: Optional[str] = None) -> "AuthContext":
        return cls(
            id=user.id,
            tenant_id=user.tenant_id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            is_active=user.is_active,
            ip_address=ip_address,
        )

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def is_tenant_admin(self) -> bool:
        return self.role == UserRole.TENANT_ADMIN

    def __repr__(self) -> str:
        return f"AuthContext(id={self.id!r}, tenant_id={self.tenant_id!r}, role={self.role.value!r})"


def ensure_tenant_access(ctx: AuthContext, tenant: Optional["Tenant"]) -> "Tenant":
    """Existence is checked before membership, so a missing tenant is 404 for everyone."""
    if tenant is None:
        raise NotFound("Tenant not found")
    if ctx.is_super_admin:
        return tenant
    if ctx.tenant_id != tenant.id:
        raise Forbidden("Unauthorized tenant access")
    return tenant


def ensure_role(ctx: AuthContext, role: UserRole) -> None:
    if ctx.role != role:
        raise Forbidden("Insufficient role")


def ensure_any_role(ctx: AuthContext, roles: Iterable[UserRole]) -> None:
    if ctx.role not in set(roles):
        raise Forbidden("Insufficient role")


def ensure_has_tenant(ctx: AuthContext) -> str:
    """Tenant-owned resources cannot be created by a tenant-less caller."""
    if ctx.tenant_id is None:
        raise Forbidden()
    return ctx.tenant_id


def ensure_same_tenant(ctx: AuthContext, tenant_id: Optional[str]) -> None:
    """Row-level isolation for projects and tasks. No super admin bypass."""
    if tenant_id is None or ctx.tenant_id != tenant_id:
        raise Forbidden()


def ensure_tenant_admin_of(ctx: AuthContext, tenant_id: Optional[str]) -> None:
    if not (ctx.is_tenant_admin and ctx.tenant_id is not None and ctx.tenant_id == tenant_id):
        raise Forbidden()


def ensure_can_modify_project(ctx: AuthContext, project: Optional["Project"]) -> "Project":
    if project is None:
        raise NotFound("Project not found")
    ensure_same_tenant(ctx, project.tenant_id)
    if not (ctx.is_tenant_admin or ctx.id == project.created_by):
        raise Forbidden()
    return project


def ensure_project_readable(ctx: AuthContext, project: Optional["Project"]) -> "Project":
    if project is None:
        raise NotFound("Project not found")
    ensure_same_tenant(ctx, project.tenant_id)
    return project


def check_tenant_update(ctx: AuthContext, fields: Iterable[str]) -> None:
    """Reject empty updates, and plan or status changes by anyone below super admin."""
    fields = set(fields)
    if not fields:
        raise BadRequest("Nothing to update")
    if not ctx.is_super_admin and fields & PRIVILEGED_TENANT_FIELDS:
        raise Forbidden("Only a super admin can change status, plan or limits")


def check_user_update(ctx: AuthContext, target: Optional["User"], fields: Iterable[str]) -> AuditAction:
    """Decide whether the caller may apply `fields` to `target`.

    Returns the audit action that describes the update.
    """
    if target is None:
        raise NotFound("User not found")
    fields = set(fields)
    if not fields:
        raise BadRequest("Nothing to update")
    if ctx.id == target.id and fields == {"full_name"}:
        return AuditAction.UPDATE_SELF
    ensure_tenant_admin_of(ctx, target.tenant_id)
    return AuditAction.UPDATE_USER


def check_user_delete(ctx: AuthContext, target: Optional["User"]) -> "User":
    if target is None:
        raise NotFound("User not found")
    ensure_tenant_admin_of(ctx, target.tenant_id)
    if ctx.id == target.id:
        raise Forbidden("Cannot delete yourself")
    return target
