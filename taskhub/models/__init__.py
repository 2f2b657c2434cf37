"""SQLAlchemy models."""
from taskhub.models.tenant import Tenant
from taskhub.models.user import User
from taskhub.models.project import Project
from taskhub.models.task import Task
from taskhub.models.audit_log import AuditLog

__all__ = ["Tenant", "User", "Project", "Task", "AuditLog"]
